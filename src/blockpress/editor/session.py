"""Stateful editing session.

``EditorSession`` owns the ``EditorState`` of one open content item. It
routes every edit through the pure functions in ``mutations``, tells the
host when the block list changed, and wraps hydration and saving so that
codec failures never escape into the editing surface.

Usage:
    session = EditorSession(on_change=autosave.schedule)
    result = session.load(api.get_content(content_id)["blocks"])
    if not result.success:
        show_error(result.user_message)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from ..codec.deserializer import deserialize_blocks
from ..codec.schema import validate_blocks
from ..codec.serializer import PersistedBlock, serialize_blocks
from ..errors import (
    BlockNotFoundError,
    BlockPressError,
    MutationRejectedError,
    Result,
)
from ..settings import settings
from . import mutations
from .models import Block, BlockType, EditorState, InlineContent

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Content not found or failed to load"
SAVE_FAILED_MESSAGE = "Failed to save content"

ChangeCallback = Callable[[list[Block]], None]
SubmitCallback = Callable[[list[PersistedBlock]], Any]


class EditorSession:
    """Single-owner wrapper around an ``EditorState``.

    Attributes:
        strict: Raise ``MutationError`` where the pure engine would silently
            return the state unchanged.
        validate_on_save: Run the content schema over serializer output
            before handing it to the submit callback.
    """

    def __init__(
        self,
        initial_blocks: Iterable[Block] | None = None,
        *,
        on_change: ChangeCallback | None = None,
        strict: bool | None = None,
        validate_on_save: bool | None = None,
    ) -> None:
        self._state = EditorState.create(list(initial_blocks or ()))
        self._on_change = on_change
        self.strict = settings.strict_mutations if strict is None else strict
        self.validate_on_save = (
            settings.validate_on_save if validate_on_save is None else validate_on_save
        )

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def blocks(self) -> list[Block]:
        return list(self._state.blocks)

    @property
    def active_block_id(self) -> str | None:
        return self._state.active_block_id

    @property
    def active_block(self) -> Block | None:
        """The focused block, or None when focus is unset or dangling."""
        return self._state.active_block

    def get_block(self, block_id: str) -> Block | None:
        return self._state.get(block_id)

    # -------------------------------------------------------------------------
    # Focus
    # -------------------------------------------------------------------------

    def set_active_block(self, block_id: str | None) -> EditorState:
        """Point focus at a block. Focusing the focused block is not an error."""
        self._state = mutations.set_active_block(self._state, block_id)
        return self._state

    focus_block = set_active_block

    def focus_previous_block(self, block_id: str) -> EditorState:
        return self._apply(
            "focus_previous_block",
            block_id,
            mutations.focus_previous_block(self._state, block_id),
        )

    def focus_next_block(self, block_id: str) -> EditorState:
        return self._apply(
            "focus_next_block",
            block_id,
            mutations.focus_next_block(self._state, block_id),
        )

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def update_block_content(self, block_id: str, content: Iterable[InlineContent]) -> EditorState:
        return self._apply(
            "update_block_content",
            block_id,
            mutations.update_block_content(self._state, block_id, content),
        )

    def update_block(self, block_id: str, updates: Mapping[str, Any]) -> EditorState:
        return self._apply(
            "update_block",
            block_id,
            mutations.update_block(self._state, block_id, updates),
        )

    def insert_block_after(self, after_id: str, new_block: Block | None = None) -> EditorState:
        return self._apply(
            "insert_block_after",
            after_id,
            mutations.insert_block_after(self._state, after_id, new_block),
        )

    def insert_block_before(self, before_id: str, new_block: Block | None = None) -> EditorState:
        return self._apply(
            "insert_block_before",
            before_id,
            mutations.insert_block_before(self._state, before_id, new_block),
        )

    def delete_block(self, block_id: str) -> EditorState:
        return self._apply(
            "delete_block",
            block_id,
            mutations.delete_block(self._state, block_id),
        )

    def merge_with_previous(self, block_id: str) -> EditorState:
        return self._apply(
            "merge_with_previous",
            block_id,
            mutations.merge_with_previous(self._state, block_id),
        )

    def convert_block_type(
        self,
        block_id: str,
        new_type: BlockType | str,
        attrs: Mapping[str, Any] | None = None,
    ) -> EditorState:
        return self._apply(
            "convert_block_type",
            block_id,
            mutations.convert_block_type(self._state, block_id, new_type, attrs),
        )

    def convert_active_block(
        self,
        new_type: BlockType | str,
        attrs: Mapping[str, Any] | None = None,
    ) -> EditorState:
        """Convert the focused block; does nothing when no block is focused."""
        active = self.active_block
        if active is None:
            logger.debug("convert_active_block ignored: no active block")
            return self._state
        return self.convert_block_type(active.id, new_type, attrs)

    def move_block_up(self, block_id: str) -> EditorState:
        return self._apply(
            "move_block_up",
            block_id,
            mutations.move_block_up(self._state, block_id),
        )

    def move_block_down(self, block_id: str) -> EditorState:
        return self._apply(
            "move_block_down",
            block_id,
            mutations.move_block_down(self._state, block_id),
        )

    def set_blocks(self, blocks: Iterable[Block]) -> EditorState:
        return self._apply("set_blocks", None, mutations.set_blocks(self._state, blocks))

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self, persisted: Sequence[Mapping[str, Any]] | None) -> Result[EditorState]:
        """Hydrate from persisted blocks.

        On failure the current document is left as it was.
        """
        try:
            blocks = deserialize_blocks(persisted)
        except BlockPressError as exc:
            logger.warning("Failed to load content: %s", exc.message)
            return Result.fail(exc, user_message=LOAD_FAILED_MESSAGE)

        self.set_blocks(blocks)
        return Result.ok(self._state)

    def save(self, submit: SubmitCallback | None = None) -> Result[list[PersistedBlock]]:
        """Serialize the document and hand it to ``submit``.

        Never raises. Whatever ``submit`` raises is reported through the
        returned result.
        """
        try:
            payload = serialize_blocks(self._state.blocks)
            if self.validate_on_save:
                validate_blocks(payload)
            if submit is not None:
                submit(payload)
        except BlockPressError as exc:
            logger.warning("Failed to save content: %s", exc.message)
            return Result.fail(exc, user_message=SAVE_FAILED_MESSAGE)
        except Exception as exc:
            logger.warning("Save callback failed: %s", exc, exc_info=True)
            error = BlockPressError(
                f"Save failed: {exc}",
                recoverable=True,
                context={"exception": type(exc).__name__},
            )
            return Result.fail(error, user_message=SAVE_FAILED_MESSAGE)

        return Result.ok(payload)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply(self, operation: str, block_id: str | None, new_state: EditorState) -> EditorState:
        old_state = self._state
        if new_state is old_state:
            if self.strict:
                raise self._rejection(operation, block_id)
            return old_state

        self._state = new_state
        if new_state.blocks != old_state.blocks:
            self._notify()
        return new_state

    def _rejection(self, operation: str, block_id: str | None) -> BlockPressError:
        if self._state.index_of(block_id) == -1:
            return BlockNotFoundError(
                f"Block not found: {block_id}",
                operation=operation,
                block_id=block_id,
            )
        return MutationRejectedError(
            f"{operation} does not apply to block {block_id}",
            operation=operation,
            block_id=block_id,
        )

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(list(self._state.blocks))
