"""Mutation engine for the block document.

Every operation takes an ``EditorState`` snapshot and returns a new one.
Invalid targets (unknown id, first/last block, ineligible merge) are not
errors: the operation returns the *same* state object, so callers can detect
a no-op with ``new is old`` but cannot tell why it happened. Strict callers
use ``EditorSession(strict=True)``, which turns these no-ops into exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from .models import (
    LIST_TYPES,
    MERGEABLE_TYPES,
    Block,
    BlockType,
    EditorState,
    InlineContent,
    empty_content,
    empty_paragraph,
    new_block_id,
)

logger = logging.getLogger(__name__)

# Fields update_block may merge into a block
UPDATABLE_FIELDS = frozenset({"type", "content", "attrs"})

# Variants whose text lives in attrs; they never carry inline content
NO_INLINE_TYPES = LIST_TYPES | {BlockType.CODE}


def _noop(state: EditorState, operation: str, block_id: str | None, reason: str) -> EditorState:
    logger.debug("%s ignored for %s: %s", operation, block_id, reason)
    return state


def _changed(operation: str, block_id: str | None) -> None:
    logger.debug("%s applied to %s", operation, block_id)


def _replace_at(blocks: tuple[Block, ...], index: int, block: Block) -> tuple[Block, ...]:
    return blocks[:index] + (block,) + blocks[index + 1:]


def _unique(state: EditorState, block: Block) -> Block:
    """Re-mint the id of an incoming block that collides with an existing one."""
    if state.index_of(block.id) == -1:
        return block
    fresh = new_block_id()
    logger.debug("Block id %s already in document, using %s", block.id, fresh)
    return replace(block, id=fresh)


# =============================================================================
# Focus
# =============================================================================


def set_active_block(state: EditorState, block_id: str | None) -> EditorState:
    """Point focus at ``block_id``.

    The id is not checked against the document; keeping it valid is the
    caller's job.
    """
    if state.active_block_id == block_id:
        return state
    return replace(state, active_block_id=block_id)


focus_block = set_active_block


def focus_previous_block(state: EditorState, block_id: str) -> EditorState:
    """Move focus to the block before ``block_id``."""
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "focus_previous_block", block_id, "not found")
    if index == 0:
        return _noop(state, "focus_previous_block", block_id, "first block")
    return replace(state, active_block_id=state.blocks[index - 1].id)


def focus_next_block(state: EditorState, block_id: str) -> EditorState:
    """Move focus to the block after ``block_id``."""
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "focus_next_block", block_id, "not found")
    if index >= len(state.blocks) - 1:
        return _noop(state, "focus_next_block", block_id, "last block")
    return replace(state, active_block_id=state.blocks[index + 1].id)


# =============================================================================
# Content updates
# =============================================================================


def update_block_content(
    state: EditorState,
    block_id: str,
    content: Iterable[InlineContent],
) -> EditorState:
    """Replace the inline runs of a block."""
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "update_block_content", block_id, "not found")
    if state.blocks[index].type in NO_INLINE_TYPES:
        return _noop(
            state,
            "update_block_content",
            block_id,
            "code and list blocks hold no inline content",
        )

    block = replace(state.blocks[index], content=tuple(content))
    _changed("update_block_content", block_id)
    return replace(state, blocks=_replace_at(state.blocks, index, block))


def update_block(
    state: EditorState,
    block_id: str,
    updates: Mapping[str, Any],
) -> EditorState:
    """Shallow-merge ``updates`` into a block.

    ``updates`` may carry ``type``, ``content`` and ``attrs``; ``attrs``
    replaces the whole mapping rather than merging key by key.

    Raises:
        ValueError: If ``updates`` names a field that cannot be updated.
    """
    unknown = set(updates) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update block fields: {', '.join(sorted(unknown))}")

    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "update_block", block_id, "not found")

    changes: dict[str, Any] = {}
    if "type" in updates:
        changes["type"] = BlockType(updates["type"])
    if "content" in updates:
        content = updates["content"]
        changes["content"] = tuple(content) if content is not None else None
    if "attrs" in updates:
        changes["attrs"] = dict(updates["attrs"] or {})

    block = replace(state.blocks[index], **changes)
    if block.type in NO_INLINE_TYPES and block.content is not None:
        block = replace(block, content=None)
    _changed("update_block", block_id)
    return replace(state, blocks=_replace_at(state.blocks, index, block))


# =============================================================================
# Structure
# =============================================================================


def insert_block_after(
    state: EditorState,
    after_id: str,
    new_block: Block | None = None,
) -> EditorState:
    """Insert a block right after ``after_id`` and focus it.

    This is what Enter does in a text block. Defaults to an empty paragraph.
    """
    index = state.index_of(after_id)
    if index == -1:
        return _noop(state, "insert_block_after", after_id, "not found")

    block = _unique(state, new_block or empty_paragraph())
    blocks = state.blocks[:index + 1] + (block,) + state.blocks[index + 1:]
    _changed("insert_block_after", after_id)
    return EditorState(blocks=blocks, active_block_id=block.id)


def insert_block_before(
    state: EditorState,
    before_id: str,
    new_block: Block | None = None,
) -> EditorState:
    """Insert a block right before ``before_id`` and focus it."""
    index = state.index_of(before_id)
    if index == -1:
        return _noop(state, "insert_block_before", before_id, "not found")

    block = _unique(state, new_block or empty_paragraph())
    blocks = state.blocks[:index] + (block,) + state.blocks[index:]
    _changed("insert_block_before", before_id)
    return EditorState(blocks=blocks, active_block_id=block.id)


def delete_block(state: EditorState, block_id: str) -> EditorState:
    """Remove a block.

    Removing the only block leaves a single fresh empty paragraph, which
    becomes active. Otherwise focus moves to the block now at
    ``max(0, removed_index - 1)``.
    """
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "delete_block", block_id, "not found")

    _changed("delete_block", block_id)
    if len(state.blocks) <= 1:
        block = empty_paragraph()
        return EditorState(blocks=(block,), active_block_id=block.id)

    blocks = state.blocks[:index] + state.blocks[index + 1:]
    return EditorState(blocks=blocks, active_block_id=blocks[max(0, index - 1)].id)


def merge_with_previous(state: EditorState, block_id: str) -> EditorState:
    """Join a block onto its predecessor.

    Only paragraphs and headings merge, in any combination. The predecessor
    keeps its id and type; its runs come first. Focus moves to it.
    """
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "merge_with_previous", block_id, "not found")
    if index == 0:
        return _noop(state, "merge_with_previous", block_id, "first block")

    current = state.blocks[index]
    previous = state.blocks[index - 1]
    if current.type not in MERGEABLE_TYPES or previous.type not in MERGEABLE_TYPES:
        return _noop(
            state,
            "merge_with_previous",
            block_id,
            f"cannot merge {current.type.value} into {previous.type.value}",
        )

    merged = replace(previous, content=(previous.content or ()) + (current.content or ()))
    blocks = state.blocks[:index - 1] + (merged,) + state.blocks[index + 1:]
    _changed("merge_with_previous", block_id)
    return EditorState(blocks=blocks, active_block_id=previous.id)


def convert_block_type(
    state: EditorState,
    block_id: str,
    new_type: BlockType | str,
    attrs: Mapping[str, Any] | None = None,
) -> EditorState:
    """Relabel a block in place, keeping its id.

    ``attrs`` replaces the existing attrs when given. Attrs of the former
    variant are not translated; a renderer ignores keys it does not know.
    Code blocks lose their inline content; every other variant keeps it, or
    gets a single empty run.
    """
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "convert_block_type", block_id, "not found")

    target = BlockType(new_type)
    block = state.blocks[index]
    if target == BlockType.CODE:
        content = None
    else:
        content = block.content if block.content is not None else empty_content()

    converted = replace(
        block,
        type=target,
        attrs=dict(attrs) if attrs is not None else dict(block.attrs),
        content=content,
    )
    _changed("convert_block_type", block_id)
    return replace(state, blocks=_replace_at(state.blocks, index, converted))


def move_block_up(state: EditorState, block_id: str) -> EditorState:
    """Swap a block with the one before it."""
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "move_block_up", block_id, "not found")
    if index == 0:
        return _noop(state, "move_block_up", block_id, "first block")

    blocks = list(state.blocks)
    blocks[index - 1], blocks[index] = blocks[index], blocks[index - 1]
    _changed("move_block_up", block_id)
    return replace(state, blocks=tuple(blocks))


def move_block_down(state: EditorState, block_id: str) -> EditorState:
    """Swap a block with the one after it."""
    index = state.index_of(block_id)
    if index == -1:
        return _noop(state, "move_block_down", block_id, "not found")
    if index >= len(state.blocks) - 1:
        return _noop(state, "move_block_down", block_id, "last block")

    blocks = list(state.blocks)
    blocks[index], blocks[index + 1] = blocks[index + 1], blocks[index]
    _changed("move_block_down", block_id)
    return replace(state, blocks=tuple(blocks))


def set_blocks(state: EditorState, blocks: Iterable[Block]) -> EditorState:
    """Replace the whole document, e.g. after hydrating from storage.

    Focus is kept when the focused id survives, otherwise cleared.
    """
    new_blocks = tuple(blocks) or (empty_paragraph(),)
    active = state.active_block_id
    if active is not None and not any(block.id == active for block in new_blocks):
        active = None
    _changed("set_blocks", None)
    return EditorState(blocks=new_blocks, active_block_id=active)
