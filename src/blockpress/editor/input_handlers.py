"""Per-block input contracts.

Translate key events and field edits from a block's editable surface into
session calls. Text blocks follow one keyboard contract; list, code and
image blocks manage their own fields and always write a complete ``attrs``
replacement.

Key handlers return True when the host must suppress its default action
(the browser's ``preventDefault``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..errors import ValidationError
from .models import LIST_TYPES, Block, BlockType, InlineContent
from .selection import TextSelectionProbe, get_cursor_position
from .session import EditorSession

logger = logging.getLogger(__name__)

CODE_LANGUAGES = ("javascript", "typescript", "python", "text")
CODE_ATTRS = frozenset({"content", "language", "filename"})


@dataclass(frozen=True)
class KeyEvent:
    """A key press as reported by the host."""

    key: str
    shift: bool = False


def _require_block(session: EditorSession, block_id: str, allowed: frozenset[BlockType]) -> Block:
    block = session.get_block(block_id)
    if block is None:
        raise ValidationError(f"Block not found: {block_id}", field="block_id", value=block_id)
    if block.type not in allowed:
        raise ValidationError(
            f"Block {block_id} is a {block.type.value} block",
            field="type",
            value=block.type.value,
        )
    return block


# =============================================================================
# Text blocks (paragraph, heading, blockquote)
# =============================================================================


def handle_text_keydown(
    session: EditorSession,
    block_id: str,
    event: KeyEvent,
    probe: TextSelectionProbe,
) -> bool:
    """Apply the text-block keyboard contract.

    - Enter without Shift inserts an empty paragraph after the block.
    - Backspace with the caret at the start of an empty block merges it
      into the previous block.
    - ArrowUp at the start focuses the previous block.
    - ArrowDown at the end focuses the next block.

    Anything else is left to the host and later arrives as text input.
    """
    if event.key == "Enter" and not event.shift:
        session.insert_block_after(block_id)
        return True

    if event.key == "Backspace":
        position = get_cursor_position(probe)
        if position.at_start and probe.container_text() == "":
            session.merge_with_previous(block_id)
            return True
    elif event.key == "ArrowUp":
        if get_cursor_position(probe).at_start:
            session.focus_previous_block(block_id)
            return True
    elif event.key == "ArrowDown":
        if get_cursor_position(probe).at_end:
            session.focus_next_block(block_id)
            return True

    return False


def handle_text_input(session: EditorSession, block_id: str, text: str) -> None:
    """Store the block's visible text as its only run.

    Marks on the previous runs are dropped.
    """
    session.update_block_content(block_id, (InlineContent(text=text),))


# =============================================================================
# List blocks
# =============================================================================


def list_items(block: Block) -> list[str]:
    """Items of a list block; a missing or empty list reads as one empty item."""
    items = block.attrs.get("items")
    if not isinstance(items, (list, tuple)) or not items:
        return [""]
    return list(items)


def _write_items(session: EditorSession, block: Block, items: list[str]) -> None:
    session.update_block(block.id, {"attrs": {**block.attrs, "items": items}})


def update_list_item(session: EditorSession, block_id: str, index: int, value: str) -> None:
    block = _require_block(session, block_id, LIST_TYPES)
    items = list_items(block)
    if not 0 <= index < len(items):
        raise ValidationError(f"List item {index} out of range", field="index", value=index)
    items[index] = value
    _write_items(session, block, items)


def add_list_item(session: EditorSession, block_id: str) -> int:
    """Append an empty item and return its index."""
    block = _require_block(session, block_id, LIST_TYPES)
    items = list_items(block) + [""]
    _write_items(session, block, items)
    return len(items) - 1


def remove_list_item(session: EditorSession, block_id: str, index: int) -> bool:
    """Remove an item. The last remaining item is never removed."""
    block = _require_block(session, block_id, LIST_TYPES)
    items = list_items(block)
    if len(items) == 1 or not 0 <= index < len(items):
        return False
    del items[index]
    _write_items(session, block, items)
    return True


def handle_list_item_keydown(
    session: EditorSession,
    block_id: str,
    index: int,
    event: KeyEvent,
) -> bool:
    """Enter appends an item; Backspace in an empty item removes it."""
    if event.key == "Enter":
        add_list_item(session, block_id)
        return True

    if event.key == "Backspace":
        block = _require_block(session, block_id, LIST_TYPES)
        items = list_items(block)
        if 0 <= index < len(items) and not items[index]:
            remove_list_item(session, block_id, index)
            return True

    return False


# =============================================================================
# Code blocks
# =============================================================================


def update_code_attr(session: EditorSession, block_id: str, name: str, value: str) -> None:
    """Set ``content``, ``language`` or ``filename`` on a code block."""
    if name not in CODE_ATTRS:
        raise ValidationError(f"Unknown code block field: {name}", field="name", value=name)
    if name == "language" and value not in CODE_LANGUAGES:
        raise ValidationError(
            f"Unsupported language: {value}",
            field="language",
            value=value,
            constraint="one_of",
        )
    block = _require_block(session, block_id, frozenset({BlockType.CODE}))
    session.update_block(block_id, {"attrs": {**block.attrs, name: value}})


def insert_tab(content: str, start: int, end: int | None = None) -> tuple[str, int]:
    """Replace ``content[start:end]`` with a tab; returns the text and new caret."""
    end = start if end is None else end
    return content[:start] + "\t" + content[end:], start + 1


def handle_code_keydown(
    session: EditorSession,
    block_id: str,
    event: KeyEvent,
    selection_start: int,
    selection_end: int | None = None,
) -> bool:
    """Keyboard contract of the code textarea.

    Tab inserts a tab over the selection; the host places the caret after
    it. ArrowUp at offset 0 and ArrowDown at the end leave the block.
    """
    block = _require_block(session, block_id, frozenset({BlockType.CODE}))
    content = block.attrs.get("content") or ""

    if event.key == "Tab":
        new_content, _ = insert_tab(content, selection_start, selection_end)
        session.update_block(block_id, {"attrs": {**block.attrs, "content": new_content}})
        return True
    if event.key == "ArrowUp" and selection_start == 0:
        session.focus_previous_block(block_id)
        return True
    if event.key == "ArrowDown" and selection_start == len(content):
        session.focus_next_block(block_id)
        return True
    return False


# =============================================================================
# Image blocks
# =============================================================================


def save_image_form(
    session: EditorSession,
    block_id: str,
    src: str,
    alt: str = "",
    caption: str = "",
) -> Mapping[str, Any]:
    """Replace an image block's attrs with the submitted form fields.

    Raises:
        ValidationError: If ``src`` is blank.
    """
    _require_block(session, block_id, frozenset({BlockType.IMAGE}))
    src = (src or "").strip()
    if not src:
        raise ValidationError("Image URL is required", field="src")

    attrs = {"src": src, "alt": alt, "caption": caption}
    session.update_block(block_id, {"attrs": attrs})
    return attrs