"""Block editor core.

Key components:
- models: Block, InlineContent, EditorState dataclasses
- mutations: pure EditorState -> EditorState operations
- selection: caret and formatting facts read from the host selection

The stateful session, per-block input handlers and toolbar live in
``session``, ``input_handlers`` and ``toolbar``.
"""

from .models import (
    Block,
    BlockType,
    EditorState,
    InlineContent,
    MarkType,
    TextMark,
    empty_paragraph,
    new_block_id,
    paragraph,
)
from .selection import (
    CursorPosition,
    SelectionState,
    TextBufferProbe,
    TextSelectionProbe,
    get_cursor_position,
    read_selection_state,
)

__all__ = [
    "Block",
    "BlockType",
    "EditorState",
    "InlineContent",
    "MarkType",
    "TextMark",
    "empty_paragraph",
    "new_block_id",
    "paragraph",
    "CursorPosition",
    "SelectionState",
    "TextBufferProbe",
    "TextSelectionProbe",
    "get_cursor_position",
    "read_selection_state",
]
