"""blockpress - block document core for a CMS rich text editor.

The editor keeps a document as an ordered list of typed blocks, edits it
through pure mutation functions, and converts it to and from the persisted
JSON block format the content store validates.

Usage:
    from blockpress import EditorSession

    session = EditorSession(on_change=print)
    session.load(persisted_blocks)
    session.insert_block_after(session.blocks[0].id)
    session.save(api.put_blocks)
"""

from __future__ import annotations

from .editor.models import Block, BlockType, EditorState, InlineContent
from .editor.session import EditorSession
from .errors import BlockPressError, Result

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockPressError",
    "BlockType",
    "EditorSession",
    "EditorState",
    "InlineContent",
    "Result",
]
