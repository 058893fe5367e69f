from __future__ import annotations

from typing import Any

import pytest

from blockpress.editor.models import Block, BlockType, EditorState, InlineContent, paragraph
from blockpress.editor.session import EditorSession


@pytest.fixture
def three_paragraphs() -> EditorState:
    """State with paragraphs a, b, c and no focus."""
    return EditorState.create([
        paragraph("first", block_id="a"),
        paragraph("second", block_id="b"),
        paragraph("third", block_id="c"),
    ])


@pytest.fixture
def mixed_blocks() -> list[Block]:
    """One block of each editor variant, ids p, h, q, i, c, ul, ol."""
    return [
        Block(id="p", type=BlockType.PARAGRAPH, content=(InlineContent("Hello "),)),
        Block(
            id="h",
            type=BlockType.HEADING,
            content=(InlineContent("Title"),),
            attrs={"level": 2},
        ),
        Block(id="q", type=BlockType.BLOCKQUOTE, content=(InlineContent("Quoted"),)),
        Block(
            id="i",
            type=BlockType.IMAGE,
            attrs={"src": "https://cdn.example.com/a.png", "alt": "A", "caption": "Cap"},
        ),
        Block(
            id="c",
            type=BlockType.CODE,
            attrs={"content": "print(1)", "language": "python", "filename": "a.py"},
        ),
        Block(id="ul", type=BlockType.BULLET_LIST, attrs={"items": ["one", "two"]}),
        Block(id="ol", type=BlockType.ORDERED_LIST, attrs={"items": ["x", "y"], "start": 3}),
    ]


@pytest.fixture
def changes() -> list[list[Block]]:
    """Collects every block list passed to an on_change callback."""
    return []


@pytest.fixture
def session(three_paragraphs: EditorState, changes: list[list[Block]]) -> EditorSession:
    return EditorSession(
        three_paragraphs.blocks,
        on_change=changes.append,
        strict=False,
        validate_on_save=True,
    )


@pytest.fixture
def persisted_doc() -> list[dict[str, Any]]:
    """A persisted document covering every variant the editor can open."""
    return [
        {"type": "paragraph", "content": [{"type": "text", "text": "Intro", "marks": [{"type": "bold"}]}]},
        {"type": "heading", "attrs": {"level": 1}, "content": [{"type": "text", "text": "Title"}]},
        {"type": "image", "attrs": {"src": "/m/1.png", "alt": "One", "width": 640}},
        {"type": "code", "attrs": {"language": "python"}, "content": "x = 1"},
        {
            "type": "blockquote",
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Wise"}]}],
        },
        {
            "type": "bulletList",
            "content": [
                {
                    "type": "listItem",
                    "content": [{"type": "paragraph", "content": [{"type": "text", "text": "a"}]}],
                }
            ],
        },
        {
            "type": "orderedList",
            "attrs": {"start": 2},
            "content": [
                {
                    "type": "listItem",
                    "content": [{"type": "paragraph", "content": [{"type": "text", "text": "b"}]}],
                }
            ],
        },
    ]
