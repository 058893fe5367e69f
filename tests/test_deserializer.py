"""Tests for persisted block -> editor block deserialization.

Tests:
- Per-variant inverse mapping
- Lossy blockquote and list handling
- Batch failures
- Round trip through serialize
"""

from __future__ import annotations

from typing import Any

import pytest

from blockpress.codec.deserializer import deserialize_blocks
from blockpress.codec.serializer import serialize_blocks
from blockpress.editor.models import Block, BlockType, InlineContent, MarkType, TextMark
from blockpress.errors import INVALID_INLINE, DeserializationError


def _semantic(block: Block) -> tuple[Any, ...]:
    """Block identity without its id."""
    return (block.type, block.content, block.attrs)


class TestDeserializeVariants:
    """Tests for per-variant mapping."""

    def test_empty_payload(self) -> None:
        """Empty and missing payloads give one empty paragraph."""
        for payload in ([], None):
            blocks = deserialize_blocks(payload)

            assert len(blocks) == 1
            assert blocks[0].type == BlockType.PARAGRAPH
            assert blocks[0].content == (InlineContent(""),)

    def test_fresh_ids(self, persisted_doc: list[dict[str, Any]]) -> None:
        """Every block gets a new unique id."""
        first = deserialize_blocks(persisted_doc)
        second = deserialize_blocks(persisted_doc)

        ids = [b.id for b in first] + [b.id for b in second]
        assert len(ids) == len(set(ids))

    def test_document(self, persisted_doc: list[dict[str, Any]]) -> None:
        """A persisted document maps onto editor blocks."""
        blocks = deserialize_blocks(persisted_doc)

        assert [_semantic(b) for b in blocks] == [
            (BlockType.PARAGRAPH, (InlineContent("Intro", (TextMark(MarkType.BOLD),)),), {}),
            (BlockType.HEADING, (InlineContent("Title"),), {"level": 1}),
            (BlockType.IMAGE, None, {"src": "/m/1.png", "alt": "One", "width": 640}),
            (BlockType.CODE, None, {"language": "python", "content": "x = 1"}),
            (BlockType.BLOCKQUOTE, (InlineContent("Wise"),), {}),
            (BlockType.BULLET_LIST, None, {"items": ["a"]}),
            (BlockType.ORDERED_LIST, None, {"items": ["b"], "start": 2}),
        ]

    def test_paragraph_without_content(self) -> None:
        """A paragraph with no content has no runs."""
        assert deserialize_blocks([{"type": "paragraph"}])[0].content == ()

    def test_link_mark(self) -> None:
        """Link marks keep href and target."""
        node = {
            "type": "paragraph",
            "content": [
                {
                    "type": "text",
                    "text": "go",
                    "marks": [{"type": "link", "attrs": {"href": "/x", "target": "_blank"}}],
                }
            ],
        }

        run = deserialize_blocks([node])[0].content[0]

        assert run.marks == (TextMark(MarkType.LINK, href="/x", target="_blank"),)

    def test_blockquote_keeps_first_paragraph(self) -> None:
        """Only the first nested node survives."""
        node = {
            "type": "blockquote",
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": "one"}]},
                {"type": "paragraph", "content": [{"type": "text", "text": "two"}]},
            ],
        }

        assert deserialize_blocks([node])[0].plain_text() == "one"

    def test_blockquote_without_paragraph(self) -> None:
        """A quote without inline content is empty."""
        assert deserialize_blocks([{"type": "blockquote", "content": []}])[0].content == ()

    def test_list_items_flatten_marks(self) -> None:
        """Item runs are joined and marks dropped; odd shapes read as ""."""
        node = {
            "type": "bulletList",
            "content": [
                {
                    "type": "listItem",
                    "content": [
                        {
                            "type": "paragraph",
                            "content": [
                                {"type": "text", "text": "bold ", "marks": [{"type": "bold"}]},
                                {"type": "text", "text": "tail"},
                            ],
                        }
                    ],
                },
                {"type": "listItem"},
                {"type": "listItem", "content": [{"type": "paragraph"}]},
                "junk",
            ],
        }

        assert deserialize_blocks([node])[0].attrs == {"items": ["bold tail", "", "", ""]}


class TestDeserializeFailures:
    """Tests for batch failures."""

    @pytest.mark.parametrize("block_type", ["horizontalRule", "embed", "callout", "audioPlayer", "table", "mystery"])
    def test_unsupported_type(self, block_type: str) -> None:
        """Store-only and unknown variants cannot be opened."""
        with pytest.raises(DeserializationError) as exc_info:
            deserialize_blocks([{"type": "paragraph"}, {"type": block_type}])

        assert exc_info.value.is_unsupported
        assert exc_info.value.block_index == 1
        assert exc_info.value.message == f"Unsupported block type: {block_type}"

    def test_heading_without_level(self) -> None:
        """Headings require a level."""
        with pytest.raises(DeserializationError, match="Heading block missing level attribute"):
            deserialize_blocks([{"type": "heading", "content": []}])

    def test_list_without_content(self) -> None:
        """Lists require a content array."""
        with pytest.raises(DeserializationError, match="orderedList block missing items"):
            deserialize_blocks([{"type": "orderedList"}])

    def test_text_node_without_text(self) -> None:
        """Inline nodes need a string text."""
        with pytest.raises(DeserializationError) as exc_info:
            deserialize_blocks([{"type": "paragraph", "content": [{"type": "text"}]}])

        assert exc_info.value.reason == INVALID_INLINE

    def test_unknown_mark(self) -> None:
        """Unknown marks are rejected."""
        node = {"type": "paragraph", "content": [{"type": "text", "text": "x", "marks": [{"type": "underline"}]}]}

        with pytest.raises(DeserializationError, match="underline"):
            deserialize_blocks([node])

    @pytest.mark.parametrize(
        "mark",
        [
            {"type": "link", "attrs": "oops"},
            {"type": "link", "attrs": ["href", "/x"]},
            {"type": "link", "attrs": {"href": 42}},
            {"type": "link", "attrs": {"href": "/x", "target": ["_blank"]}},
        ],
    )
    def test_malformed_mark_attrs(self, mark: dict[str, Any]) -> None:
        """Mark attrs must be an object with string href and target."""
        node = {"type": "paragraph", "content": [{"type": "text", "text": "x", "marks": [mark]}]}

        with pytest.raises(DeserializationError) as exc_info:
            deserialize_blocks([node])

        assert exc_info.value.reason == INVALID_INLINE
        assert exc_info.value.block_index == 0

    def test_non_list_payload(self) -> None:
        """The payload must be a list."""
        with pytest.raises(DeserializationError):
            deserialize_blocks({"type": "paragraph"})  # type: ignore[arg-type]

    def test_non_object_block(self) -> None:
        """Each block must be an object."""
        with pytest.raises(DeserializationError) as exc_info:
            deserialize_blocks(["paragraph"])  # type: ignore[list-item]

        assert exc_info.value.block_index == 0


class TestRoundTrip:
    """Tests for deserialize(serialize(blocks))."""

    def test_every_supported_variant(self, mixed_blocks: list[Block]) -> None:
        """Semantic content survives; ids are new."""
        restored = deserialize_blocks(serialize_blocks(mixed_blocks))

        assert [_semantic(b) for b in restored] == [_semantic(b) for b in mixed_blocks]
        assert not {b.id for b in restored} & {b.id for b in mixed_blocks}

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, level: int) -> None:
        """All heading levels survive."""
        block = Block(id="h", type=BlockType.HEADING, content=(InlineContent("H"),), attrs={"level": level})

        assert deserialize_blocks(serialize_blocks([block]))[0].attrs == {"level": level}

    def test_persisted_round_trip(self, persisted_doc: list[dict[str, Any]]) -> None:
        """Persisted documents in canonical form come back unchanged."""
        assert serialize_blocks(deserialize_blocks(persisted_doc)) == persisted_doc
