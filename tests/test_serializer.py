"""Tests for editor block -> persisted block serialization."""

from __future__ import annotations

import pytest

from blockpress.codec.serializer import serialize_block, serialize_blocks
from blockpress.editor.models import Block, BlockType, InlineContent, MarkType, TextMark, paragraph
from blockpress.errors import INVALID_INLINE, UNSUPPORTED_TYPE, SerializationError


class TestSerializeVariants:
    """Tests for per-variant output."""

    def test_paragraph_with_marks(self) -> None:
        """Inline runs keep their marks; link marks carry attrs."""
        block = Block(
            id="p",
            type=BlockType.PARAGRAPH,
            content=(
                InlineContent("plain "),
                InlineContent("bold", (TextMark(MarkType.BOLD),)),
                InlineContent("link", (TextMark(MarkType.LINK, href="/x", target="_blank"),)),
            ),
        )

        assert serialize_block(block) == {
            "type": "paragraph",
            "content": [
                {"type": "text", "text": "plain "},
                {"type": "text", "text": "bold", "marks": [{"type": "bold"}]},
                {
                    "type": "text",
                    "text": "link",
                    "marks": [{"type": "link", "attrs": {"href": "/x", "target": "_blank"}}],
                },
            ],
        }

    def test_heading(self) -> None:
        """Headings emit their level."""
        block = Block(id="h", type=BlockType.HEADING, content=(InlineContent("T"),), attrs={"level": 3})

        assert serialize_block(block) == {
            "type": "heading",
            "attrs": {"level": 3},
            "content": [{"type": "text", "text": "T"}],
        }

    def test_image_drops_mistyped_attrs(self) -> None:
        """Optional attrs with the wrong type are dropped, not defaulted."""
        block = Block(
            id="i",
            type=BlockType.IMAGE,
            attrs={"src": "/a.png", "alt": 5, "caption": "Cap", "width": "wide", "height": 200, "extra": 1},
        )

        assert serialize_block(block) == {
            "type": "image",
            "attrs": {"src": "/a.png", "caption": "Cap", "height": 200},
        }

    def test_code_defaults_content(self) -> None:
        """Missing code content becomes an empty string."""
        block = Block(id="c", type=BlockType.CODE, attrs={"language": "python", "filename": None})

        assert serialize_block(block) == {
            "type": "code",
            "attrs": {"language": "python"},
            "content": "",
        }

    def test_blockquote_wraps_paragraph(self) -> None:
        """Quote content is wrapped in one paragraph node."""
        block = Block(id="q", type=BlockType.BLOCKQUOTE, content=(InlineContent("Q"),))

        assert serialize_block(block) == {
            "type": "blockquote",
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Q"}]}],
        }

    def test_bullet_list_items(self) -> None:
        """Each item becomes a listItem wrapping a paragraph."""
        block = Block(id="ul", type=BlockType.BULLET_LIST, attrs={"items": ["a", "b"]})

        result = serialize_block(block)

        assert result["type"] == "bulletList"
        assert "attrs" not in result
        assert result["content"][1] == {
            "type": "listItem",
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": "b"}]}],
        }

    def test_ordered_list_start(self) -> None:
        """Ordered lists carry a numeric start only."""
        with_start = Block(id="ol", type=BlockType.ORDERED_LIST, attrs={"items": ["a"], "start": 4})
        bad_start = Block(id="ol", type=BlockType.ORDERED_LIST, attrs={"items": ["a"], "start": "4"})

        assert serialize_block(with_start)["attrs"] == {"start": 4}
        assert "attrs" not in serialize_block(bad_start)


class TestSerializeFailures:
    """Tests for batch failures."""

    def test_heading_without_level(self) -> None:
        """A heading without level fails the batch."""
        blocks = [
            paragraph("ok"),
            Block(id="h", type=BlockType.HEADING, content=(InlineContent("T"),)),
        ]

        with pytest.raises(SerializationError) as exc_info:
            serialize_blocks(blocks)

        assert exc_info.value.message == "Heading block missing level attribute"
        assert exc_info.value.block_index == 1
        assert exc_info.value.block_type == "heading"

    @pytest.mark.parametrize("level", ["2", True, None])
    def test_heading_non_numeric_level(self, level: object) -> None:
        """Non-numeric levels fail."""
        block = Block(id="h", type=BlockType.HEADING, attrs={"level": level})

        with pytest.raises(SerializationError):
            serialize_blocks([block])

    @pytest.mark.parametrize("attrs", [{}, {"src": ""}, {"src": 42}])
    def test_image_without_src(self, attrs: dict) -> None:
        """An image without a string src fails."""
        with pytest.raises(SerializationError, match="Image block missing src attribute"):
            serialize_blocks([Block(id="i", type=BlockType.IMAGE, attrs=attrs)])

    @pytest.mark.parametrize("block_type", [BlockType.BULLET_LIST, BlockType.ORDERED_LIST])
    def test_list_without_items(self, block_type: BlockType) -> None:
        """A list whose items are not a list fails."""
        with pytest.raises(SerializationError, match="missing items"):
            serialize_blocks([Block(id="l", type=block_type, attrs={"items": "a,b"})])

    def test_list_with_non_string_items(self) -> None:
        """List items must be plain strings."""
        with pytest.raises(SerializationError, match="items must be strings"):
            serialize_blocks([Block(id="l", type=BlockType.BULLET_LIST, attrs={"items": ["a", 1]})])

    def test_unknown_type(self) -> None:
        """Unknown block types are errors, not dropped."""
        block = Block(id="x", type="table")  # type: ignore[arg-type]

        with pytest.raises(SerializationError) as exc_info:
            serialize_blocks([block])

        assert exc_info.value.is_unsupported
        assert exc_info.value.reason == UNSUPPORTED_TYPE
        assert exc_info.value.message == "Unknown block type: table"

    def test_invalid_inline_run(self) -> None:
        """Inline content must be text runs."""
        block = Block(id="p", type=BlockType.PARAGRAPH, content=("raw",))  # type: ignore[arg-type]

        with pytest.raises(SerializationError) as exc_info:
            serialize_blocks([block])

        assert exc_info.value.reason == INVALID_INLINE

    def test_no_partial_output(self, mixed_blocks: list[Block]) -> None:
        """The first failure aborts the whole batch."""
        broken = mixed_blocks + [Block(id="bad", type=BlockType.IMAGE)]

        with pytest.raises(SerializationError) as exc_info:
            serialize_blocks(broken)

        assert exc_info.value.block_index == len(mixed_blocks)

    def test_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Batch failures log a warning with the block index."""
        with caplog.at_level("WARNING", logger="blockpress.codec.serializer"):
            with pytest.raises(SerializationError):
                serialize_blocks([Block(id="i", type=BlockType.IMAGE)])

        assert "block 0" in caplog.text
