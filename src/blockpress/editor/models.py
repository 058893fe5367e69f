"""Data models for the block editor.

This module defines the in-memory document: an ordered sequence of typed
blocks plus the id of the block that currently receives input.

Blocks are immutable snapshots. Every edit produces a new ``EditorState``
through ``blockpress.editor.mutations``; nothing here enforces document
invariants beyond data shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any
from uuid import uuid4


class BlockType(str, Enum):
    """Block variants the editor can author."""

    # Flow text
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"

    # Attribute-only blocks
    IMAGE = "image"
    CODE = "code"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"


# Variants whose text lives in ``content`` as inline runs
TEXT_TYPES = frozenset({
    BlockType.PARAGRAPH,
    BlockType.HEADING,
    BlockType.BLOCKQUOTE,
})

# Variants that can be joined by merge-with-previous
MERGEABLE_TYPES = frozenset({
    BlockType.PARAGRAPH,
    BlockType.HEADING,
})

LIST_TYPES = frozenset({
    BlockType.BULLET_LIST,
    BlockType.ORDERED_LIST,
})


class MarkType(str, Enum):
    """Formatting applied to a whole inline run."""

    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"
    STRIKE = "strike"
    LINK = "link"


def new_block_id() -> str:
    """Mint a block id. Ids are never reused within a process."""
    return f"blk-{uuid4().hex[:12]}"


@dataclass(frozen=True)
class TextMark:
    """A formatting mark. Only links carry ``href``/``target``."""

    type: MarkType
    href: str | None = None
    target: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"type": self.type.value}
        if self.type == MarkType.LINK:
            attrs: dict[str, Any] = {"href": self.href or ""}
            if self.target is not None:
                attrs["target"] = self.target
            result["attrs"] = attrs
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextMark:
        """Create from dictionary."""
        attrs = data.get("attrs") or {}
        if not isinstance(attrs, dict):
            raise ValueError("mark attrs must be an object")
        return cls(
            type=MarkType(data["type"]),
            href=attrs.get("href"),
            target=attrs.get("target"),
        )


@dataclass(frozen=True)
class InlineContent:
    """A run of text carrying one mark set.

    Marks apply to the whole run; there is no sub-range formatting.
    """

    text: str
    marks: tuple[TextMark, ...] | None = None

    @property
    def type(self) -> str:
        return "text"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"type": "text", "text": self.text}
        if self.marks is not None:
            result["marks"] = [mark.to_dict() for mark in self.marks]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InlineContent:
        """Create from dictionary."""
        marks = data.get("marks")
        return cls(
            text=data["text"],
            marks=tuple(TextMark.from_dict(m) for m in marks) if marks is not None else None,
        )

    def has_mark(self, mark_type: MarkType) -> bool:
        return any(mark.type == mark_type for mark in self.marks or ())


def empty_content() -> tuple[InlineContent, ...]:
    return (InlineContent(text=""),)


@dataclass(frozen=True)
class Block:
    """A structural unit of the document.

    ``content`` is only meaningful for text variants. Code and list blocks keep
    their text in ``attrs`` (``attrs["content"]`` and ``attrs["items"]``).
    ``attrs`` is a free-form mapping so that a conversion can relabel a block
    without discarding properties of its former variant.
    """

    id: str
    type: BlockType
    content: tuple[InlineContent, ...] | None = None
    attrs: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization (editor shape, not persisted shape)."""
        result: dict[str, Any] = {"id": self.id, "type": self.type.value}
        if self.content is not None:
            result["content"] = [run.to_dict() for run in self.content]
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Block:
        """Create from dictionary."""
        content = data.get("content")
        return cls(
            id=data.get("id") or new_block_id(),
            type=BlockType(data["type"]),
            content=tuple(InlineContent.from_dict(c) for c in content) if content is not None else None,
            attrs=dict(data.get("attrs") or {}),
        )

    def plain_text(self) -> str:
        """Get concatenated plain text from all inline runs."""
        return "".join(run.text for run in self.content or ())

    def is_text(self) -> bool:
        return self.type in TEXT_TYPES

    def with_changes(self, **changes: Any) -> Block:
        return replace(self, **changes)


def paragraph(text: str = "", *, block_id: str | None = None) -> Block:
    """Build a paragraph with a single unmarked run."""
    return Block(
        id=block_id or new_block_id(),
        type=BlockType.PARAGRAPH,
        content=(InlineContent(text=text),),
    )


def empty_paragraph() -> Block:
    return paragraph("")


@dataclass(frozen=True)
class EditorState:
    """Root of the editor document.

    ``blocks`` is in reading order. ``active_block_id`` is the focused block,
    or None before anything has been focused.
    """

    blocks: tuple[Block, ...]
    active_block_id: str | None = None

    @classmethod
    def create(cls, blocks: list[Block] | tuple[Block, ...] | None = None) -> EditorState:
        """Fresh state; an empty or missing block list becomes one empty paragraph."""
        if not blocks:
            return cls(blocks=(empty_paragraph(),))
        return cls(blocks=tuple(blocks))

    def index_of(self, block_id: str | None) -> int:
        """Position of ``block_id`` in reading order, or -1."""
        if block_id is None:
            return -1
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        return -1

    def get(self, block_id: str | None) -> Block | None:
        index = self.index_of(block_id)
        return self.blocks[index] if index >= 0 else None

    @property
    def active_block(self) -> Block | None:
        return self.get(self.active_block_id)

    @property
    def block_ids(self) -> list[str]:
        return [block.id for block in self.blocks]

    def to_dict(self) -> dict[str, Any]:
        return {
            "blocks": [block.to_dict() for block in self.blocks],
            "active_block_id": self.active_block_id,
        }
