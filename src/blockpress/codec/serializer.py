"""Serialize editor blocks to the persisted block format.

The persisted format is richer than the editor model: quotes and list items
hold nested paragraph nodes. Those wrapper nodes are manufactured here and
nowhere else.

Attributes with an unexpected type are dropped rather than defaulted. The
first block that cannot be serialized fails the whole batch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from ..editor.models import Block, BlockType, InlineContent
from ..errors import INVALID_INLINE, UNSUPPORTED_TYPE, SerializationError

logger = logging.getLogger(__name__)

PersistedBlock = dict[str, Any]


def serialize_blocks(blocks: Iterable[Block]) -> list[PersistedBlock]:
    """Convert editor blocks to persisted block nodes.

    Args:
        blocks: Blocks in reading order.

    Returns:
        Persisted block dictionaries, one per input block.

    Raises:
        SerializationError: On the first block that cannot be converted.
            No partial output is returned.
    """
    result = []
    for index, block in enumerate(blocks):
        try:
            result.append(serialize_block(block, index=index))
        except SerializationError as exc:
            logger.warning(
                "Serialization failed at block %d (%s): %s",
                index,
                exc.block_type,
                exc.message,
            )
            raise
    return result


def serialize_block(block: Block, *, index: int | None = None) -> PersistedBlock:
    """Convert a single block."""
    block_type = getattr(block, "type", None)
    serializer = _SERIALIZERS.get(block_type) if isinstance(block_type, BlockType) else None
    if serializer is None:
        type_name = getattr(block_type, "value", block_type)
        raise SerializationError(
            f"Unknown block type: {type_name}",
            block_index=index,
            block_type=str(type_name),
            reason=UNSUPPORTED_TYPE,
        )
    return serializer(block, index)


# =============================================================================
# Inline content
# =============================================================================


def serialize_inline_content(
    content: Sequence[InlineContent] | None,
    *,
    index: int | None = None,
    block_type: str | None = None,
) -> list[dict[str, Any]]:
    """Convert inline runs to persisted text nodes."""
    runs = []
    for run in content or ():
        if not isinstance(run, InlineContent):
            raise SerializationError(
                f"Failed to serialize inline content: expected a text run, got {type(run).__name__}",
                block_index=index,
                block_type=block_type,
                reason=INVALID_INLINE,
            )
        runs.append(run.to_dict())
    return runs


# =============================================================================
# Per-variant serializers
# =============================================================================


def _serialize_paragraph(block: Block, index: int | None) -> PersistedBlock:
    return {
        "type": "paragraph",
        "content": serialize_inline_content(block.content, index=index, block_type="paragraph"),
    }


def _serialize_heading(block: Block, index: int | None) -> PersistedBlock:
    level = block.attrs.get("level")
    if not _is_number(level) or not level:
        raise SerializationError(
            "Heading block missing level attribute",
            block_index=index,
            block_type="heading",
        )
    return {
        "type": "heading",
        "attrs": {"level": level},
        "content": serialize_inline_content(block.content, index=index, block_type="heading"),
    }


def _serialize_image(block: Block, index: int | None) -> PersistedBlock:
    src = block.attrs.get("src")
    if not isinstance(src, str) or not src:
        raise SerializationError(
            "Image block missing src attribute",
            block_index=index,
            block_type="image",
        )

    attrs: dict[str, Any] = {"src": src}
    for key in ("alt", "title", "caption"):
        if isinstance(block.attrs.get(key), str):
            attrs[key] = block.attrs[key]
    for key in ("width", "height"):
        if _is_number(block.attrs.get(key)):
            attrs[key] = block.attrs[key]
    return {"type": "image", "attrs": attrs}


def _serialize_code(block: Block, index: int | None) -> PersistedBlock:
    content = block.attrs.get("content")
    attrs: dict[str, Any] = {}
    for key in ("language", "filename"):
        if isinstance(block.attrs.get(key), str):
            attrs[key] = block.attrs[key]
    return {
        "type": "code",
        "attrs": attrs,
        "content": content if isinstance(content, str) else "",
    }


def _serialize_blockquote(block: Block, index: int | None) -> PersistedBlock:
    return {
        "type": "blockquote",
        "content": [
            {
                "type": "paragraph",
                "content": serialize_inline_content(
                    block.content, index=index, block_type="blockquote"
                ),
            }
        ],
    }


def _list_items(block: Block, index: int | None, label: str) -> list[dict[str, Any]]:
    items = block.attrs.get("items")
    if not isinstance(items, (list, tuple)):
        raise SerializationError(
            f"{label} block missing items",
            block_index=index,
            block_type=block.type.value,
        )
    if not all(isinstance(item, str) for item in items):
        raise SerializationError(
            f"{label} items must be strings",
            block_index=index,
            block_type=block.type.value,
        )
    return [
        {
            "type": "listItem",
            "content": [
                {
                    "type": "paragraph",
                    "content": [{"type": "text", "text": item}],
                }
            ],
        }
        for item in items
    ]


def _serialize_bullet_list(block: Block, index: int | None) -> PersistedBlock:
    return {
        "type": "bulletList",
        "content": _list_items(block, index, "Bullet list"),
    }


def _serialize_ordered_list(block: Block, index: int | None) -> PersistedBlock:
    result: PersistedBlock = {
        "type": "orderedList",
        "content": _list_items(block, index, "Ordered list"),
    }
    start = block.attrs.get("start")
    if _is_number(start):
        result["attrs"] = {"start": start}
    return result


_SERIALIZERS: dict[BlockType, Callable[[Block, int | None], PersistedBlock]] = {
    BlockType.PARAGRAPH: _serialize_paragraph,
    BlockType.HEADING: _serialize_heading,
    BlockType.IMAGE: _serialize_image,
    BlockType.CODE: _serialize_code,
    BlockType.BLOCKQUOTE: _serialize_blockquote,
    BlockType.BULLET_LIST: _serialize_bullet_list,
    BlockType.ORDERED_LIST: _serialize_ordered_list,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
