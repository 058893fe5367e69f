"""Deserialize persisted block nodes into editor blocks.

Every block gets a fresh id. The mapping is lossy where the editor model is
narrower than the persisted format:
- a blockquote keeps only the inline content of its first nested node
- list items become plain strings; marks inside items are dropped

Persisted variants the editor cannot author (horizontalRule, embed, callout,
audioPlayer, table) are rejected, which means such content cannot be opened.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from ..editor.models import (
    Block,
    BlockType,
    InlineContent,
    MarkType,
    TextMark,
    empty_paragraph,
    new_block_id,
)
from ..errors import INVALID_INLINE, UNSUPPORTED_TYPE, DeserializationError

logger = logging.getLogger(__name__)


def deserialize_blocks(payload: Sequence[Mapping[str, Any]] | None) -> list[Block]:
    """Convert persisted block nodes to editor blocks.

    Args:
        payload: Persisted blocks as decoded JSON. ``None`` and ``[]`` both
            yield a single empty paragraph.

    Returns:
        Editor blocks in the same order.

    Raises:
        DeserializationError: On the first node that cannot be converted.
            No partial output is returned.
    """
    if not payload:
        return [empty_paragraph()]
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise DeserializationError(
            f"Expected a list of blocks, got {type(payload).__name__}",
        )

    result = []
    for index, node in enumerate(payload):
        try:
            result.append(deserialize_block(node, index=index))
        except DeserializationError as exc:
            logger.warning(
                "Deserialization failed at block %d (%s): %s",
                index,
                exc.block_type,
                exc.message,
            )
            raise
    return result


def deserialize_block(node: Mapping[str, Any], *, index: int | None = None) -> Block:
    """Convert a single persisted node."""
    if not isinstance(node, Mapping):
        raise DeserializationError(
            f"Expected a block object, got {type(node).__name__}",
            block_index=index,
        )

    type_name = node.get("type")
    deserializer = _DESERIALIZERS.get(type_name) if isinstance(type_name, str) else None
    if deserializer is None:
        raise DeserializationError(
            f"Unsupported block type: {type_name}",
            block_index=index,
            block_type=str(type_name),
            reason=UNSUPPORTED_TYPE,
        )
    return deserializer(node, index)


# =============================================================================
# Inline content
# =============================================================================


def deserialize_inline_content(
    content: Any,
    *,
    index: int | None = None,
    block_type: str | None = None,
) -> tuple[InlineContent, ...]:
    """Convert persisted text nodes to inline runs. Missing content is empty."""
    if content is None:
        return ()
    if not isinstance(content, Sequence) or isinstance(content, (str, bytes)):
        raise _inline_error("content must be a list", index, block_type)

    runs = []
    for item in content:
        if not isinstance(item, Mapping) or not isinstance(item.get("text"), str):
            raise _inline_error("text node missing text", index, block_type)
        runs.append(
            InlineContent(
                text=item["text"],
                marks=_deserialize_marks(item.get("marks"), index, block_type),
            )
        )
    return tuple(runs)


def _deserialize_marks(
    marks: Any,
    index: int | None,
    block_type: str | None,
) -> tuple[TextMark, ...] | None:
    if marks is None:
        return None
    if not isinstance(marks, Sequence) or isinstance(marks, (str, bytes)):
        raise _inline_error("marks must be a list", index, block_type)

    result = []
    for mark in marks:
        if not isinstance(mark, Mapping):
            raise _inline_error("mark must be an object", index, block_type)
        try:
            mark_type = MarkType(mark.get("type"))
        except ValueError as exc:
            raise _inline_error(f"unknown mark {mark.get('type')!r}", index, block_type) from exc
        attrs = mark.get("attrs") or {}
        if not isinstance(attrs, Mapping):
            raise _inline_error("mark attrs must be an object", index, block_type)
        href = attrs.get("href")
        target = attrs.get("target")
        if not isinstance(href, (str, type(None))) or not isinstance(target, (str, type(None))):
            raise _inline_error("link href and target must be strings", index, block_type)
        result.append(TextMark(type=mark_type, href=href, target=target))
    return tuple(result)


def _inline_error(detail: str, index: int | None, block_type: str | None) -> DeserializationError:
    return DeserializationError(
        f"Failed to deserialize inline content: {detail}",
        block_index=index,
        block_type=block_type,
        reason=INVALID_INLINE,
    )


# =============================================================================
# Per-variant deserializers
# =============================================================================


def _attrs(node: Mapping[str, Any]) -> Mapping[str, Any]:
    attrs = node.get("attrs")
    return attrs if isinstance(attrs, Mapping) else {}


def _deserialize_paragraph(node: Mapping[str, Any], index: int | None) -> Block:
    return Block(
        id=new_block_id(),
        type=BlockType.PARAGRAPH,
        content=deserialize_inline_content(node.get("content"), index=index, block_type="paragraph"),
    )


def _deserialize_heading(node: Mapping[str, Any], index: int | None) -> Block:
    level = _attrs(node).get("level")
    if level is None:
        raise DeserializationError(
            "Heading block missing level attribute",
            block_index=index,
            block_type="heading",
        )
    return Block(
        id=new_block_id(),
        type=BlockType.HEADING,
        content=deserialize_inline_content(node.get("content"), index=index, block_type="heading"),
        attrs={"level": level},
    )


def _deserialize_image(node: Mapping[str, Any], index: int | None) -> Block:
    attrs = _attrs(node)
    return Block(
        id=new_block_id(),
        type=BlockType.IMAGE,
        attrs={
            key: attrs[key]
            for key in ("src", "alt", "title", "width", "height", "caption")
            if attrs.get(key) is not None
        },
    )


def _deserialize_code(node: Mapping[str, Any], index: int | None) -> Block:
    attrs = _attrs(node)
    content = node.get("content")
    result: dict[str, Any] = {
        key: attrs[key] for key in ("language", "filename") if attrs.get(key) is not None
    }
    result["content"] = content if isinstance(content, str) else ""
    return Block(id=new_block_id(), type=BlockType.CODE, attrs=result)


def _deserialize_blockquote(node: Mapping[str, Any], index: int | None) -> Block:
    nested = node.get("content")
    first = nested[0] if isinstance(nested, Sequence) and not isinstance(nested, str) and nested else None
    if isinstance(first, Mapping) and first.get("content") is not None:
        content = deserialize_inline_content(first["content"], index=index, block_type="blockquote")
    else:
        content = ()
    return Block(id=new_block_id(), type=BlockType.BLOCKQUOTE, content=content)


def _list_item_text(item: Any) -> str:
    """Flatten a listItem node to plain text; anything unexpected reads as ""."""
    if not isinstance(item, Mapping):
        return ""
    children = item.get("content")
    if not isinstance(children, list) or not children:
        return ""
    paragraph = children[0]
    if not isinstance(paragraph, Mapping) or not isinstance(paragraph.get("content"), list):
        return ""
    return "".join(
        run["text"]
        for run in paragraph["content"]
        if isinstance(run, Mapping) and isinstance(run.get("text"), str)
    )


def _deserialize_list(node: Mapping[str, Any], index: int | None) -> Block:
    block_type = BlockType(node["type"])
    items = node.get("content")
    if not isinstance(items, list):
        raise DeserializationError(
            f"{block_type.value} block missing items",
            block_index=index,
            block_type=block_type.value,
        )

    attrs: dict[str, Any] = {"items": [_list_item_text(item) for item in items]}
    if block_type == BlockType.ORDERED_LIST:
        start = _attrs(node).get("start")
        if isinstance(start, (int, float)) and not isinstance(start, bool):
            attrs["start"] = start
    return Block(id=new_block_id(), type=block_type, attrs=attrs)


_DESERIALIZERS: dict[str, Callable[[Mapping[str, Any], int | None], Block]] = {
    "paragraph": _deserialize_paragraph,
    "heading": _deserialize_heading,
    "image": _deserialize_image,
    "code": _deserialize_code,
    "blockquote": _deserialize_blockquote,
    "bulletList": _deserialize_list,
    "orderedList": _deserialize_list,
}
