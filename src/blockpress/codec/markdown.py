"""Markdown import and export for editor blocks.

Parsing uses mistletoe; rendering is hand-written since the editor only has
seven block variants. Constructs the editor cannot author (thematic breaks,
tables, raw HTML) are skipped on import.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from mistletoe import Document
from mistletoe.block_token import (
    BlockCode,
    CodeFence,
    Heading,
    List,
    Paragraph,
    Quote,
    SetextHeading,
)
from mistletoe.span_token import (
    AutoLink,
    Emphasis,
    EscapeSequence,
    Image,
    InlineCode,
    LineBreak,
    Link,
    RawText,
    Strikethrough,
    Strong,
)

from ..editor.models import (
    Block,
    BlockType,
    InlineContent,
    MarkType,
    TextMark,
    empty_content,
    empty_paragraph,
    new_block_id,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Markdown -> Blocks
# =============================================================================


def parse_markdown(markdown: str) -> list[Block]:
    """Parse Markdown text into editor blocks.

    Args:
        markdown: The Markdown text to parse.

    Returns:
        Blocks with fresh ids; at least one empty paragraph.
    """
    doc = Document(markdown)
    blocks = []

    for token in doc.children or ():
        block = _convert_token(token)
        if block is not None:
            blocks.append(block)

    return blocks or [empty_paragraph()]


def _convert_token(token: Any) -> Block | None:
    """Convert a mistletoe block token to an editor block."""
    if isinstance(token, (Heading, SetextHeading)):
        return Block(
            id=new_block_id(),
            type=BlockType.HEADING,
            content=_convert_inline_tokens(token.children),
            attrs={"level": token.level},
        )
    elif isinstance(token, Paragraph):
        return _convert_paragraph(token)
    elif isinstance(token, (BlockCode, CodeFence)):
        return _convert_code(token)
    elif isinstance(token, Quote):
        return _convert_quote(token)
    elif isinstance(token, List):
        return _convert_list(token)

    logger.debug("Skipping unsupported markdown token %s", type(token).__name__)
    return None


def _convert_paragraph(token: Paragraph) -> Block:
    """Convert a paragraph; one that opens with an image becomes an image block."""
    children = list(token.children or ())
    if children and isinstance(children[0], Image):
        image = children[0]
        attrs: dict[str, Any] = {"src": image.src, "alt": _extract_text(image)}
        if image.title:
            attrs["title"] = image.title
        caption = "".join(
            _extract_text(child) for child in children[1:] if not isinstance(child, LineBreak)
        ).strip()
        if caption:
            attrs["caption"] = caption
        return Block(id=new_block_id(), type=BlockType.IMAGE, attrs=attrs)

    return Block(
        id=new_block_id(),
        type=BlockType.PARAGRAPH,
        content=_convert_inline_tokens(children),
    )


def _convert_code(token: BlockCode | CodeFence) -> Block:
    """Convert a fenced or indented code block."""
    attrs: dict[str, Any] = {"content": _extract_text(token).rstrip("\n")}
    language = getattr(token, "language", "")
    if language:
        attrs["language"] = language
    return Block(id=new_block_id(), type=BlockType.CODE, attrs=attrs)


def _convert_quote(token: Quote) -> Block:
    """Convert a quote; only its first paragraph is kept."""
    children = list(token.children or ())
    if children and isinstance(children[0], Paragraph):
        content = _convert_inline_tokens(children[0].children)
    else:
        content = empty_content()
    return Block(id=new_block_id(), type=BlockType.BLOCKQUOTE, content=content)


def _convert_list(token: List) -> Block:
    """Convert a list into one list block with plain-text items."""
    items = []
    for item in token.children or ():
        first = next(iter(item.children or ()), None)
        items.append(_extract_text(first).strip() if first is not None else "")

    if token.start is None:
        return Block(id=new_block_id(), type=BlockType.BULLET_LIST, attrs={"items": items})

    attrs: dict[str, Any] = {"items": items}
    if token.start != 1:
        attrs["start"] = token.start
    return Block(id=new_block_id(), type=BlockType.ORDERED_LIST, attrs=attrs)


def _convert_inline_tokens(tokens: Iterable[Any] | None) -> tuple[InlineContent, ...]:
    """Convert inline tokens to runs, merging neighbours with equal marks."""
    runs: list[InlineContent] = []
    for token in tokens or ():
        runs.extend(_convert_inline_token(token, ()))
    merged = _merge_runs(runs)
    return tuple(merged) if merged else empty_content()


def _convert_inline_token(token: Any, marks: tuple[TextMark, ...]) -> list[InlineContent]:
    """Convert a single inline token, carrying the marks of its ancestors."""
    if isinstance(token, RawText):
        return [InlineContent(text=token.content, marks=marks or None)]

    elif isinstance(token, InlineCode):
        code = token.children[0].content if token.children else ""
        return [InlineContent(text=code, marks=marks + (TextMark(MarkType.CODE),))]

    elif isinstance(token, LineBreak):
        return [InlineContent(text=" " if getattr(token, "soft", False) else "\n", marks=marks or None)]

    elif isinstance(token, EscapeSequence):
        text = token.children[0].content if token.children else ""
        return [InlineContent(text=text, marks=marks or None)]

    elif isinstance(token, Image):
        return [InlineContent(text=_extract_text(token), marks=marks or None)]

    if isinstance(token, Strong):
        marks = marks + (TextMark(MarkType.BOLD),)
    elif isinstance(token, Emphasis):
        marks = marks + (TextMark(MarkType.ITALIC),)
    elif isinstance(token, Strikethrough):
        marks = marks + (TextMark(MarkType.STRIKE),)
    elif isinstance(token, (Link, AutoLink)):
        marks = marks + (TextMark(MarkType.LINK, href=token.target),)

    runs: list[InlineContent] = []
    for child in getattr(token, "children", None) or ():
        runs.extend(_convert_inline_token(child, marks))
    return runs


def _extract_text(token: Any) -> str:
    """Extract plain text from a token."""
    if isinstance(token, RawText):
        return token.content
    children = getattr(token, "children", None)
    if children:
        return "".join(_extract_text(child) for child in children)
    return ""


def _merge_runs(runs: list[InlineContent]) -> list[InlineContent]:
    """Merge adjacent runs with identical marks."""
    merged: list[InlineContent] = []
    for run in runs:
        if merged and merged[-1].marks == run.marks:
            merged[-1] = InlineContent(text=merged[-1].text + run.text, marks=run.marks)
        else:
            merged.append(run)
    return merged


# =============================================================================
# Blocks -> Markdown
# =============================================================================


def render_markdown(blocks: Iterable[Block]) -> str:
    """Render editor blocks to Markdown, separated by blank lines."""
    rendered = (_render_block(block) for block in blocks)
    return "\n\n".join(text for text in rendered if text)


def _render_block(block: Block) -> str:
    """Render a single block."""
    if block.type == BlockType.PARAGRAPH:
        return _render_inline(block.content)
    elif block.type == BlockType.HEADING:
        return _render_heading(block)
    elif block.type == BlockType.BLOCKQUOTE:
        text = _render_inline(block.content)
        return "\n".join(f"> {line}" for line in text.split("\n"))
    elif block.type == BlockType.IMAGE:
        return _render_image(block)
    elif block.type == BlockType.CODE:
        return _render_code(block)
    elif block.type == BlockType.BULLET_LIST:
        return "\n".join(f"- {item}" for item in block.attrs.get("items") or [])
    elif block.type == BlockType.ORDERED_LIST:
        return _render_ordered_list(block)
    return ""


def _render_heading(block: Block) -> str:
    level = block.attrs.get("level")
    if not isinstance(level, int) or isinstance(level, bool) or not 1 <= level <= 6:
        level = 1
    return f"{'#' * level} {_render_inline(block.content)}"


def _render_image(block: Block) -> str:
    src = block.attrs.get("src")
    if not src:
        return ""
    alt = block.attrs.get("alt") or ""
    title = block.attrs.get("title")
    target = f'{src} "{title}"' if title else src
    lines = [f"![{alt}]({target})"]
    caption = block.attrs.get("caption")
    if caption:
        lines.append(f"*{caption}*")
    return "\n".join(lines)


def _render_code(block: Block) -> str:
    content = block.attrs.get("content") or ""
    language = block.attrs.get("language") or ""
    fence = "```"
    while fence in content:
        fence += "`"
    return f"{fence}{language}\n{content}\n{fence}"


def _render_ordered_list(block: Block) -> str:
    start = block.attrs.get("start")
    if not isinstance(start, int) or isinstance(start, bool):
        start = 1
    items = block.attrs.get("items") or []
    return "\n".join(f"{start + i}. {item}" for i, item in enumerate(items))


def _render_inline(content: Iterable[InlineContent] | None) -> str:
    return "".join(_render_run(run) for run in content or ())


def _render_run(run: InlineContent) -> str:
    """Render a single run with its marks."""
    text = run.text
    if not text:
        return ""

    if run.has_mark(MarkType.CODE):
        text = f"`{text}`"
    else:
        bold = run.has_mark(MarkType.BOLD)
        italic = run.has_mark(MarkType.ITALIC)
        if bold and italic:
            text = f"***{text}***"
        elif bold:
            text = f"**{text}**"
        elif italic:
            text = f"*{text}*"
        if run.has_mark(MarkType.STRIKE):
            text = f"~~{text}~~"

    for mark in run.marks or ():
        if mark.type == MarkType.LINK and mark.href:
            text = f"[{text}]({mark.href})"
            break

    return text
