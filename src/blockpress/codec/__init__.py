"""Conversions between editor blocks and external formats.

- serializer: editor blocks -> persisted block nodes
- deserializer: persisted block nodes -> editor blocks
- schema: pydantic content schema for persisted nodes
- markdown: Markdown import and export
"""

from .deserializer import deserialize_blocks
from .markdown import parse_markdown, render_markdown
from .schema import dump_blocks, validate_blocks, validate_content_can_publish, validate_slug
from .serializer import serialize_blocks

__all__ = [
    "deserialize_blocks",
    "dump_blocks",
    "parse_markdown",
    "render_markdown",
    "serialize_blocks",
    "validate_blocks",
    "validate_content_can_publish",
    "validate_slug",
]
