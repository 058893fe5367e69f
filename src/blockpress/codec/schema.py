"""Content schema for persisted blocks.

Pydantic models for every block node the content store accepts. This is a
superset of what the editor authors: horizontal rules, embeds, callouts,
audio players and tables validate here but cannot be opened in the editor.

Unknown keys are ignored, matching how the content API strips them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ContentValidationError, ValidationError
from ..settings import settings

logger = logging.getLogger(__name__)


class _Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Inline content
# =============================================================================


class BoldMark(_Node):
    type: Literal["bold"]


class ItalicMark(_Node):
    type: Literal["italic"]


class CodeMark(_Node):
    type: Literal["code"]


class StrikeMark(_Node):
    type: Literal["strike"]


class LinkAttrs(_Node):
    href: str
    target: str | None = None


class LinkMark(_Node):
    type: Literal["link"]
    attrs: LinkAttrs


Mark = Annotated[
    Union[BoldMark, ItalicMark, CodeMark, StrikeMark, LinkMark],
    Field(discriminator="type"),
]


class TextContent(_Node):
    type: Literal["text"]
    text: str
    marks: list[Mark] | None = None


# =============================================================================
# Editor-authored blocks
# =============================================================================


class ParagraphNode(_Node):
    type: Literal["paragraph"]
    content: list[TextContent] | None = None


class HeadingAttrs(_Node):
    level: int = Field(ge=1)

    @field_validator("level")
    @classmethod
    def _level_in_range(cls, value: int) -> int:
        if value > settings.max_heading_level:
            raise ValueError(f"heading level must be at most {settings.max_heading_level}")
        return value


class HeadingNode(_Node):
    type: Literal["heading"]
    attrs: HeadingAttrs
    content: list[TextContent] | None = None


class ImageAttrs(_Node):
    src: str
    alt: str | None = None
    title: str | None = None
    width: int | float | None = None
    height: int | float | None = None
    caption: str | None = None


class ImageNode(_Node):
    type: Literal["image"]
    attrs: ImageAttrs


class CodeAttrs(_Node):
    language: str | None = None
    filename: str | None = None


class CodeNode(_Node):
    type: Literal["code"]
    attrs: CodeAttrs
    content: str


class BlockquoteNode(_Node):
    type: Literal["blockquote"]
    # Nested blocks are not validated recursively
    content: list[Any] | None = None


class ListItemNode(_Node):
    type: Literal["listItem"]
    content: list[Any] | None = None


class BulletListNode(_Node):
    type: Literal["bulletList"]
    content: list[ListItemNode]


class OrderedListAttrs(_Node):
    start: int | float | None = None


class OrderedListNode(_Node):
    type: Literal["orderedList"]
    attrs: OrderedListAttrs | None = None
    content: list[ListItemNode]


# =============================================================================
# Store-only blocks
# =============================================================================


class HorizontalRuleNode(_Node):
    type: Literal["horizontalRule"]


class EmbedData(_Node):
    id: str
    title: str | None = None
    description: str | None = None
    thumbnail: str | None = None
    author: str | None = None
    duration: int | float | None = None
    metadata: dict[str, Any] | None = None


class EmbedAttrs(_Node):
    provider: str
    url: str
    embed_data: EmbedData = Field(alias="embedData")


class EmbedNode(_Node):
    type: Literal["embed"]
    attrs: EmbedAttrs


class CalloutAttrs(_Node):
    variant: Literal["info", "warning", "success", "error"]
    icon: str | None = None


class CalloutNode(_Node):
    type: Literal["callout"]
    attrs: CalloutAttrs
    content: list[Any] | None = None


class AudioPlayerAttrs(_Node):
    track_id: str = Field(alias="trackId")
    title: str
    artist: str
    audio_url: str = Field(alias="audioUrl")
    waveform_data: list[float] | None = Field(default=None, alias="waveformData")
    duration: int | float
    cover_art: str | None = Field(default=None, alias="coverArt")


class AudioPlayerNode(_Node):
    type: Literal["audioPlayer"]
    attrs: AudioPlayerAttrs


class TableHeaderNode(_Node):
    type: Literal["tableHeader"]
    content: list[TextContent] | None = None


class TableCellNode(_Node):
    type: Literal["tableCell"]
    content: list[TextContent] | None = None


TableCell = Annotated[Union[TableHeaderNode, TableCellNode], Field(discriminator="type")]


class TableRowNode(_Node):
    type: Literal["tableRow"]
    content: list[TableCell]


class TableNode(_Node):
    type: Literal["table"]
    content: list[TableRowNode]


ContentBlock = Annotated[
    Union[
        ParagraphNode,
        HeadingNode,
        ImageNode,
        CodeNode,
        BlockquoteNode,
        BulletListNode,
        OrderedListNode,
        HorizontalRuleNode,
        EmbedNode,
        CalloutNode,
        AudioPlayerNode,
        TableNode,
    ],
    Field(discriminator="type"),
]

_BLOCKS_ADAPTER = TypeAdapter(list[ContentBlock])


# =============================================================================
# Validation helpers
# =============================================================================


def validate_blocks(payload: Any) -> list[ContentBlock]:
    """Validate a persisted block list.

    Raises:
        ContentValidationError: With one entry per schema violation.
    """
    try:
        return _BLOCKS_ADAPTER.validate_python(payload)
    except PydanticValidationError as exc:
        errors = [
            {key: value for key, value in error.items() if key != "input"}
            for error in exc.errors(include_url=False, include_context=False)
        ]
        logger.debug("Content schema rejected payload: %s", errors)
        raise ContentValidationError(
            f"Invalid content blocks: {exc.error_count()} error(s)",
            errors=errors,
        ) from exc


def dump_blocks(blocks: Sequence[ContentBlock]) -> list[dict[str, Any]]:
    """Emit validated blocks as JSON-ready dicts without unset keys."""
    return _BLOCKS_ADAPTER.dump_python(list(blocks), mode="json", by_alias=True, exclude_none=True)


_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
MAX_SLUG_LEN = 255


def validate_slug(slug: Any) -> str:
    """Validate a URL slug: lowercase words joined by single dashes."""
    if not isinstance(slug, str):
        raise ValidationError("Slug must be a string", field="slug")
    if len(slug) > MAX_SLUG_LEN:
        raise ValidationError(
            f"Slug must be at most {MAX_SLUG_LEN} characters",
            field="slug",
            constraint="max_length",
        )
    if not _SLUG_RE.match(slug):
        raise ValidationError("Slug has invalid format", field="slug", value=slug, constraint="pattern")
    return slug


def validate_content_can_publish(title: str, blocks: Sequence[Any]) -> None:
    """Check that a content item has what publishing requires."""
    if not title or not title.strip():
        raise ValidationError("Title cannot be empty", field="title")
    if not blocks:
        raise ValidationError("Content must have at least one block", field="blocks")
