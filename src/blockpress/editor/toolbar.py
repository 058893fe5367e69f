"""Formatting toolbar.

Block conversion presets, inline formatting commands executed by the host
surface, and the snapshot the toolbar renders its button states from.

Inline formatting is applied by the host (``document.execCommand`` in a
browser) and only reaches the model when the block's text is captured
again, at which point it is flattened to one run.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from ..errors import EditorCommandError, ValidationError
from ..settings import settings
from .models import TEXT_TYPES, Block, BlockType, EditorState
from .selection import SelectionState, TextSelectionProbe, read_selection_state
from .session import EditorSession

logger = logging.getLogger(__name__)


def can_format(block: Block | None) -> bool:
    """Inline formatting applies to paragraphs, headings and quotes only."""
    return block is not None and block.type in TEXT_TYPES


# =============================================================================
# Block conversion presets
# =============================================================================


@dataclass(frozen=True)
class ConversionPreset:
    """Target of a "turn into" toolbar action."""

    label: str
    type: BlockType
    attrs: Mapping[str, Any] | None = None

    def fresh_attrs(self) -> dict[str, Any] | None:
        """Copy of ``attrs`` so that blocks never share list objects."""
        if self.attrs is None:
            return None
        return {key: list(value) if isinstance(value, (list, tuple)) else value
                for key, value in self.attrs.items()}


CONVERSION_PRESETS: Mapping[str, ConversionPreset] = MappingProxyType({
    "paragraph": ConversionPreset("Paragraph", BlockType.PARAGRAPH),
    "heading1": ConversionPreset("Heading 1", BlockType.HEADING, {"level": 1}),
    "heading2": ConversionPreset("Heading 2", BlockType.HEADING, {"level": 2}),
    "heading3": ConversionPreset("Heading 3", BlockType.HEADING, {"level": 3}),
    "bulletList": ConversionPreset("Bullet list", BlockType.BULLET_LIST, {"items": [""]}),
    "orderedList": ConversionPreset("Numbered list", BlockType.ORDERED_LIST, {"items": [""]}),
    "blockquote": ConversionPreset("Quote", BlockType.BLOCKQUOTE),
    "code": ConversionPreset("Code", BlockType.CODE, {"content": "", "language": "text"}),
    "image": ConversionPreset("Image", BlockType.IMAGE, {"src": ""}),
})


def _preset_allowed(preset: ConversionPreset, max_heading_level: int) -> bool:
    if preset.type != BlockType.HEADING or preset.attrs is None:
        return True
    return preset.attrs.get("level", 1) <= max_heading_level


def toolbar_presets(max_heading_level: int | None = None) -> dict[str, ConversionPreset]:
    """Presets the toolbar offers; headings deeper than the configured maximum are left out."""
    limit = settings.max_heading_level if max_heading_level is None else max_heading_level
    return {
        name: preset
        for name, preset in CONVERSION_PRESETS.items()
        if _preset_allowed(preset, limit)
    }


def apply_preset(
    session: EditorSession,
    name: str,
    *,
    max_heading_level: int | None = None,
) -> EditorState:
    """Convert the active block using a named preset.

    Raises:
        KeyError: If ``name`` is not a preset.
        ValidationError: If the preset is a heading above the configured maximum level.
    """
    preset = CONVERSION_PRESETS[name]
    limit = settings.max_heading_level if max_heading_level is None else max_heading_level
    if not _preset_allowed(preset, limit):
        raise ValidationError(
            f"Heading level must be at most {limit}",
            field="level",
            value=preset.attrs.get("level") if preset.attrs else None,
            constraint="max_heading_level",
        )
    return session.convert_active_block(preset.type, preset.fresh_attrs())


# =============================================================================
# Inline formatting commands
# =============================================================================


class FormattingHost(ABC):
    """Host surface that applies inline formatting to its own selection."""

    @abstractmethod
    def exec_command(self, name: str, value: str | None = None) -> None:
        """Run a host formatting command such as ``bold`` or ``createLink``."""


def _exec(host: FormattingHost, name: str, value: str | None = None) -> None:
    try:
        host.exec_command(name, value)
    except EditorCommandError:
        raise
    except Exception as exc:
        logger.warning("Formatting command %s failed: %s", name, exc)
        raise EditorCommandError(f"Formatting command failed: {name}", command=name) from exc


def bold(host: FormattingHost) -> None:
    _exec(host, "bold")


def italic(host: FormattingHost) -> None:
    _exec(host, "italic")


def create_link(host: FormattingHost, probe: TextSelectionProbe, href: str) -> None:
    """Link the selected text.

    Raises:
        EditorCommandError: If nothing is selected or ``href`` is blank.
    """
    href = (href or "").strip()
    if not href:
        raise EditorCommandError("Link URL is required", command="createLink")
    if not probe.has_selection() or probe.is_collapsed():
        raise EditorCommandError("Select text to link", command="createLink")
    _exec(host, "createLink", href)


def unlink(host: FormattingHost) -> None:
    _exec(host, "unlink")


def toggle_link(host: FormattingHost, probe: TextSelectionProbe, href: str | None = None) -> None:
    """Remove the link around the selection, or link the selection to ``href``."""
    if read_selection_state(probe).is_link:
        unlink(host)
    else:
        create_link(host, probe, href or "")


# =============================================================================
# Toolbar snapshot
# =============================================================================


@dataclass(frozen=True)
class ToolbarState:
    can_format: bool = False
    can_link: bool = False
    is_bold: bool = False
    is_italic: bool = False
    is_link: bool = False
    link_href: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "can_format": self.can_format,
            "can_link": self.can_link,
            "is_bold": self.is_bold,
            "is_italic": self.is_italic,
            "is_link": self.is_link,
            "link_href": self.link_href,
        }


def toolbar_state(block: Block | None, selection: SelectionState) -> ToolbarState:
    """Button states for the focused block and current selection."""
    formattable = can_format(block)
    return ToolbarState(
        can_format=formattable,
        can_link=formattable and not selection.is_collapsed,
        is_bold=formattable and selection.is_bold,
        is_italic=formattable and selection.is_italic,
        is_link=formattable and selection.is_link,
        link_href=selection.link_href if formattable else None,
    )


def read_toolbar_state(session: EditorSession, probe: TextSelectionProbe) -> ToolbarState:
    return toolbar_state(session.active_block, read_selection_state(probe))
