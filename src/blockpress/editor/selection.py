"""Selection/cursor adapter.

Turns host text-selection primitives into the facts the per-block input
handlers need: whether the caret sits at the start or end of the focused
text, and which formatting is active at the selection.

Facts are computed on every call and never cached. The mutation engine
reads them and never changes them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class CursorPosition:
    """Caret offset within the nearest editable container."""

    offset: int
    at_start: bool
    at_end: bool


NO_CURSOR = CursorPosition(offset=0, at_start=False, at_end=False)


@dataclass(frozen=True)
class SelectionState:
    """Formatting active at the current selection."""

    is_collapsed: bool = True
    is_bold: bool = False
    is_italic: bool = False
    is_code: bool = False
    is_link: bool = False
    link_href: str | None = None


EMPTY_SELECTION = SelectionState()


class TextSelectionProbe(ABC):
    """Host capability exposing native text-selection primitives.

    A browser bridge implements this over ``window.getSelection()``; a
    terminal or native text view implements it over its own buffer.
    """

    @abstractmethod
    def has_selection(self) -> bool:
        """Whether the host currently holds a selection range."""

    @abstractmethod
    def is_collapsed(self) -> bool:
        """Whether the selection is a bare caret."""

    @abstractmethod
    def caret_offset(self) -> int:
        """Characters between the start of the container text and the range start."""

    @abstractmethod
    def container_text(self) -> str | None:
        """Full text of the nearest editable ancestor, or None when there is none."""

    @abstractmethod
    def query_format(self, name: str) -> bool:
        """Whether the host reports ``name`` ("bold", "italic") as active."""

    @abstractmethod
    def closest_ancestor(self, tag: str) -> Mapping[str, str] | None:
        """Attributes of the closest ancestor element ``tag`` around the anchor, if any."""


def get_cursor_position(probe: TextSelectionProbe) -> CursorPosition:
    """Measure the caret against the full text of its container."""
    if not probe.has_selection():
        return NO_CURSOR

    text = probe.container_text()
    if text is None:
        return NO_CURSOR

    offset = probe.caret_offset()
    return CursorPosition(
        offset=offset,
        at_start=offset == 0,
        at_end=offset == len(text),
    )


def read_selection_state(probe: TextSelectionProbe) -> SelectionState:
    """Collect formatting flags for the toolbar."""
    if not probe.has_selection():
        return EMPTY_SELECTION

    link = probe.closest_ancestor("a")
    return SelectionState(
        is_collapsed=probe.is_collapsed(),
        is_bold=probe.query_format("bold"),
        is_italic=probe.query_format("italic"),
        is_code=probe.closest_ancestor("code") is not None,
        is_link=link is not None,
        link_href=link.get("href") if link is not None else None,
    )


class TextBufferProbe(TextSelectionProbe):
    """In-memory probe over a plain text buffer.

    ``anchor`` and ``focus`` are character offsets; ``None`` anchor means
    nothing is selected. ``formats`` names the active formats and ``ancestors``
    maps element tags enclosing the anchor to their attributes.
    """

    def __init__(
        self,
        text: str | None = "",
        anchor: int | None = 0,
        focus: int | None = None,
        *,
        formats: Iterable[str] = (),
        ancestors: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        self.text = text
        self.anchor = anchor
        self.focus = anchor if focus is None else focus
        self.formats = set(formats)
        self.ancestors = dict(ancestors or {})

    @classmethod
    def caret_at(cls, text: str, offset: int) -> TextBufferProbe:
        return cls(text, offset)

    @classmethod
    def caret_at_end(cls, text: str) -> TextBufferProbe:
        return cls(text, len(text))

    def has_selection(self) -> bool:
        return self.anchor is not None

    def is_collapsed(self) -> bool:
        return self.anchor == self.focus

    def caret_offset(self) -> int:
        if self.anchor is None:
            return 0
        return min(self.anchor, self.focus if self.focus is not None else self.anchor)

    def container_text(self) -> str | None:
        return self.text

    def query_format(self, name: str) -> bool:
        return name in self.formats

    def closest_ancestor(self, tag: str) -> Mapping[str, str] | None:
        return self.ancestors.get(tag)
