"""Scroll geometry and the proportional scrollbar column."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.text import Text

if TYPE_CHECKING:
    from .theme import Theme

SCROLLBAR_THUMB = "█"
SCROLLBAR_TRACK = "│"


@dataclass(frozen=True)
class ScrollGeometry:
    """Viewport height, content length and a top offset that always agree."""

    viewport_height: int
    total_lines: int
    offset: int

    @classmethod
    def clamp(cls, viewport_height: int, total_lines: int, offset: int) -> ScrollGeometry:
        """Build a geometry, pulling every value back into its valid range."""
        height = max(0, viewport_height)
        total = max(0, total_lines)
        max_offset = max(0, total - height)
        return cls(height, total, min(max(0, offset), max_offset))

    @property
    def max_offset(self) -> int:
        return max(0, self.total_lines - self.viewport_height)

    @property
    def at_bottom(self) -> bool:
        return self.offset >= self.max_offset

    def scroll_indicator(self) -> str:
        """Return ``"  LINE n/total"`` while scrolled up, otherwise an empty string."""
        if self.at_bottom or self.total_lines <= 0:
            return ""
        current = min(self.offset + 1, self.total_lines)
        return f"  LINE {current}/{self.total_lines}"


def thumb_span(height: int, total_lines: int, offset: int) -> tuple[int, int] | None:
    """Return ``(position, size)`` of the thumb, or ``None`` when nothing scrolls."""
    if height <= 0 or total_lines <= height:
        return None
    thumb_size = min(max((height * height) // total_lines, 1), height)
    scroll_ratio = min(max(offset / (total_lines - height), 0.0), 1.0)
    max_thumb_pos = height - thumb_size
    return int(scroll_ratio * max_thumb_pos), thumb_size


def compute_scrollbar(
    height: int,
    total_lines: int,
    offset: int,
    *,
    thumb: str = SCROLLBAR_THUMB,
    track: str = SCROLLBAR_TRACK,
) -> list[str]:
    """Return one glyph per viewport row: thumb where the view is, track elsewhere."""
    if height <= 0:
        return []
    span = thumb_span(height, total_lines, offset)
    if span is None:
        return [track] * height
    position, size = span
    return [thumb if position <= row < position + size else track for row in range(height)]


def render_scrollbar(height: int, total_lines: int, offset: int, theme: Theme) -> list[Text]:
    """Styled variant of :func:`compute_scrollbar`."""
    thumb_style = theme.style("scrollbar_thumb")
    track_style = theme.style("scrollbar_track")
    return [
        Text(glyph, style=thumb_style if glyph == SCROLLBAR_THUMB else track_style)
        for glyph in compute_scrollbar(height, total_lines, offset)
    ]
