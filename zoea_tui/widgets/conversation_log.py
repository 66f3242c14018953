"""Scrollable conversation log with its own line-based scroll bookkeeping."""

from __future__ import annotations

import logging

from rich.text import Text
from textual import events
from textual.binding import Binding
from textual.message import Message
from textual.widget import Widget

from ..entries import LogEntry, render_entry
from ..panels import section_title
from ..scrollbar import ScrollGeometry, render_scrollbar
from ..theme import DEFAULT_THEME, Theme

LOGGER = logging.getLogger(__name__)

LOG_TITLE = "CONVERSATION LOG"
MOUSE_SCROLL_LINES = 3
SCROLLBAR_GUTTER = 2


class ConversationLog(Widget, can_focus=True):
    """Render log entries into a fixed viewport with a proportional scrollbar.

    The first row is a section title carrying the scroll indicator and the
    last row is a closing rule; everything between is the viewport. The log
    follows new entries until the user scrolls up, and resumes following
    once scrolled back to the bottom.
    """

    DEFAULT_CSS = """
    ConversationLog {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("up", "line_up", "Scroll up", show=False),
        Binding("down", "line_down", "Scroll down", show=False),
        Binding("pageup", "page_older", "Page up", show=False),
        Binding("pagedown", "page_newer", "Page down", show=False),
        Binding("end", "follow", "Bottom", show=False),
        Binding("home", "top", "Top", show=False),
    ]

    class ScrollChanged(Message):
        """Posted when the visible window moves."""

        def __init__(self, at_bottom: bool) -> None:
            super().__init__()
            self.at_bottom = at_bottom

    def __init__(
        self,
        theme: Theme = DEFAULT_THEME,
        *,
        verbose: bool = False,
        show_scrollbar: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._theme = theme
        self.verbose = verbose
        self.show_scrollbar = show_scrollbar
        self.current_tick: int | None = None
        self.follow_tail = True
        self.line_offset = 0
        self._entries: list[LogEntry] = []
        self._layout: tuple[tuple[int, bool, int | None], list[Text]] | None = None

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    @property
    def viewport_height(self) -> int:
        return max(self.size.height - 2, 0)

    @property
    def content_width(self) -> int:
        gutter = SCROLLBAR_GUTTER if self.show_scrollbar else 0
        return max(self.size.width - gutter, 1)

    def set_entries(self, entries: list[LogEntry], *, keep_position: bool = False) -> None:
        """Replace the log content, jumping to the newest entry unless told otherwise."""
        self._entries = list(entries)
        self._layout = None
        if not keep_position:
            self.follow_tail = True
        self._changed()

    def append_entry(self, entry: LogEntry) -> None:
        """Add an entry; the view only moves when it is following the tail."""
        self._entries.append(entry)
        self._layout = None
        self._changed()

    def toggle_verbose(self) -> bool:
        self.verbose = not self.verbose
        self._changed()
        return self.verbose

    def rendered_lines(self) -> list[Text]:
        """All laid out lines for the current width and verbosity.

        The layout is kept until the entries change or the width, verbosity
        or tick it was built for no longer match.
        """
        key = (self.content_width, self.verbose, self.current_tick)
        if self._layout is not None and self._layout[0] == key:
            return self._layout[1]
        lines: list[Text] = []
        for entry in self._entries:
            lines.extend(
                render_entry(
                    entry,
                    self.content_width,
                    self.verbose,
                    self._theme,
                    current_tick=self.current_tick,
                )
            )
        self._layout = (key, lines)
        return lines

    def geometry(self, total_lines: int | None = None) -> ScrollGeometry:
        total = len(self.rendered_lines()) if total_lines is None else total_lines
        if self.follow_tail:
            return ScrollGeometry.clamp(self.viewport_height, total, total)
        return ScrollGeometry.clamp(self.viewport_height, total, self.line_offset)

    def scroll_by_lines(self, delta: int) -> None:
        """Move the viewport by *delta* lines; positive is towards newer lines."""
        current = self.geometry()
        moved = ScrollGeometry.clamp(
            current.viewport_height, current.total_lines, current.offset + delta
        )
        self.line_offset = moved.offset
        self.follow_tail = moved.at_bottom
        self._changed()

    def scroll_to_latest(self) -> None:
        self.follow_tail = True
        self._changed()

    def action_line_up(self) -> None:
        self.scroll_by_lines(-1)

    def action_line_down(self) -> None:
        self.scroll_by_lines(1)

    def action_page_older(self) -> None:
        self.scroll_by_lines(-max(self.viewport_height - 1, 1))

    def action_page_newer(self) -> None:
        self.scroll_by_lines(max(self.viewport_height - 1, 1))

    def action_follow(self) -> None:
        self.scroll_to_latest()

    def action_top(self) -> None:
        self.follow_tail = False
        self.line_offset = 0
        self._changed()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self.scroll_by_lines(-MOUSE_SCROLL_LINES)

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self.scroll_by_lines(MOUSE_SCROLL_LINES)

    def on_resize(self, event: events.Resize) -> None:
        self._changed()

    def _changed(self) -> None:
        geometry = self.geometry()
        if not self.follow_tail:
            self.line_offset = geometry.offset
        self.post_message(self.ScrollChanged(geometry.at_bottom))
        self.refresh()

    def render(self) -> Text:
        width = self.size.width
        lines = self.rendered_lines()
        geometry = self.geometry(len(lines))
        title_style = self._theme.style("brand", bold=True)

        rows = [Text(section_title(LOG_TITLE, width, geometry.scroll_indicator()), style=title_style)]
        visible = lines[geometry.offset : geometry.offset + geometry.viewport_height]
        bar = (
            render_scrollbar(geometry.viewport_height, geometry.total_lines, geometry.offset, self._theme)
            if self.show_scrollbar
            else []
        )
        for row in range(geometry.viewport_height):
            line = visible[row].copy() if row < len(visible) else Text()
            if bar:
                line.truncate(self.content_width, overflow="ellipsis", pad=True)
                line.append(" ")
                line.append_text(bar[row])
            rows.append(line)
        rows.append(Text(section_title("", width), style=title_style))
        return Text("\n").join(rows)
