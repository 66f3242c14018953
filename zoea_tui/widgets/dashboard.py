"""Swarm overview: recent broadcasts and one two-row entry per mysis."""

from __future__ import annotations

from rich.text import Text
from textual.binding import Binding
from textual.message import Message
from textual.widget import Widget

from ..panels import (
    EMPTY_SWARM_MESSAGE,
    SPINNER_FRAMES,
    MysisInfo,
    collect_broadcasts,
    dashboard_rows,
    section_title,
    state_counts,
    swarm_lines,
)
from ..scrollbar import ScrollGeometry
from ..theme import DEFAULT_THEME, Theme

ROWS_PER_MYSIS = 2


class SwarmDashboard(Widget, can_focus=True):
    """Dashboard list with a movable selection cursor."""

    DEFAULT_CSS = """
    SwarmDashboard {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("up", "select_previous", "Previous", show=False),
        Binding("down", "select_next", "Next", show=False),
    ]

    class SelectionChanged(Message):
        def __init__(self, index: int) -> None:
            super().__init__()
            self.index = index

    def __init__(self, theme: Theme = DEFAULT_THEME, **kwargs) -> None:
        super().__init__(**kwargs)
        self._theme = theme
        self.myses: list[MysisInfo] = []
        self.selected_index = 0
        self.current_tick = 0
        self.spinner_index = 0

    @property
    def spinner(self) -> str:
        return SPINNER_FRAMES[self.spinner_index % len(SPINNER_FRAMES)]

    @property
    def selected(self) -> MysisInfo | None:
        if not self.myses:
            return None
        return self.myses[self.selected_index]

    def set_myses(self, myses: list[MysisInfo], current_tick: int | None = None) -> None:
        self.myses = myses
        if current_tick is not None:
            self.current_tick = current_tick
        self.select(self.selected_index)

    def select(self, index: int) -> None:
        """Move the cursor, wrapping around at either end."""
        self.selected_index = index % len(self.myses) if self.myses else 0
        self.post_message(self.SelectionChanged(self.selected_index))
        self.refresh()

    def action_select_next(self) -> None:
        self.select(self.selected_index + 1)

    def action_select_previous(self) -> None:
        self.select(self.selected_index - 1)

    def advance_spinner(self) -> None:
        self.spinner_index = (self.spinner_index + 1) % len(SPINNER_FRAMES)
        if any(mysis.state == "running" for mysis in self.myses):
            self.refresh()

    def _window(self, height: int) -> range:
        """Indices of the myses that fit, keeping the selection visible."""
        per_page = max(height // ROWS_PER_MYSIS, 1)
        first = max(self.selected_index - per_page + 1, 0)
        geometry = ScrollGeometry.clamp(per_page, len(self.myses), first)
        return range(geometry.offset, min(geometry.offset + per_page, len(self.myses)))

    def render(self) -> Text:
        width = self.size.width
        title_style = self._theme.style("brand", bold=True)
        muted = self._theme.style("muted")

        rows = [Text(section_title("SWARM BROADCAST", width), style=title_style)]
        broadcasts = swarm_lines(collect_broadcasts(self.myses), width, self.current_tick)
        rows.extend(Text(line, style=self._theme.style("swarm"), no_wrap=True) for line in broadcasts)

        rows.append(
            Text(section_title("MYSIS SWARM", width, f" {state_counts(self.myses, self.spinner)}".rstrip()), style=title_style)
        )
        if not self.myses:
            rows.append(Text(EMPTY_SWARM_MESSAGE, style=muted))
            return Text("\n").join(rows)

        remaining = self.size.height - len(rows)
        for index in self._window(max(remaining, ROWS_PER_MYSIS)):
            mysis = self.myses[index]
            selected = index == self.selected_index
            indicator = self.spinner if mysis.state == "running" else ""
            info, activity = dashboard_rows(mysis, selected, width, self.current_tick, indicator)
            info_style = self._theme.style("teal", bold=True) if selected else ""
            activity_style = (
                self._theme.style("error") if mysis.state == "errored" and mysis.last_error else muted
            )
            rows.append(Text(info, style=info_style, no_wrap=True))
            rows.append(Text(activity, style=activity_style, no_wrap=True))
        return Text("\n").join(rows)

