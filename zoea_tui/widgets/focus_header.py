"""Two-line banner naming the focused mysis."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget

from ..panels import MysisInfo, focus_header
from ..theme import DEFAULT_THEME, Theme


class FocusHeader(Widget):
    DEFAULT_CSS = """
    FocusHeader {
        height: 2;
    }
    """

    def __init__(self, theme: Theme = DEFAULT_THEME, **kwargs) -> None:
        super().__init__(**kwargs)
        self._theme = theme
        self.mysis: MysisInfo | None = None
        self.position = 0
        self.total = 0
        self.spinner = ""

    def show(self, mysis: MysisInfo, position: int, total: int) -> None:
        self.mysis = mysis
        self.position = position
        self.total = total
        self.refresh()

    def render(self) -> Text:
        if self.mysis is None:
            return Text("")
        banner, details = focus_header(
            self.mysis, self.position, self.total, self.size.width, self.spinner
        )
        errored = self.mysis.state == "errored" and bool(self.mysis.last_error)
        detail_style = self._theme.style("error", bold=True) if errored else self._theme.style("muted")
        return Text("\n").join(
            [
                Text(banner, style=self._theme.style("brand", bold=True), no_wrap=True),
                Text(details, style=detail_style, no_wrap=True),
            ]
        )
