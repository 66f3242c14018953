"""Footer line showing key hints and, when present, the last error."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget

from ..panels import DASHBOARD_HINT, ERROR_LABEL, HINT_SEPARATOR, render_hint_with_error
from ..theme import DEFAULT_THEME, Theme


class HintBar(Widget):
    """One row: the current hint text followed by an optional error."""

    DEFAULT_CSS = """
    HintBar {
        height: 1;
    }
    """

    def __init__(self, theme: Theme = DEFAULT_THEME, hint: str = DASHBOARD_HINT, **kwargs) -> None:
        super().__init__(**kwargs)
        self._theme = theme
        self.hint = hint
        self.error: str | None = None

    def set_hint(self, hint: str) -> None:
        self.hint = hint
        self.refresh()

    def set_error(self, error: BaseException | str | None) -> None:
        self.error = None if error is None else str(error)
        self.refresh()

    def clear_error(self) -> None:
        self.set_error(None)

    @property
    def plain(self) -> str:
        """The line exactly as it is drawn at the current width."""
        return render_hint_with_error(self.hint, self.error, self.size.width)

    def render(self) -> Text:
        line = self.plain
        text = Text(line, style=self._theme.style("muted"), no_wrap=True)
        marker = f"{HINT_SEPARATOR}{ERROR_LABEL}"
        start = line.find(marker)
        if self.error and start >= 0:
            text.stylize(self._theme.style("error", bold=True), start + len(HINT_SEPARATOR))
        return text
