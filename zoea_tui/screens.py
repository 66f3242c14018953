"""Modal screens layered over the dashboard."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from .panels import help_lines
from .theme import DEFAULT_THEME, Theme


class HelpScreen(ModalScreen[None]):
    """Keyboard shortcut overlay; closes on Escape or ``?``."""

    CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 60;
        max-width: 100%;
        height: auto;
        max-height: 100%;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
        Binding("question_mark", "close", "Close", show=False),
    ]

    def __init__(self, theme: Theme = DEFAULT_THEME) -> None:
        super().__init__()
        self._theme = theme

    def compose(self) -> ComposeResult:
        title, *rest = help_lines()
        body = Text(title, style=self._theme.style("brand", bold=True))
        for line in rest:
            body.append("\n")
            body.append(line)
        with Container(id="help-dialog"):
            yield Static(body, id="help-body")

    def action_close(self) -> None:
        self.dismiss(None)
