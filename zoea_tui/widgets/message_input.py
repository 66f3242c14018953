"""Single-line composer with mode prompts and up/down history browsing."""

from __future__ import annotations

from typing import Any

from textual.actions import SkipAction
from textual.binding import Binding
from textual.widgets import Input

from ..history import DEFAULT_HISTORY_SIZE, IDLE_PLACEHOLDER, InputHistory, InputMode


class MessageInput(Input):
    """Text field driven by an :class:`InputHistory`.

    Up and down are intercepted while composing a message or broadcast and
    walk the send history; in any other mode they fall through to the app.
    """

    BINDINGS = [
        Binding("up", "history_older", "Older", show=False),
        Binding("down", "history_newer", "Newer", show=False),
    ]

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE, **kwargs: Any) -> None:
        super().__init__(placeholder=IDLE_PLACEHOLDER, **kwargs)
        self.history = InputHistory(history_size)

    @property
    def mode(self) -> InputMode:
        return self.history.mode

    @property
    def target_id(self) -> str:
        return self.history.target_id

    def begin(self, mode: InputMode, target_id: str = "") -> None:
        """Start composing in *mode* and take focus."""
        self.history.activate(mode, target_id)
        self._sync_from_history()
        self.focus()

    def finish(self) -> str:
        """Commit the current text and return it."""
        self.history.set_text(self.value, self.cursor_position)
        submitted = self.history.commit()
        self._sync_from_history()
        return submitted

    def cancel(self) -> None:
        """Abandon the current text and leave composing mode."""
        self.history.deactivate()
        self._sync_from_history()

    def action_history_older(self) -> None:
        self._navigate(1)

    def action_history_newer(self) -> None:
        self._navigate(-1)

    def _navigate(self, direction: int) -> None:
        if not self.history.handles_history:
            raise SkipAction()
        # Pick up typing done since the last sync so the draft is exact.
        if self.history.history_index == -1:
            self.history.set_text(self.value, self.cursor_position)
        if self.history.navigate(direction):
            self._sync_from_history()

    def _sync_from_history(self) -> None:
        self.value = self.history.text
        self.cursor_position = self.history.cursor
        self.placeholder = f"{self.history.prompt}{self.history.placeholder}"
