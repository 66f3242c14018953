"""Message composer state: input mode, text, and bounded send history."""

from __future__ import annotations

from enum import Enum
import logging
from typing import NamedTuple

LOGGER = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 100


class InputMode(str, Enum):
    """What the composer is currently collecting."""

    NONE = "none"
    BROADCAST = "broadcast"
    MESSAGE = "message"
    NEW_MYSIS = "new_mysis"
    CONFIG_PROVIDER = "config_provider"


class ModePrompt(NamedTuple):
    prompt: str
    placeholder: str


MODE_PROMPTS: dict[InputMode, ModePrompt] = {
    InputMode.NONE: ModePrompt("", ""),
    InputMode.BROADCAST: ModePrompt("📢 ", "Broadcast message to all myses..."),
    InputMode.MESSAGE: ModePrompt("💬 ", "Message to mysis..."),
    InputMode.NEW_MYSIS: ModePrompt("🤖 ", "Enter mysis name..."),
    InputMode.CONFIG_PROVIDER: ModePrompt("⚙️ ", "Enter provider (ollama/opencode_zen)..."),
}
IDLE_PLACEHOLDER = "Press 'm' to message, 'b' to broadcast..."

# Modes whose submissions are remembered and browsable with up/down.
HISTORY_MODES = frozenset({InputMode.BROADCAST, InputMode.MESSAGE})


class InputHistory:
    """Composer state machine with draft-preserving history browsing.

    The composer is either inactive (``InputMode.NONE``) or composing in a
    mode, optionally aimed at a target mysis. While composing a message or
    broadcast, ``navigate(+1)`` walks to older submissions and
    ``navigate(-1)`` back towards the text that was being typed before
    browsing started.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        self.capacity = max(1, capacity)
        self._entries: list[str] = []
        self._mode = InputMode.NONE
        self._target_id = ""
        self._text = ""
        self._cursor = 0
        self._history_index = -1
        self._draft = ""

    @property
    def mode(self) -> InputMode:
        return self._mode

    @property
    def target_id(self) -> str:
        return self._target_id

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def history_index(self) -> int:
        return self._history_index

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def entries(self) -> tuple[str, ...]:
        """Remembered submissions, oldest first."""
        return tuple(self._entries)

    @property
    def is_active(self) -> bool:
        return self._mode is not InputMode.NONE

    @property
    def handles_history(self) -> bool:
        """True when up/down keys belong to history browsing."""
        return self._mode in HISTORY_MODES

    @property
    def prompt(self) -> str:
        return MODE_PROMPTS[self._mode].prompt

    @property
    def placeholder(self) -> str:
        if not self.is_active:
            return IDLE_PLACEHOLDER
        return MODE_PROMPTS[self._mode].placeholder

    def activate(self, mode: InputMode, target_id: str = "") -> None:
        """Start composing in *mode*, clearing any previous text."""
        self._mode = mode
        self._target_id = target_id if mode is not InputMode.NONE else ""
        self._set_text("")
        self._history_index = -1
        self._draft = ""

    def deactivate(self) -> None:
        """Return to the inactive state and forget any browsing state."""
        self.activate(InputMode.NONE)

    def commit(self) -> str:
        """Finish composing: remember the text when applicable and deactivate.

        Returns the submitted text so the caller can deliver it.
        """
        submitted = self._text
        if self.handles_history:
            self.commit_to_history(submitted)
        LOGGER.debug(
            "input.commit",
            extra={"event": "input.commit", "mode": self._mode.value, "chars": len(submitted)},
        )
        self.deactivate()
        return submitted

    def commit_to_history(self, message: str) -> None:
        """Remember *message*, skipping blanks and consecutive repeats."""
        if not message:
            return
        if self._entries and self._entries[-1] == message:
            return
        self._entries.append(message)
        if len(self._entries) > self.capacity:
            del self._entries[: len(self._entries) - self.capacity]

    def set_text(self, text: str, cursor: int | None = None) -> None:
        """Record a direct edit of the text field."""
        self._text = text
        self._cursor = len(text) if cursor is None else min(max(0, cursor), len(text))

    def navigate(self, direction: int) -> bool:
        """Move through history; ``+1`` is older, ``-1`` is newer.

        Returns True when the key press was consumed by history browsing.
        """
        if not self.handles_history:
            return False
        if not self._entries or direction == 0:
            return True

        if direction > 0:
            if self._history_index == -1:
                self._draft = self._text
            self._history_index = min(self._history_index + 1, len(self._entries) - 1)
        else:
            if self._history_index == -1:
                return True
            self._history_index -= 1

        if self._history_index == -1:
            self._set_text(self._draft)
        else:
            self._set_text(self._entries[len(self._entries) - 1 - self._history_index])
        return True

    def _set_text(self, text: str) -> None:
        self._text = text
        self._cursor = len(text)
