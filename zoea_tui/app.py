"""Textual shell wiring the layout engine into the swarm dashboard."""

from __future__ import annotations

import inspect
import logging
from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Input, Static

from .config import load_config
from .delivery import LocalEchoSink, MessageSink, OutgoingMessage
from .history import InputMode
from .panels import DASHBOARD_HINT, DASHBOARD_TITLE, MysisInfo, focus_hint
from .screens import HelpScreen
from .theme import Theme
from .widgets import ConversationLog, FocusHeader, HintBar, MessageInput, SwarmDashboard

LOGGER = logging.getLogger(__name__)

DASHBOARD_VIEW = "dashboard"
FOCUS_VIEW = "focus"


class ZoeaDashboardApp(App[None]):
    """Dashboard and focus views over a swarm of myses."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #banner {
        height: 1;
        content-align: center middle;
        text-style: bold;
    }

    #dashboard-view, #focus-view {
        height: 1fr;
    }

    #focus-view {
        display: none;
    }

    #composer {
        height: 3;
        border: round $panel;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("tab", "next_mysis", "Next", show=False, priority=True),
        Binding("shift+tab", "previous_mysis", "Previous", show=False, priority=True),
    ]

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "toggle_help": "Help",
        "quit": "Quit",
        "new_mysis": "New mysis",
        "message": "Message",
        "broadcast": "Broadcast",
        "configure_provider": "Configure",
        "toggle_verbose": "Verbose",
        "focus_mysis": "Focus",
        "back": "Back",
        "scroll_bottom": "Bottom",
    }

    # Actions that operate on the views and are disabled while a modal is open.
    VIEW_ACTIONS = frozenset(DEFAULT_ACTION_DESCRIPTIONS) - {"quit", "toggle_help"} | {
        "next_mysis",
        "previous_mysis",
    }

    def __init__(
        self,
        myses: list[MysisInfo] | None = None,
        *,
        config: dict[str, dict[str, Any]] | None = None,
        current_tick: int = 0,
        sink: MessageSink | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.myses: list[MysisInfo] = myses if myses is not None else []
        self.current_tick = current_tick
        self.zoea_theme = Theme.from_config(self.config.get("theme"))
        self._sink: MessageSink = sink if sink is not None else LocalEchoSink(self.myses)
        self.view = DASHBOARD_VIEW
        self.focus_id = ""
        self._binding_specs = self._binding_specs_from_config(self.config)
        super().__init__()
        self.title = str(self.config["app"]["title"])

    @classmethod
    def _binding_specs_from_config(cls, config: dict[str, dict[str, Any]]) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(key=binding_key.strip(), action=action_name, description=description, show=False)
                )
        return bindings

    def compose(self) -> ComposeResult:
        ui = self.config["ui"]
        theme = self.zoea_theme
        yield Static(Text(DASHBOARD_TITLE, style=theme.style("brand", bold=True)), id="banner")
        with Container(id="dashboard-view"):
            yield SwarmDashboard(theme, id="dashboard")
        with Container(id="focus-view"):
            yield FocusHeader(theme, id="focus-header")
            yield ConversationLog(
                theme,
                verbose=bool(ui["verbose"]),
                show_scrollbar=bool(ui["show_scrollbar"]),
                id="conversation",
            )
        yield MessageInput(int(ui["history_size"]), id="composer")
        yield HintBar(theme, id="hints")

    def on_mount(self) -> None:
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
                key_display=binding.key_display,
            )

        self._w_dashboard = self.query_one(SwarmDashboard)
        self._w_header = self.query_one(FocusHeader)
        self._w_log = self.query_one(ConversationLog)
        self._w_composer = self.query_one(MessageInput)
        self._w_hints = self.query_one(HintBar)
        self._w_dashboard_view = self.query_one("#dashboard-view", Container)
        self._w_focus_view = self.query_one("#focus-view", Container)

        if self.config["ui"]["show_timestamps"]:
            self._w_log.current_tick = self.current_tick
        self._w_dashboard.set_myses(self.myses, self.current_tick)
        self._w_dashboard.focus()
        self.set_interval(float(self.config["app"]["spinner_interval_seconds"]), self._advance_spinner)
        LOGGER.info(
            "app.mounted",
            extra={"event": "app.mounted", "myses": len(self.myses), "tick": self.current_tick},
        )

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action in self.VIEW_ACTIONS and len(self.screen_stack) > 1:
            return False
        return True

    @property
    def focused_mysis(self) -> MysisInfo | None:
        for mysis in self.myses:
            if mysis.id == self.focus_id:
                return mysis
        return None

    def _target_mysis(self) -> MysisInfo | None:
        if self.view == FOCUS_VIEW:
            return self.focused_mysis
        return self._w_dashboard.selected

    def _advance_spinner(self) -> None:
        self._w_dashboard.advance_spinner()
        mysis = self.focused_mysis
        if self.view == FOCUS_VIEW and mysis is not None and mysis.state == "errored":
            self._w_header.spinner = self._w_dashboard.spinner
            self._w_header.refresh()

    def _show_view(self, view: str) -> None:
        self.view = view
        self._w_dashboard_view.display = view == DASHBOARD_VIEW
        self._w_focus_view.display = view == FOCUS_VIEW
        if view == FOCUS_VIEW:
            self._w_hints.set_hint(focus_hint(self._w_log.verbose))
            self._w_log.focus()
        else:
            self._w_hints.set_hint(DASHBOARD_HINT)
            self._w_dashboard.focus()

    def _focus_on(self, mysis: MysisInfo) -> None:
        self.focus_id = mysis.id
        position = self.myses.index(mysis) + 1
        self._w_header.show(mysis, position, len(self.myses))
        self._w_log.set_entries(mysis.entries)
        self._show_view(FOCUS_VIEW)

    def _refresh_views(self) -> None:
        self._w_dashboard.set_myses(self.myses)
        mysis = self.focused_mysis
        if self.view == FOCUS_VIEW and mysis is not None:
            self._w_header.show(mysis, self.myses.index(mysis) + 1, len(self.myses))
            self._w_log.set_entries(mysis.entries, keep_position=True)

    def _report_error(self, error: BaseException | str) -> None:
        self._w_hints.set_error(error)

    async def action_toggle_help(self) -> None:
        if isinstance(self.screen, HelpScreen):
            self.screen.dismiss(None)
            return
        await self.push_screen(HelpScreen(self.zoea_theme))

    def action_focus_mysis(self) -> None:
        if self.view != DASHBOARD_VIEW:
            return
        selected = self._w_dashboard.selected
        if selected is None:
            return
        self._focus_on(selected)

    def action_back(self) -> None:
        if self._w_composer.history.is_active:
            self._w_composer.cancel()
            self._show_view(self.view)
            return
        if self.view == FOCUS_VIEW:
            self.focus_id = ""
            self._show_view(DASHBOARD_VIEW)
            return
        self._w_hints.clear_error()

    def _begin(self, mode: InputMode, needs_target: bool) -> None:
        target_id = ""
        if needs_target:
            target = self._target_mysis()
            if target is None:
                self._report_error("No mysis selected")
                return
            target_id = target.id
        self._w_hints.clear_error()
        self._w_composer.begin(mode, target_id)

    def action_message(self) -> None:
        self._begin(InputMode.MESSAGE, needs_target=True)

    def action_broadcast(self) -> None:
        self._begin(InputMode.BROADCAST, needs_target=False)

    def action_new_mysis(self) -> None:
        self._begin(InputMode.NEW_MYSIS, needs_target=False)

    def action_configure_provider(self) -> None:
        self._begin(InputMode.CONFIG_PROVIDER, needs_target=True)

    def action_toggle_verbose(self) -> None:
        verbose = self._w_log.toggle_verbose()
        if self.view == FOCUS_VIEW:
            self._w_hints.set_hint(focus_hint(verbose))

    def action_scroll_bottom(self) -> None:
        if self.view == FOCUS_VIEW:
            self._w_log.scroll_to_latest()

    def _step(self, delta: int) -> None:
        if not self.myses:
            return
        if self.view == FOCUS_VIEW and self.focused_mysis is not None:
            index = (self.myses.index(self.focused_mysis) + delta) % len(self.myses)
            self._w_dashboard.select(index)
            self._focus_on(self.myses[index])
            return
        self._w_dashboard.select(self._w_dashboard.selected_index + delta)

    def action_next_mysis(self) -> None:
        self._step(1)

    def action_previous_mysis(self) -> None:
        self._step(-1)

    def on_conversation_log_scroll_changed(self, event: ConversationLog.ScrollChanged) -> None:
        event.stop()
        LOGGER.debug(
            "app.log.scroll",
            extra={"event": "app.log.scroll", "at_bottom": event.at_bottom},
        )

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        mode = self._w_composer.mode
        target_id = self._w_composer.target_id
        text = self._w_composer.finish()
        self._show_view(self.view)
        if mode is InputMode.NONE or not text.strip():
            return
        self.run_worker(
            self._deliver(OutgoingMessage(mode, target_id, text)),
            group="delivery",
            exit_on_error=False,
        )

    async def _deliver(self, message: OutgoingMessage) -> None:
        try:
            result = self._sink(message)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:  # noqa: BLE001 - any sink failure is shown, never fatal.
            LOGGER.warning(
                "app.delivery.failed",
                extra={"event": "app.delivery.failed", "mode": message.mode.value, "reason": str(exc)},
            )
            self._report_error(exc)
            return
        self._w_hints.clear_error()
        self._refresh_views()
