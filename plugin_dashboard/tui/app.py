"""Textual app hosting the interactive dashboard."""

from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from plugin_dashboard.core.controller import DashboardController
from plugin_dashboard.core.state import Effect, KeyPressed, Quit, RunAction
from plugin_dashboard.lib.logger import get_log_buffer
from plugin_dashboard.tui.render import render_dashboard

# Keys textual would otherwise consume (focus cycling, its own quit/copy)
_PRIORITY_KEYS = ("tab", "shift+tab", "ctrl+c", "ctrl+q")


class DashboardApp(App[None]):
    """Full-screen plugin dashboard.

    Every key goes through the controller. Plugin commands run in a worker;
    the state machine discards input until the worker reports back, and a
    quit pressed meanwhile is only carried out after that.
    """

    CSS = """
    Screen {
        padding: 1 2;
    }
    """

    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding(key, f"dashboard_key('{key}')", show=False, priority=True)
        for key in _PRIORITY_KEYS
    ]

    def __init__(self, controller: DashboardController):
        super().__init__()
        self.controller = controller

    def compose(self) -> ComposeResult:
        yield Static(id="dashboard")

    def on_mount(self) -> None:
        self._apply(self.controller.load())
        self._refresh()

    def on_key(self, event: events.Key) -> None:
        if event.key in _PRIORITY_KEYS:
            return
        event.stop()
        event.prevent_default()
        self._dispatch(KeyPressed(event.key, event.character))

    def action_dashboard_key(self, key: str) -> None:
        self._dispatch(KeyPressed(key))

    def _dispatch(self, event: KeyPressed) -> None:
        self._apply(self.controller.handle(event))
        self._refresh()

    def _apply(self, effect: Optional[Effect]) -> None:
        if isinstance(effect, RunAction):
            self.run_worker(self._perform(effect), group="plugin-action")
        elif isinstance(effect, Quit):
            self.exit()

    async def _perform(self, effect: RunAction) -> None:
        self._apply(await self.controller.perform(effect))
        self._refresh()

    def _refresh(self) -> None:
        self.query_one("#dashboard", Static).update(
            render_dashboard(self.controller.state, get_log_buffer().latest_warning())
        )
