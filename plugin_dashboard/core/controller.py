"""
Dashboard controller.

Owns the current DashboardState, feeds events through ``reduce`` and carries
out the effects that need I/O. Settings writes and reloads happen inline;
plugin commands are handed back to the host (the terminal app) because they
must be awaited off the input path.
"""

import logging
from typing import Callable, Optional, Sequence

from plugin_dashboard.core.actions import run_plugin_action
from plugin_dashboard.core.aggregator import Snapshot, load_snapshot
from plugin_dashboard.core.enabled import toggle_plugin
from plugin_dashboard.core.state import (
    DashboardState,
    DataLoaded,
    Effect,
    Event,
    LoadFailed,
    OperationFinished,
    Reload,
    RunAction,
    ToggleEnabled,
    ToggleFailed,
    ToggleSucceeded,
    reduce,
)
from plugin_dashboard.lib.errors import DashboardError
from plugin_dashboard.lib.logger import get_log_buffer
from plugin_dashboard.lib.paths import ClaudePaths
from plugin_dashboard.models.plugin import ErrorRecord

logger = logging.getLogger(__name__)

ErrorSource = Callable[[], Sequence[ErrorRecord]]


class DashboardController:
    """State holder shared by every input handler of one session."""

    def __init__(
        self,
        paths: ClaudePaths,
        command: Optional[Sequence[str]] = None,
        page_size: int = 10,
        error_source: Optional[ErrorSource] = None,
    ):
        self.paths = paths
        self.command = command
        self.state = DashboardState(page_size=page_size)
        self._error_source = error_source

    def load(self) -> Optional[Effect]:
        """Initial read. A failure here puts the session on its error screen."""
        return self.handle(self._read_snapshot())

    def handle(self, event: Event) -> Optional[Effect]:
        """Apply an event; returns the effect the host must carry out, if any.

        Only RunAction and Quit ever reach the host.
        """
        transition = reduce(self.state, event)
        self.state = transition.state
        effect = transition.effect

        if isinstance(effect, ToggleEnabled):
            return self.handle(self._toggle(effect))
        if isinstance(effect, Reload):
            return self.handle(self._read_snapshot())
        return effect

    async def perform(self, effect: RunAction) -> Optional[Effect]:
        """Run a plugin command to completion, then reload and report."""
        result = await run_plugin_action(effect.verb, effect.plugin_id, self.command)

        snapshot: Optional[Snapshot] = None
        reload_error: Optional[str] = None
        if result.success:
            try:
                snapshot = self._fresh_snapshot()
            except DashboardError as e:
                logger.warning(f"Reload after {effect.verb} failed: {e}")
                reload_error = e.message

        return self.handle(OperationFinished(result, snapshot, reload_error))

    def _fresh_snapshot(self) -> Snapshot:
        # Warnings shown in the footer describe the latest read only
        get_log_buffer().clear()
        return load_snapshot(self.paths)

    def _read_snapshot(self) -> Event:
        try:
            snapshot = self._fresh_snapshot()
        except DashboardError as e:
            logger.error(f"Failed to load plugin data: {e}")
            return LoadFailed(e.message)
        errors = self._error_source() if self._error_source else None
        return DataLoaded.from_snapshot(snapshot, errors)

    def _toggle(self, effect: ToggleEnabled) -> Event:
        try:
            enabled = toggle_plugin(self.paths, effect.plugin_id)
        except DashboardError as e:
            logger.warning(f"Toggle of {effect.plugin_id} failed: {e}")
            return ToggleFailed(effect.plugin_id, e.message)
        return ToggleSucceeded(effect.plugin_id, effect.name, enabled)
