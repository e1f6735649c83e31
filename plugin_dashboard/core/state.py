"""
Interaction state machine for the dashboard.

``reduce(state, event)`` is a pure function returning the next state and, at
most, one effect for the controller to perform (write settings, run the
plugin command, reload from disk, quit). Nothing here does I/O.

Modes, in priority order:
- operation in flight: every key is discarded. A quit key is remembered and
  honoured when the operation finishes, so the plugin subprocess is always
  awaited and never orphaned.
- loading / load error: only quit is accepted.
- confirming uninstall: only y/n/escape and quit are accepted.
- search entry (Discover): keys edit the query.
- navigating: everything else.

Toggling the enabled flag is write-then-patch: the key only requests the
write; the snapshot changes on ToggleSucceeded and stays as it was on
ToggleFailed.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Union

from plugin_dashboard.core.actions import ActionVerb, PluginActionResult
from plugin_dashboard.core.aggregator import Snapshot
from plugin_dashboard.core.query import (
    SortDirection,
    SortKey,
    next_sort_key,
    search_plugins,
    sort_plugins,
)
from plugin_dashboard.models.plugin import ErrorRecord, MarketplaceRecord, PluginRecord


class View(str, Enum):
    DISCOVER = "discover"
    INSTALLED = "installed"
    MARKETPLACES = "marketplaces"
    ERRORS = "errors"


VIEW_ORDER = (View.DISCOVER, View.INSTALLED, View.MARKETPLACES, View.ERRORS)
PLUGIN_VIEWS = (View.DISCOVER, View.INSTALLED)

QUIT_KEYS = ("ctrl+c", "ctrl+q")


# --- Operation tag ---


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Installing:
    plugin_id: str
    verb: ActionVerb = "install"


@dataclass(frozen=True)
class Uninstalling:
    plugin_id: str
    verb: ActionVerb = "uninstall"


Operation = Union[Idle, Installing, Uninstalling]
IDLE = Idle()


# --- State ---


@dataclass(frozen=True)
class DashboardState:
    """Everything the view renders, in one immutable value."""

    active_view: View = View.DISCOVER
    plugins: tuple[PluginRecord, ...] = ()
    marketplaces: tuple[MarketplaceRecord, ...] = ()
    errors: tuple[ErrorRecord, ...] = ()
    selected_index: int = 0
    search_query: str = ""
    search_active: bool = False
    sort_key: SortKey = SortKey.INSTALL_COUNT
    sort_direction: SortDirection = SortDirection.DESCENDING
    operation: Operation = field(default=IDLE)
    confirm_uninstall: Optional[str] = None
    status_message: Optional[str] = None
    loading: bool = True
    load_error: Optional[str] = None
    quit_requested: bool = False
    page_size: int = 10

    @property
    def busy(self) -> bool:
        return not isinstance(self.operation, Idle)

    def discover_plugins(self) -> list[PluginRecord]:
        """Discover list: search filter, then the selected sort."""
        return sort_plugins(
            search_plugins(self.search_query, self.plugins),
            self.sort_key,
            self.sort_direction,
        )

    def installed_plugins(self) -> list[PluginRecord]:
        return [p for p in self.plugins if p.is_installed]

    def items(self) -> Sequence[object]:
        """Items of the active view, in display order."""
        if self.active_view is View.DISCOVER:
            return self.discover_plugins()
        if self.active_view is View.INSTALLED:
            return self.installed_plugins()
        if self.active_view is View.MARKETPLACES:
            return self.marketplaces
        return self.errors

    def selected_item(self) -> Optional[object]:
        items = self.items()
        if 0 <= self.selected_index < len(items):
            return items[self.selected_index]
        return None

    def selected_plugin(self) -> Optional[PluginRecord]:
        if self.active_view not in PLUGIN_VIEWS:
            return None
        item = self.selected_item()
        return item if isinstance(item, PluginRecord) else None


# --- Events ---


@dataclass(frozen=True)
class KeyPressed:
    key: str
    character: Optional[str] = None

    @property
    def printable(self) -> Optional[str]:
        if self.character and len(self.character) == 1 and self.character.isprintable():
            return self.character
        return None


@dataclass(frozen=True)
class DataLoaded:
    plugins: tuple[PluginRecord, ...]
    marketplaces: tuple[MarketplaceRecord, ...]
    errors: Optional[tuple[ErrorRecord, ...]] = None  # None keeps the current errors

    @classmethod
    def from_snapshot(
        cls, snapshot: Snapshot, errors: Optional[Sequence[ErrorRecord]] = None
    ) -> "DataLoaded":
        return cls(
            plugins=snapshot.plugins,
            marketplaces=snapshot.marketplaces,
            errors=tuple(errors) if errors is not None else None,
        )


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class ToggleSucceeded:
    plugin_id: str
    name: str
    enabled: bool


@dataclass(frozen=True)
class ToggleFailed:
    plugin_id: str
    message: str


@dataclass(frozen=True)
class OperationFinished:
    result: PluginActionResult
    snapshot: Optional[Snapshot] = None
    reload_error: Optional[str] = None


Event = Union[
    KeyPressed, DataLoaded, LoadFailed, ToggleSucceeded, ToggleFailed, OperationFinished
]


# --- Effects ---


@dataclass(frozen=True)
class ToggleEnabled:
    plugin_id: str
    name: str


@dataclass(frozen=True)
class RunAction:
    verb: ActionVerb
    plugin_id: str


@dataclass(frozen=True)
class Reload:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Effect = Union[ToggleEnabled, RunAction, Reload, Quit]


class Transition(NamedTuple):
    state: DashboardState
    effect: Optional[Effect] = None


# --- Helpers ---


def _clamp(state: DashboardState) -> DashboardState:
    last = max(0, len(state.items()) - 1)
    index = min(max(state.selected_index, 0), last)
    if index == state.selected_index:
        return state
    return replace(state, selected_index=index)


def _move(state: DashboardState, delta: int) -> Transition:
    count = len(state.items())
    if count == 0:
        return Transition(state)
    index = min(max(state.selected_index + delta, 0), count - 1)
    return Transition(replace(state, selected_index=index, status_message=None))


def _switch_view(state: DashboardState, view: View) -> Transition:
    return Transition(
        replace(
            state,
            active_view=view,
            selected_index=0,
            search_query="",
            search_active=False,
            status_message=None,
        )
    )


def _step_view(state: DashboardState, step: int) -> Transition:
    index = (VIEW_ORDER.index(state.active_view) + step) % len(VIEW_ORDER)
    return _switch_view(state, VIEW_ORDER[index])


def _is_quit(event: KeyPressed) -> bool:
    return event.key in QUIT_KEYS or event.printable == "q"


# --- Key handling per mode ---


def _key_while_busy(state: DashboardState, event: KeyPressed) -> Transition:
    if not _is_quit(event) or state.quit_requested:
        return Transition(state)
    op = state.operation
    return Transition(
        replace(
            state,
            quit_requested=True,
            status_message=f"Waiting for {op.verb} of {op.plugin_id} to finish before exiting...",
        )
    )


def _key_while_confirming(state: DashboardState, event: KeyPressed) -> Transition:
    char = event.printable
    plugin_id = state.confirm_uninstall
    if char in ("y", "Y"):
        return Transition(
            replace(
                state,
                confirm_uninstall=None,
                operation=Uninstalling(plugin_id),
                status_message=f"Uninstalling {plugin_id}...",
            ),
            RunAction("uninstall", plugin_id),
        )
    if char in ("n", "N") or event.key == "escape":
        return Transition(
            replace(state, confirm_uninstall=None, status_message="Uninstall cancelled")
        )
    if _is_quit(event):
        return Transition(state, Quit())
    return Transition(state)


def _key_while_searching(state: DashboardState, event: KeyPressed) -> Transition:
    if event.key in QUIT_KEYS:
        return Transition(state, Quit())
    if event.key in ("escape", "enter"):
        return Transition(replace(state, search_active=False))
    if event.key == "backspace":
        return Transition(
            replace(state, search_query=state.search_query[:-1], selected_index=0)
        )
    char = event.printable
    if char is not None:
        return Transition(
            replace(state, search_query=state.search_query + char, selected_index=0)
        )
    return Transition(state)


def _toggle(state: DashboardState) -> Transition:
    plugin = state.selected_plugin()
    if plugin is None:
        return Transition(state)
    if not plugin.is_installed:
        return Transition(
            replace(state, status_message=f"⚠️ {plugin.name} is not installed")
        )
    return Transition(state, ToggleEnabled(plugin.id, plugin.name))


def _install(state: DashboardState) -> Transition:
    plugin = state.selected_plugin()
    if plugin is None:
        return Transition(state)
    if plugin.is_installed:
        return Transition(replace(state, status_message="⚠️ Plugin is already installed"))
    return Transition(
        replace(
            state,
            operation=Installing(plugin.id),
            status_message=f"Installing {plugin.id}...",
        ),
        RunAction("install", plugin.id),
    )


def _uninstall(state: DashboardState) -> Transition:
    plugin = state.selected_plugin()
    if plugin is None:
        return Transition(state)
    if not plugin.is_installed:
        return Transition(replace(state, status_message="⚠️ Plugin is not installed"))
    return Transition(replace(state, confirm_uninstall=plugin.id, status_message=None))


def _key_while_navigating(state: DashboardState, event: KeyPressed) -> Transition:
    key = event.key
    char = event.printable
    view = state.active_view

    if _is_quit(event):
        return Transition(state, Quit())

    if key in ("up", "ctrl+p"):
        return _move(state, -1)
    if key in ("down", "ctrl+n"):
        return _move(state, 1)
    if key == "pageup":
        return _move(state, -state.page_size)
    if key == "pagedown":
        return _move(state, state.page_size)
    if key == "home":
        return _move(state, -len(state.items()))
    if key == "end":
        return _move(state, len(state.items()))

    if key in ("left", "shift+tab"):
        return _step_view(state, -1)
    if key in ("right", "tab"):
        return _step_view(state, 1)
    if char is not None and char in "1234":
        return _switch_view(state, VIEW_ORDER[int(char) - 1])

    if char == "/" and view is View.DISCOVER:
        return Transition(replace(state, search_active=True, status_message=None))

    if (char == " " or key == "enter") and view in PLUGIN_VIEWS:
        return _toggle(state)

    if char == "s" and view is View.DISCOVER:
        return Transition(
            replace(state, sort_key=next_sort_key(state.sort_key), selected_index=0)
        )
    if char == "S" and view is View.DISCOVER:
        return Transition(
            replace(state, sort_direction=state.sort_direction.flipped(), selected_index=0)
        )

    if key == "escape" and state.search_query:
        return Transition(replace(state, search_query="", selected_index=0))

    if char == "i" and view in PLUGIN_VIEWS:
        return _install(state)
    if char == "u" and view in PLUGIN_VIEWS:
        return _uninstall(state)
    if char == "r":
        return Transition(state, Reload())

    return Transition(state)


def _on_key(state: DashboardState, event: KeyPressed) -> Transition:
    if state.busy:
        return _key_while_busy(state, event)
    if state.loading or state.load_error is not None:
        return Transition(state, Quit() if _is_quit(event) else None)
    if state.confirm_uninstall is not None:
        return _key_while_confirming(state, event)
    if state.search_active:
        return _key_while_searching(state, event)
    return _key_while_navigating(state, event)


# --- Non-key events ---


def _on_operation_finished(state: DashboardState, event: OperationFinished) -> Transition:
    op = state.operation
    result = event.result
    if isinstance(op, Idle) or op.plugin_id != result.plugin_id or op.verb != result.verb:
        return Transition(state)

    message = result.describe()
    if event.reload_error:
        message = f"{message} (reload failed: {event.reload_error})"

    new_state = replace(state, operation=IDLE, status_message=message)
    if event.snapshot is not None:
        new_state = replace(
            new_state,
            plugins=event.snapshot.plugins,
            marketplaces=event.snapshot.marketplaces,
        )
    new_state = _clamp(new_state)
    return Transition(new_state, Quit() if state.quit_requested else None)


def reduce(state: DashboardState, event: Event) -> Transition:
    """Apply one event to the state."""
    if isinstance(event, KeyPressed):
        return _on_key(state, event)

    if isinstance(event, DataLoaded):
        new_state = replace(
            state,
            plugins=event.plugins,
            marketplaces=event.marketplaces,
            errors=event.errors if event.errors is not None else state.errors,
            loading=False,
            load_error=None,
        )
        return Transition(_clamp(new_state))

    if isinstance(event, LoadFailed):
        if state.loading:
            return Transition(replace(state, loading=False, load_error=event.message))
        return Transition(replace(state, status_message=f"Error: {event.message}"))

    if isinstance(event, ToggleSucceeded):
        plugins = tuple(
            p.with_enabled(event.enabled) if p.id == event.plugin_id else p
            for p in state.plugins
        )
        message = (
            f"✅ {event.name} enabled" if event.enabled else f"❌ {event.name} disabled"
        )
        return Transition(replace(state, plugins=plugins, status_message=message))

    if isinstance(event, ToggleFailed):
        return Transition(replace(state, status_message=f"Error: {event.message}"))

    if isinstance(event, OperationFinished):
        return _on_operation_finished(state, event)

    return Transition(state)
