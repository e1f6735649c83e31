"""
Rich renderables for the dashboard screen.

Pure functions of DashboardState; the textual app redraws after every event.
"""

from typing import Optional, Sequence

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from plugin_dashboard.core.query import SortDirection, SortKey
from plugin_dashboard.core.state import DashboardState, View
from plugin_dashboard.models.plugin import ErrorRecord, MarketplaceRecord, PluginRecord

VISIBLE_ROWS = 12

TAB_LABELS = {
    View.DISCOVER: "Discover",
    View.INSTALLED: "Installed",
    View.MARKETPLACES: "Marketplaces",
    View.ERRORS: "Errors",
}

SORT_LABELS = {
    SortKey.INSTALL_COUNT: "installs",
    SortKey.NAME: "name",
    SortKey.INSTALLED_AT: "date",
}


def status_icon(plugin: PluginRecord) -> Text:
    """● installed & enabled, ◐ installed & disabled, ○ not installed."""
    if plugin.is_installed and plugin.is_enabled:
        return Text("●", style="green")
    if plugin.is_installed:
        return Text("◐", style="yellow")
    return Text("○", style="bright_black")


def _window(count: int, selected: int) -> range:
    """Rows to show so the selection stays visible."""
    start = max(0, min(selected - VISIBLE_ROWS // 2, count - VISIBLE_ROWS))
    return range(start, min(count, start + VISIBLE_ROWS))


def _tab_bar(state: DashboardState) -> Text:
    text = Text()
    for index, (view, label) in enumerate(TAB_LABELS.items(), start=1):
        if view is state.active_view:
            text.append(f" {index} {label} ", style="bold black on magenta")
        else:
            text.append(f" {index} {label} ", style="dim")
        text.append(" ")
    return text


def _plugin_table(plugins: Sequence[PluginRecord], selected: int) -> Table:
    table = Table(box=None, expand=True, show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("", width=1)
    table.add_column("Plugin", ratio=3, no_wrap=True)
    table.add_column("Marketplace", ratio=2, no_wrap=True)
    table.add_column("Installs", justify="right")
    for index in _window(len(plugins), selected):
        plugin = plugins[index]
        is_selected = index == selected
        table.add_row(
            Text(">", style="cyan") if is_selected else "",
            status_icon(plugin),
            Text(plugin.name, style="bold cyan" if is_selected else ""),
            Text(plugin.marketplace_id, style="dim"),
            f"{plugin.install_count:,}",
        )
    return table


def _plugin_detail(plugin: Optional[PluginRecord]) -> RenderableType:
    if plugin is None:
        return Panel(Text("No plugin selected", style="dim"), border_style="bright_black")

    body = Text()
    body.append(f"{plugin.description or '(no description)'}\n\n")
    rows = [
        ("ID", plugin.id),
        ("Version", plugin.version),
        ("Installs", f"{plugin.install_count:,}"),
        ("Status", plugin.status_label),
        ("Category", plugin.category),
        ("Author", plugin.author.name if plugin.author else None),
        ("Homepage", plugin.homepage),
        ("Installed", plugin.installed_at),
        ("Updated", plugin.last_updated_at),
        ("Tags", ", ".join(plugin.tags) if plugin.tags else None),
    ]
    for label, value in rows:
        if value:
            body.append(f"{label:<10}", style="bold")
            body.append(f"{value}\n")
    return Panel(body, title=plugin.name, border_style="cyan")


def _discover(state: DashboardState) -> RenderableType:
    plugins = state.discover_plugins()
    arrow = "↑" if state.sort_direction is SortDirection.ASCENDING else "↓"
    header = Text()
    position = f"{state.selected_index + 1}/{len(plugins)}" if plugins else "0"
    header.append(f"Discover plugins ({position})", style="bold")
    header.append(f"   Sort: {SORT_LABELS[state.sort_key]} {arrow}", style="dim")

    search = Text("/ ", style="bold")
    if state.search_query or state.search_active:
        search.append(state.search_query)
        if state.search_active:
            search.append("▌", style="blink")
    else:
        search.append("Type / to search...", style="dim")

    if not plugins:
        listing: RenderableType = Text("No plugins match current filters.", style="dim")
    else:
        listing = _plugin_table(plugins, state.selected_index)

    return Group(header, search, Text(), listing, _plugin_detail(state.selected_plugin()))


def _installed(state: DashboardState) -> RenderableType:
    plugins = state.installed_plugins()
    position = f"{state.selected_index + 1}/{len(plugins)}" if plugins else "0"
    header = Text(f"Installed plugins ({position})", style="bold")
    if not plugins:
        return Group(header, Text("No installed plugins.", style="dim"))
    return Group(
        header,
        _plugin_table(plugins, state.selected_index),
        _plugin_detail(state.selected_plugin()),
    )


def _marketplaces(marketplaces: Sequence[MarketplaceRecord], selected: int) -> RenderableType:
    header = Text(f"Marketplaces ({len(marketplaces)})", style="bold")
    if not marketplaces:
        return Group(header, Text("No marketplaces configured.", style="dim"))
    table = Table(box=None, expand=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Marketplace", ratio=2, no_wrap=True)
    table.add_column("Source", ratio=3, no_wrap=True)
    table.add_column("Plugins", justify="right")
    table.add_column("Updated", no_wrap=True)
    for index in _window(len(marketplaces), selected):
        marketplace = marketplaces[index]
        is_selected = index == selected
        table.add_row(
            Text(">", style="cyan") if is_selected else "",
            Text(marketplace.name, style="bold cyan" if is_selected else ""),
            Text(marketplace.source_label, style="dim"),
            str(marketplace.plugin_count),
            marketplace.last_updated or "",
        )
    return Group(header, table)


def _errors(errors: Sequence[ErrorRecord], selected: int) -> RenderableType:
    if not errors:
        return Panel(
            Text("✓ No errors to display\nAll plugins are working correctly", style="green"),
            title="Errors (0)",
            border_style="green",
        )
    table = Table(box=None, expand=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Plugin", no_wrap=True)
    table.add_column("Type")
    table.add_column("Message", ratio=3)
    for index in _window(len(errors), selected):
        error = errors[index]
        table.add_row(
            Text(">", style="cyan") if index == selected else "",
            Text(error.plugin_id, style="bold red"),
            error.kind,
            error.message,
        )
    selected_error = errors[selected] if selected < len(errors) else None
    detail = Text()
    if selected_error is not None:
        detail.append(f"{selected_error.timestamp}\n", style="dim")
        detail.append(selected_error.details or selected_error.message)
    return Group(
        Text(f"Errors ({selected + 1}/{len(errors)})", style="bold red"),
        table,
        Panel(detail, border_style="red"),
    )


def _key_hints(state: DashboardState) -> Text:
    hints = [("←/→", "tabs"), ("↑/↓", "navigate"), ("Space", "toggle"), ("/", "search")]
    if state.active_view in (View.DISCOVER, View.INSTALLED):
        hints += [("i", "install"), ("u", "uninstall")]
    if state.active_view is View.DISCOVER:
        hints += [("s", "sort"), ("S", "order")]
    hints += [("r", "reload"), ("q", "quit")]
    text = Text()
    for key, action in hints:
        text.append(key, style="bold")
        text.append(f" {action}  ", style="dim")
    return text


def render_dashboard(state: DashboardState, footer_warning: Optional[str] = None) -> RenderableType:
    """Full screen for the current state."""
    title = Text("⚡ Claude Code Plugin Dashboard", style="bold magenta")

    if state.loading:
        return Group(title, Text("Loading plugins..."))
    if state.load_error is not None:
        return Group(
            title,
            Text(f"Error: {state.load_error}", style="red"),
            Text("Press q to exit", style="dim"),
        )

    if state.active_view is View.DISCOVER:
        body = _discover(state)
    elif state.active_view is View.INSTALLED:
        body = _installed(state)
    elif state.active_view is View.MARKETPLACES:
        body = _marketplaces(state.marketplaces, state.selected_index)
    else:
        body = _errors(state.errors, state.selected_index)

    parts: list[RenderableType] = [title, _tab_bar(state), Text(), body]
    if state.confirm_uninstall is not None:
        parts.append(
            Panel(
                Text(f"Uninstall {state.confirm_uninstall}?  (y/n)", style="bold yellow"),
                border_style="yellow",
            )
        )
    if state.status_message:
        parts.append(Text(state.status_message, style="yellow"))
    if footer_warning:
        parts.append(Text(f"⚠ {footer_warning}", style="dim yellow"))
    parts.append(Panel(_key_hints(state), border_style="bright_black"))
    return Group(*parts)
