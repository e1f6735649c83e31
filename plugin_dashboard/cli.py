"""
Plugin dashboard CLI.

Usage:
    plugin-dashboard                           # Interactive dashboard
    plugin-dashboard status                    # Summary counts
    plugin-dashboard list                      # All plugins
    plugin-dashboard list --installed          # Installed plugins only
    plugin-dashboard list --enabled            # Enabled plugins only
    plugin-dashboard list --marketplace ID     # Plugins from one marketplace
    plugin-dashboard info PLUGIN_ID            # Plugin details
    plugin-dashboard enable PLUGIN_ID          # Enable an installed plugin
    plugin-dashboard disable PLUGIN_ID         # Disable a plugin
    plugin-dashboard toggle PLUGIN_ID          # Toggle enabled state
    plugin-dashboard install PLUGIN_ID         # Install via `claude plugin install`
    plugin-dashboard uninstall PLUGIN_ID       # Uninstall (asks first, --yes to skip)
    plugin-dashboard marketplaces              # Known marketplaces
    plugin-dashboard config show               # Show current config
    plugin-dashboard config set KEY VALUE      # Set a config value
    plugin-dashboard config get KEY            # Get a config value

Exit code is 0 on success and 1 on any reported error.
"""

import argparse
import asyncio
import locale
import sys
from typing import Optional

from plugin_dashboard import __version__
from plugin_dashboard.config import (
    CONFIG_KEYS,
    _load_yaml_config,
    get_config_path,
    get_settings,
    save_yaml_config,
)
from plugin_dashboard.core.actions import install_plugin, uninstall_plugin
from plugin_dashboard.core.aggregator import (
    build_marketplace_collection,
    build_plugin_collection,
    find_plugin_by_id,
    get_plugin_statistics,
    load_enabled_plugins,
    load_installed_plugins,
)
from plugin_dashboard.core.enabled import (
    disable_plugin,
    enable_plugin,
    get_enabled_stats,
    toggle_plugin,
)
from plugin_dashboard.core.store import is_file
from plugin_dashboard.lib.errors import DashboardError, NotFound
from plugin_dashboard.lib.logger import setup_logging
from plugin_dashboard.lib.paths import ClaudePaths
from plugin_dashboard.models.plugin import PluginRecord

_GREEN = "\x1b[32m"
_YELLOW = "\x1b[33m"
_GRAY = "\x1b[90m"
_RESET = "\x1b[0m"


# --- Helpers ---


def _get_paths() -> ClaudePaths:
    return ClaudePaths.default()


def _check_claude_installed(paths: ClaudePaths) -> None:
    """Exit with a hint when Claude Code's settings.json is missing."""
    if is_file(paths.settings):
        return
    print("", file=sys.stderr)
    print("❌ Claude Code not found", file=sys.stderr)
    print("", file=sys.stderr)
    print("This tool requires Claude Code to be installed.", file=sys.stderr)
    print(f"Expected settings file at: {paths.settings}", file=sys.stderr)
    print("", file=sys.stderr)
    sys.exit(1)


def _require_plugin(paths: ClaudePaths, plugin_id: str) -> PluginRecord:
    plugin = find_plugin_by_id(paths, plugin_id)
    if plugin is None:
        raise NotFound(f"Plugin not found: {plugin_id}")
    return plugin


def _require_installed(paths: ClaudePaths, plugin_id: str) -> PluginRecord:
    plugin = _require_plugin(paths, plugin_id)
    if not plugin.is_installed:
        raise NotFound(
            f"Plugin not installed: {plugin_id}\n"
            f"Install it first with: plugin-dashboard install {plugin_id}"
        )
    return plugin


def _status_marker(plugin: PluginRecord) -> str:
    if plugin.is_installed and plugin.is_enabled:
        return f"{_GREEN}●{_RESET}"
    if plugin.is_installed:
        return f"{_YELLOW}◐{_RESET}"
    return f"{_GRAY}○{_RESET}"


def _truncate(text: str, width: int = 60) -> str:
    return text if len(text) <= width else text[:width] + "..."


# --- Commands ---


def cmd_status(args: argparse.Namespace) -> None:
    """Show summary statistics."""
    paths = _get_paths()
    stats = get_plugin_statistics(paths)
    total, enabled, disabled = get_enabled_stats(paths)

    print("")
    print("⚡ Claude Code Plugin Dashboard")
    print("")
    print("📊 Summary:")
    print(f"   Total plugins:    {stats.total}")
    print(f"   Installed:        {stats.installed}")
    print(f"   Enabled:          {stats.enabled}")
    print(f"   Marketplaces:     {stats.marketplaces}")
    print("")
    print(f"   settings.json:    {total} entries ({enabled} enabled, {disabled} disabled)")
    print("")


def cmd_list(args: argparse.Namespace) -> None:
    """List plugins, optionally filtered."""
    paths = _get_paths()
    if args.installed:
        plugins = load_installed_plugins(paths)
    elif args.enabled:
        plugins = load_enabled_plugins(paths)
    else:
        plugins = build_plugin_collection(paths)

    if args.marketplace:
        plugins = [p for p in plugins if p.marketplace_id == args.marketplace]

    if not plugins:
        print("No plugins found")
        return

    print("")
    print(f"Found {len(plugins)} plugins:")
    print("")
    for plugin in plugins:
        print(f"{_status_marker(plugin)} {plugin.id}")
        print(f"  {_truncate(plugin.description)}")
    print("")


def cmd_info(args: argparse.Namespace) -> None:
    """Show details for one plugin."""
    paths = _get_paths()
    plugin = _require_plugin(paths, args.plugin_id)

    print("")
    print(f"📦 {plugin.name}")
    print("")
    print(f"ID:          {plugin.id}")
    print(f"Marketplace: {plugin.marketplace_id}")
    print(f"Version:     {plugin.version}")
    print(f"Installs:    {plugin.install_count:,}")
    print(f"Status:      {plugin.status_label}")
    if plugin.category:
        print(f"Category:    {plugin.category}")
    if plugin.author:
        print(f"Author:      {plugin.author.name}")
    if plugin.homepage:
        print(f"Homepage:    {plugin.homepage}")
    if plugin.installed_at:
        print(f"Installed:   {plugin.installed_at}")
    if plugin.is_installed:
        manifest = paths.plugin_manifest(plugin.marketplace_id, plugin.name, plugin.version)
        if is_file(manifest):
            print(f"Manifest:    {manifest}")
    print("")
    print("Description:")
    print(f"  {plugin.description}")
    print("")


def cmd_enable(args: argparse.Namespace) -> None:
    paths = _get_paths()
    plugin = _require_installed(paths, args.plugin_id)
    enable_plugin(paths, plugin.id)
    print(f"✅ {plugin.name} enabled")


def cmd_disable(args: argparse.Namespace) -> None:
    paths = _get_paths()
    plugin = _require_plugin(paths, args.plugin_id)
    disable_plugin(paths, plugin.id)
    print(f"❌ {plugin.name} disabled")


def cmd_toggle(args: argparse.Namespace) -> None:
    paths = _get_paths()
    plugin = _require_installed(paths, args.plugin_id)
    enabled = toggle_plugin(paths, plugin.id)
    print(f"{'✅' if enabled else '❌'} {plugin.name} {'enabled' if enabled else 'disabled'}")


def cmd_install(args: argparse.Namespace) -> None:
    paths = _get_paths()
    plugin = _require_plugin(paths, args.plugin_id)
    if plugin.is_installed:
        print(f"⚠️ {plugin.id} is already installed")
        return
    print(f"Installing {plugin.id}...")
    result = asyncio.run(install_plugin(plugin.id))
    if not result.success:
        raise result.as_error()
    print(result.describe())


def cmd_uninstall(args: argparse.Namespace) -> None:
    paths = _get_paths()
    plugin = _require_installed(paths, args.plugin_id)
    if not args.yes:
        answer = input(f"Uninstall {plugin.id}? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Uninstall cancelled")
            return
    print(f"Uninstalling {plugin.id}...")
    result = asyncio.run(uninstall_plugin(plugin.id))
    if not result.success:
        raise result.as_error()
    print(result.describe())


def cmd_marketplaces(args: argparse.Namespace) -> None:
    """List known marketplaces."""
    marketplaces = build_marketplace_collection(_get_paths())
    if not marketplaces:
        print("No marketplaces configured")
        return

    print("")
    print(f"Marketplaces ({len(marketplaces)}):")
    print("")
    name_width = max(len(m.id) for m in marketplaces)
    for m in marketplaces:
        print(f"  {m.id:<{name_width}}  {m.plugin_count:>4} plugins  {m.source_label}")
    print("")


def cmd_config(args: argparse.Namespace) -> None:
    if args.action == "show":
        _config_show()
    elif args.action == "set":
        _config_set(args.key, args.value)
    elif args.action == "get":
        _config_get(args.key)
    else:
        _config_show()


def _config_show() -> None:
    """Show effective configuration."""
    settings = get_settings()
    config_file = get_config_path()

    print(f"Config file: {config_file}{'' if config_file.exists() else ' (not found)'}\n")
    for key in sorted(CONFIG_KEYS):
        print(f"  {key}: {getattr(settings, key)}")


def _config_set(key: str, value: str) -> None:
    if key not in CONFIG_KEYS:
        print(f"Unknown config key: {key}", file=sys.stderr)
        print(f"Valid keys: {', '.join(sorted(CONFIG_KEYS))}", file=sys.stderr)
        sys.exit(1)

    typed_value: object = value
    if key == "page_size":
        try:
            typed_value = int(value)
        except ValueError:
            print(f"Invalid page_size: {value}", file=sys.stderr)
            sys.exit(1)

    config = _load_yaml_config()
    config[key] = typed_value
    config_file = save_yaml_config(config)
    print(f"Set {key} = {typed_value} in {config_file}")


def _config_get(key: str) -> None:
    if key not in CONFIG_KEYS:
        print(f"Unknown config key: {key}", file=sys.stderr)
        sys.exit(1)
    value = getattr(get_settings(), key)
    print("" if value is None else value)


def cmd_interactive() -> None:
    """Open the full-screen dashboard."""
    if not sys.stdin.isatty():
        print("Interactive mode requires a TTY.")
        print('Use "plugin-dashboard help" for non-interactive commands.')
        sys.exit(1)

    from plugin_dashboard.core.controller import DashboardController
    from plugin_dashboard.tui.app import DashboardApp

    settings = get_settings()
    setup_logging(console=False)
    controller = DashboardController(
        _get_paths(),
        command=settings.plugin_command_argv,
        page_size=settings.page_size,
    )
    DashboardApp(controller).run()


# --- CLI entry point ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plugin-dashboard",
        description="Browse and manage Claude Code plugins",
    )
    parser.add_argument("--version", "-v", action="version", version=f"plugin-dashboard {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Show summary statistics")

    list_parser = subparsers.add_parser("list", help="List plugins")
    filters = list_parser.add_mutually_exclusive_group()
    filters.add_argument("--installed", action="store_true", help="Installed plugins only")
    filters.add_argument("--enabled", action="store_true", help="Enabled plugins only")
    list_parser.add_argument("--marketplace", metavar="ID", help="Plugins from one marketplace")

    for name, help_text in (
        ("info", "Show plugin details"),
        ("enable", "Enable an installed plugin"),
        ("disable", "Disable a plugin"),
        ("toggle", "Toggle plugin enabled state"),
        ("install", "Install a plugin"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("plugin_id", help="Plugin id, e.g. context7@claude-plugins-official")

    uninstall_parser = subparsers.add_parser("uninstall", help="Uninstall a plugin")
    uninstall_parser.add_argument("plugin_id", help="Plugin id")
    uninstall_parser.add_argument("--yes", "-y", action="store_true", help="Don't ask for confirmation")

    subparsers.add_parser("marketplaces", help="List known marketplaces")

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_sub = config_parser.add_subparsers(dest="action")
    config_sub.add_parser("show", help="Show current config")
    config_set_parser = config_sub.add_parser("set", help="Set a config value")
    config_set_parser.add_argument("key", help="Config key")
    config_set_parser.add_argument("value", help="Config value")
    config_get_parser = config_sub.add_parser("get", help="Get a config value")
    config_get_parser.add_argument("key", help="Config key")

    subparsers.add_parser("help", help="Show this help message")
    return parser


COMMANDS = {
    "status": cmd_status,
    "list": cmd_list,
    "info": cmd_info,
    "enable": cmd_enable,
    "disable": cmd_disable,
    "toggle": cmd_toggle,
    "install": cmd_install,
    "uninstall": cmd_uninstall,
    "marketplaces": cmd_marketplaces,
}


def main(argv: Optional[list[str]] = None) -> None:
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        # Unsupported locale in the environment; keep the C collation
        pass

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "help":
        parser.print_help()
        return
    if args.command == "config":
        cmd_config(args)
        return

    if args.command is None:
        _check_claude_installed(_get_paths())
        cmd_interactive()
        return

    setup_logging()
    _check_claude_installed(_get_paths())
    try:
        COMMANDS[args.command](args)
    except DashboardError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
