"""
Plugin enable/disable state, stored in ~/.claude/settings.json.

settings.json holds many unrelated keys; only ``enabledPlugins[<id>]`` is
ever changed here and everything else is written back as read.
"""

import logging
from typing import Any

from plugin_dashboard.core.store import read_document, write_document
from plugin_dashboard.lib.errors import MalformedDocument, NotFound
from plugin_dashboard.lib.paths import ClaudePaths

logger = logging.getLogger(__name__)

ENABLED_PLUGINS_KEY = "enabledPlugins"


def read_settings(paths: ClaudePaths) -> dict[str, Any]:
    """Read settings.json.

    Raises:
        NotFound: If settings.json does not exist.
        MalformedDocument: If it is not a JSON object.
    """
    data = read_document(paths.settings)
    if data is None:
        raise NotFound(f"settings.json not found at {paths.settings}. Is Claude Code installed?")
    if not isinstance(data, dict):
        raise MalformedDocument(paths.settings, "expected a JSON object")
    return data


def get_enabled_plugins(paths: ClaudePaths) -> dict[str, bool]:
    """Map of plugin id to enabled state. Non-boolean values count as disabled."""
    enabled = read_settings(paths).get(ENABLED_PLUGINS_KEY) or {}
    if not isinstance(enabled, dict):
        raise MalformedDocument(paths.settings, f"{ENABLED_PLUGINS_KEY} is not an object")
    return {plugin_id: value is True for plugin_id, value in enabled.items()}


def is_plugin_enabled(paths: ClaudePaths, plugin_id: str) -> bool:
    return get_enabled_plugins(paths).get(plugin_id, False)


def set_plugin_enabled(paths: ClaudePaths, plugin_id: str, enabled: bool) -> None:
    """Persist the enabled state of one plugin.

    Raises:
        NotFound, MalformedDocument: If settings.json cannot be read.
        WriteFailed: If settings.json cannot be written; it is left unchanged.
    """
    settings = read_settings(paths)
    plugins = settings.get(ENABLED_PLUGINS_KEY)
    if not isinstance(plugins, dict):
        plugins = {}
        settings[ENABLED_PLUGINS_KEY] = plugins
    plugins[plugin_id] = enabled
    write_document(paths.settings, settings)
    logger.info(f"{'Enabled' if enabled else 'Disabled'} plugin {plugin_id}")


def enable_plugin(paths: ClaudePaths, plugin_id: str) -> None:
    set_plugin_enabled(paths, plugin_id, True)


def disable_plugin(paths: ClaudePaths, plugin_id: str) -> None:
    set_plugin_enabled(paths, plugin_id, False)


def toggle_plugin(paths: ClaudePaths, plugin_id: str) -> bool:
    """Flip the enabled state of a plugin and return the new state."""
    new_state = not is_plugin_enabled(paths, plugin_id)
    set_plugin_enabled(paths, plugin_id, new_state)
    return new_state


def get_enabled_stats(paths: ClaudePaths) -> tuple[int, int, int]:
    """(total, enabled, disabled) counts over the enabledPlugins map."""
    enabled = get_enabled_plugins(paths)
    enabled_count = sum(1 for value in enabled.values() if value)
    return len(enabled), enabled_count, len(enabled) - enabled_count
