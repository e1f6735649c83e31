"""
File locations inside the Claude Code configuration directory.

Layout (relative to ``~/.claude`` or ``$CLAUDE_CONFIG_DIR``):

    settings.json                                   enabledPlugins map
    plugins/installed_plugins.json                  installed registry
    plugins/known_marketplaces.json                 marketplace registry
    plugins/install-counts-cache.json               global install counts
    plugins/marketplaces/{id}/.claude-plugin/marketplace.json
    plugins/cache/{marketplace}/{plugin}/{version}/.claude-plugin/plugin.json

Nothing here touches the filesystem.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ClaudePaths:
    """Canonical document locations under a configuration root."""

    root: Path

    @classmethod
    def default(cls, root: Optional[Path] = None) -> "ClaudePaths":
        """Build paths for ``root``, or for the configured Claude directory."""
        if root is None:
            from plugin_dashboard.config import get_settings

            root = get_settings().claude_config_dir
        return cls(Path(root).expanduser())

    @property
    def settings(self) -> Path:
        return self.root / "settings.json"

    @property
    def plugins_dir(self) -> Path:
        return self.root / "plugins"

    @property
    def installed_plugins(self) -> Path:
        return self.plugins_dir / "installed_plugins.json"

    @property
    def known_marketplaces(self) -> Path:
        return self.plugins_dir / "known_marketplaces.json"

    @property
    def install_counts_cache(self) -> Path:
        return self.plugins_dir / "install-counts-cache.json"

    @property
    def marketplaces_dir(self) -> Path:
        return self.plugins_dir / "marketplaces"

    @property
    def cache_dir(self) -> Path:
        return self.plugins_dir / "cache"

    def marketplace_catalog(self, marketplace_id: str) -> Path:
        """Path to a marketplace's catalog (marketplace.json)."""
        return self.marketplaces_dir / marketplace_id / ".claude-plugin" / "marketplace.json"

    def plugin_manifest(self, marketplace_id: str, plugin_name: str, version: str) -> Path:
        """Path to the cached plugin.json for one installed version."""
        return (
            self.cache_dir
            / marketplace_id
            / plugin_name
            / version
            / ".claude-plugin"
            / "plugin.json"
        )
