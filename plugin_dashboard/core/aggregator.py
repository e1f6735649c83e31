"""
Plugin and marketplace aggregation.

Joins four independently maintained documents into one view per plugin:
1. plugins/marketplaces/*/.claude-plugin/marketplace.json (what exists)
2. plugins/installed_plugins.json (what is installed)
3. settings.json enabledPlugins (what is enabled)
4. plugins/install-counts-cache.json (popularity)

A broken registry, count cache or settings file fails the whole pass. A
broken or missing catalog only drops that marketplace's plugins.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from plugin_dashboard.core.enabled import get_enabled_plugins
from plugin_dashboard.core.store import (
    is_directory,
    list_subdirectories,
    read_document,
    read_model,
)
from plugin_dashboard.lib.errors import MalformedDocument
from plugin_dashboard.lib.paths import ClaudePaths
from plugin_dashboard.models.documents import (
    CatalogPluginEntry,
    InstallCountsFile,
    InstalledPluginEntry,
    InstalledPluginsFile,
    KnownMarketplaceEntry,
    MarketplaceCatalog,
)
from plugin_dashboard.models.plugin import (
    Author,
    MarketplaceRecord,
    PluginRecord,
    PluginStatistics,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Plugins and marketplaces read in one pass."""

    plugins: tuple[PluginRecord, ...]
    marketplaces: tuple[MarketplaceRecord, ...]


def plugin_id_for(name: str, marketplace_id: str) -> str:
    return f"{name}@{marketplace_id}"


def _load_installed(paths: ClaudePaths) -> dict[str, InstalledPluginEntry]:
    """Installed registry, one entry per plugin id.

    When a plugin lists several installations the first one in document
    order wins, matching what Claude Code itself reads.
    """
    registry = read_model(paths.installed_plugins, InstalledPluginsFile)
    if registry is None:
        return {}
    return {
        plugin_id: entries[0]
        for plugin_id, entries in registry.plugins.items()
        if entries
    }


def _load_counts(paths: ClaudePaths) -> dict[str, int]:
    cache = read_model(paths.install_counts_cache, InstallCountsFile)
    if cache is None:
        return {}
    return {entry.plugin: max(0, entry.unique_installs) for entry in cache.counts}


def _load_catalog(paths: ClaudePaths, marketplace_id: str) -> Optional[MarketplaceCatalog]:
    """Read one marketplace catalog, tolerating a missing or broken file."""
    try:
        return read_model(paths.marketplace_catalog(marketplace_id), MarketplaceCatalog)
    except MalformedDocument as e:
        logger.warning(f"Skipping marketplace '{marketplace_id}': {e}")
        return None


def _build_record(
    entry: CatalogPluginEntry,
    marketplace_id: str,
    installed: dict[str, InstalledPluginEntry],
    enabled: dict[str, bool],
    counts: dict[str, int],
) -> PluginRecord:
    plugin_id = plugin_id_for(entry.name, marketplace_id)
    install = installed.get(plugin_id)
    is_installed = install is not None

    author = None
    if entry.author is not None:
        author = Author(name=entry.author.name, email=entry.author.email)

    return PluginRecord(
        id=plugin_id,
        name=entry.name,
        marketplace_id=marketplace_id,
        description=entry.description or "",
        version=(install.version if install else None) or entry.version or "unknown",
        install_count=counts.get(plugin_id, 0),
        is_installed=is_installed,
        is_enabled=is_installed and enabled.get(plugin_id, False),
        installed_at=install.installed_at if install else None,
        last_updated_at=install.last_updated if install else None,
        category=entry.category,
        tags=tuple(entry.tags or entry.keywords or ()),
        author=author,
        homepage=entry.homepage,
        is_local_dev_plugin=install.is_local if install else None,
        source_commit=install.git_commit_sha if install else None,
    )


def build_plugin_collection(paths: ClaudePaths) -> list[PluginRecord]:
    """Aggregate every catalog entry of every marketplace into PluginRecords.

    Returns:
        Records sorted by install count, highest first.

    Raises:
        MalformedDocument: If the installed registry, count cache or settings
            cannot be parsed.
        NotFound: If settings.json is missing.
    """
    installed = _load_installed(paths)
    counts = _load_counts(paths)
    enabled = get_enabled_plugins(paths)

    plugins: list[PluginRecord] = []
    if is_directory(paths.marketplaces_dir):
        for marketplace_id in list_subdirectories(paths.marketplaces_dir):
            catalog = _load_catalog(paths, marketplace_id)
            if catalog is None:
                continue
            for entry in catalog.plugins:
                plugins.append(_build_record(entry, marketplace_id, installed, enabled, counts))

    plugins.sort(key=lambda p: p.install_count, reverse=True)
    logger.debug(f"Aggregated {len(plugins)} plugins")
    return plugins


def build_marketplace_collection(paths: ClaudePaths) -> list[MarketplaceRecord]:
    """Known marketplaces with plugin counts, largest first.

    Raises:
        MalformedDocument: If known_marketplaces.json cannot be parsed.
    """
    known = read_document(paths.known_marketplaces)
    if known is None:
        return []
    if not isinstance(known, dict):
        raise MalformedDocument(paths.known_marketplaces, "expected a JSON object")

    marketplaces: list[MarketplaceRecord] = []
    for marketplace_id, raw in known.items():
        try:
            entry = KnownMarketplaceEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping marketplace '{marketplace_id}': invalid entry ({e.error_count()} errors)")
            continue

        catalog = _load_catalog(paths, marketplace_id)
        marketplaces.append(
            MarketplaceRecord(
                id=marketplace_id,
                name=(catalog.name if catalog else None) or marketplace_id,
                source=entry.source,
                install_location=entry.install_location,
                last_updated=entry.last_updated,
                plugin_count=len(catalog.plugins) if catalog else 0,
            )
        )

    marketplaces.sort(key=lambda m: m.plugin_count, reverse=True)
    return marketplaces


def load_snapshot(paths: ClaudePaths) -> Snapshot:
    """Aggregate plugins and marketplaces together."""
    return Snapshot(
        plugins=tuple(build_plugin_collection(paths)),
        marketplaces=tuple(build_marketplace_collection(paths)),
    )


def find_plugin_by_id(paths: ClaudePaths, plugin_id: str) -> Optional[PluginRecord]:
    """Look up a plugin against the current state on disk."""
    for plugin in build_plugin_collection(paths):
        if plugin.id == plugin_id:
            return plugin
    return None


def load_installed_plugins(paths: ClaudePaths) -> list[PluginRecord]:
    return [p for p in build_plugin_collection(paths) if p.is_installed]


def load_enabled_plugins(paths: ClaudePaths) -> list[PluginRecord]:
    return [p for p in build_plugin_collection(paths) if p.is_enabled]


def get_plugin_statistics(paths: ClaudePaths) -> PluginStatistics:
    plugins = build_plugin_collection(paths)
    return PluginStatistics(
        total=len(plugins),
        installed=sum(1 for p in plugins if p.is_installed),
        enabled=sum(1 for p in plugins if p.is_enabled),
        marketplaces=len(build_marketplace_collection(paths)),
    )
