"""
Search and sort over aggregated plugin records.

Both functions return new lists and never reorder their input. Sorting is
stable in both directions: records that compare equal keep their input order.
"""

import locale
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from plugin_dashboard.models.plugin import PluginRecord


class SortKey(str, Enum):
    INSTALL_COUNT = "installs"
    NAME = "name"
    INSTALLED_AT = "date"


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def flipped(self) -> "SortDirection":
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


_SORT_CYCLE = (SortKey.INSTALL_COUNT, SortKey.NAME, SortKey.INSTALLED_AT)


def next_sort_key(key: SortKey) -> SortKey:
    """installs -> name -> date -> installs."""
    return _SORT_CYCLE[(_SORT_CYCLE.index(key) + 1) % len(_SORT_CYCLE)]


def _matches(plugin: PluginRecord, needle: str) -> bool:
    fields = (plugin.name, plugin.description, plugin.marketplace_id, plugin.category or "")
    if any(needle in field.casefold() for field in fields):
        return True
    return any(needle in tag.casefold() for tag in plugin.tags)


def search_plugins(query: str, plugins: Iterable[PluginRecord]) -> list[PluginRecord]:
    """Case-insensitive substring search over name, description,
    marketplace, category and tags. An empty query matches everything."""
    needle = query.casefold()
    if not needle:
        return list(plugins)
    return [p for p in plugins if _matches(p, needle)]


def _timestamp(value: Optional[str]) -> float:
    """Seconds since the epoch; missing or unparseable timestamps are 0."""
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _name_key(plugin: PluginRecord) -> tuple[str, str]:
    # Case-insensitive first so the C locale does not put every capital first
    return locale.strxfrm(plugin.name.casefold()), locale.strxfrm(plugin.name)


_SORT_KEYS = {
    SortKey.INSTALL_COUNT: lambda p: p.install_count,
    SortKey.NAME: _name_key,
    SortKey.INSTALLED_AT: lambda p: _timestamp(p.installed_at),
}


def sort_plugins(
    plugins: Iterable[PluginRecord],
    key: SortKey,
    direction: SortDirection,
) -> list[PluginRecord]:
    """Stable sort by ``key``; ties keep their input order in either direction."""
    return sorted(
        plugins,
        key=_SORT_KEYS[key],
        reverse=direction is SortDirection.DESCENDING,
    )
