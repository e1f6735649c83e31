"""
Plugin models.

A PluginRecord is the aggregated view of one catalog entry, joined with the
installed registry, the enabled-state map and the install-count cache.
Records are rebuilt from disk on every aggregation pass; the only in-place
change is the enabled flag, patched through ``with_enabled`` after a
successful settings write.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from plugin_dashboard.models.documents import MarketplaceSource


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: Optional[str] = None


class PluginRecord(BaseModel):
    """A plugin as shown and acted upon by the dashboard."""

    model_config = ConfigDict(frozen=True)

    id: str  # "<name>@<marketplace_id>"
    name: str
    marketplace_id: str
    description: str = ""
    version: str = "unknown"
    install_count: int = Field(default=0, ge=0)
    is_installed: bool = False
    is_enabled: bool = False
    installed_at: Optional[str] = None  # ISO timestamp, installed only
    last_updated_at: Optional[str] = None  # ISO timestamp, installed only
    category: Optional[str] = None
    tags: tuple[str, ...] = ()
    author: Optional[Author] = None
    homepage: Optional[str] = None
    is_local_dev_plugin: Optional[bool] = None
    source_commit: Optional[str] = None

    @property
    def status_label(self) -> str:
        if not self.is_installed:
            return "Not Installed"
        return "Installed & Enabled" if self.is_enabled else "Installed & Disabled"

    def with_enabled(self, enabled: bool) -> "PluginRecord":
        """Copy of this record with the enabled flag replaced."""
        return self.model_copy(update={"is_enabled": enabled})


class MarketplaceRecord(BaseModel):
    """A known marketplace with its derived plugin count."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    source: MarketplaceSource
    install_location: str = ""
    last_updated: Optional[str] = None
    plugin_count: int = 0

    @property
    def source_label(self) -> str:
        source = self.source
        if source.kind == "github":
            return f"github:{source.repo}"
        if source.kind == "git":
            return source.url
        location = source.path or source.url or source.repo
        return f"{source.tag}:{location}" if location else source.tag


class ErrorRecord(BaseModel):
    """A plugin problem reported by Claude Code. Display-only."""

    model_config = ConfigDict(frozen=True)

    plugin_id: str
    kind: Literal["installation", "runtime", "config"]
    message: str
    timestamp: str
    details: Optional[str] = None


class PluginStatistics(BaseModel):
    """Counts shown by `plugin-dashboard status`."""

    total: int = 0
    installed: int = 0
    enabled: int = 0
    marketplaces: int = 0
