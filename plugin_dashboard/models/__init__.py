"""
Pydantic models for the plugin dashboard.
"""

from plugin_dashboard.models.plugin import (
    Author,
    ErrorRecord,
    MarketplaceRecord,
    PluginRecord,
    PluginStatistics,
)

__all__ = [
    "Author",
    "ErrorRecord",
    "MarketplaceRecord",
    "PluginRecord",
    "PluginStatistics",
]
