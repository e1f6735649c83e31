"""
Pytest configuration and fixtures.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable

import pytest

# Keep the real ~/.claude and ~/.config out of every test
os.environ["CLAUDE_CONFIG_DIR"] = tempfile.mkdtemp(prefix="plugin-dashboard-test-")
os.environ["PLUGIN_DASHBOARD_CONFIG"] = str(
    Path(tempfile.mkdtemp(prefix="plugin-dashboard-config-")) / "config.yaml"
)
os.environ["LOG_LEVEL"] = "WARNING"

from plugin_dashboard.lib.paths import ClaudePaths  # noqa: E402

OFFICIAL = "claude-plugins-official"
DEV = "dev-marketplace"


def _write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Write a JSON document, creating parent directories."""
    return _write_json


@pytest.fixture
def settings_doc() -> dict:
    """settings.json with plugin and unrelated keys."""
    return {
        "model": "opus",
        "permissions": {"allow": ["Bash(ls:*)"], "deny": []},
        "enabledPlugins": {
            f"context7@{OFFICIAL}": True,
            f"serena@{OFFICIAL}": False,
            # Enabled in settings but never installed
            f"playwright@{OFFICIAL}": True,
        },
        "statusLine": {"type": "command", "command": "~/bin/status"},
    }


@pytest.fixture
def claude_dir(tmp_path: Path, settings_doc: dict) -> Path:
    """A populated ~/.claude directory."""
    root = tmp_path / ".claude"
    paths = ClaudePaths(root)

    _write_json(paths.settings, settings_doc)

    _write_json(paths.installed_plugins, {
        "version": 2,
        "plugins": {
            f"context7@{OFFICIAL}": [
                {
                    "scope": "user",
                    "installPath": str(paths.cache_dir / OFFICIAL / "context7" / "1.0.0"),
                    "version": "1.0.0",
                    "installedAt": "2025-01-10T08:00:00.000Z",
                    "lastUpdated": "2025-02-01T08:00:00.000Z",
                    "gitCommitSha": "abc123",
                    "isLocal": False,
                },
                {
                    "scope": "project",
                    "installPath": str(paths.cache_dir / OFFICIAL / "context7" / "2.0.0"),
                    "version": "2.0.0",
                    "installedAt": "2025-06-01T08:00:00.000Z",
                    "lastUpdated": "2025-06-01T08:00:00.000Z",
                    "gitCommitSha": "def456",
                    "isLocal": False,
                },
            ],
            f"serena@{OFFICIAL}": [
                {
                    "scope": "user",
                    "installPath": "/tmp/serena",
                    "installedAt": "2024-11-05T12:30:00Z",
                    "lastUpdated": "2024-11-05T12:30:00Z",
                    "gitCommitSha": "789aaa",
                    "isLocal": False,
                },
            ],
            f"local-tool@{DEV}": [
                {
                    "scope": "user",
                    "installPath": "/home/dev/local-tool",
                    "version": "0.0.1-dev",
                    "installedAt": "2025-03-03T00:00:00Z",
                    "lastUpdated": "2025-03-03T00:00:00Z",
                    "gitCommitSha": "",
                    "isLocal": True,
                },
            ],
        },
    })

    _write_json(paths.install_counts_cache, {
        "version": 1,
        "fetchedAt": "2025-06-01T00:00:00Z",
        "counts": [
            {"plugin": f"context7@{OFFICIAL}", "unique_installs": 500},
            {"plugin": f"serena@{OFFICIAL}", "unique_installs": 120},
            {"plugin": f"playwright@{OFFICIAL}", "unique_installs": 300},
            # No catalog entry anywhere
            {"plugin": "a@m", "unique_installs": 42},
        ],
    })

    _write_json(paths.marketplace_catalog(OFFICIAL), {
        "$schema": "https://anthropic.com/claude-code/marketplace.schema.json",
        "name": "Claude Plugins Official",
        "owner": {"name": "Anthropic", "email": "support@anthropic.com"},
        "plugins": [
            {
                "name": "context7",
                "description": "Up-to-date library documentation",
                "version": "0.9.0",
                "author": {"name": "Upstash"},
                "category": "development",
                "homepage": "https://context7.com",
                "tags": ["docs", "MCP"],
            },
            {
                "name": "serena",
                "description": "Semantic code navigation",
                "version": "0.3.0",
                "keywords": ["lsp", "refactoring"],
            },
            {
                "name": "playwright",
                "description": "Browser automation",
                "version": "1.2.0",
                "category": "testing",
            },
            {
                "name": "zeta-new",
                "description": "Brand new plugin",
            },
        ],
    })

    _write_json(paths.marketplace_catalog(DEV), {
        "name": DEV,
        "owner": "Local Dev",
        "plugins": [
            {"name": "local-tool", "description": "Work in progress", "author": "me"},
        ],
    })

    # Broken catalog and a marketplace folder without one
    broken = paths.marketplace_catalog("broken")
    broken.parent.mkdir(parents=True)
    broken.write_text("{not json")
    (paths.marketplaces_dir / "empty-dir").mkdir()

    _write_json(paths.known_marketplaces, {
        OFFICIAL: {
            "source": {"source": "github", "repo": "anthropics/claude-plugins-official"},
            "installLocation": str(paths.marketplaces_dir / OFFICIAL),
            "lastUpdated": "2025-06-01T00:00:00.000Z",
        },
        DEV: {
            "source": {"source": "git", "url": "https://git.example.com/dev.git"},
            "installLocation": str(paths.marketplaces_dir / DEV),
            "lastUpdated": "2025-05-01T00:00:00.000Z",
        },
        "broken": {
            "source": {"source": "github", "repo": "someone/broken"},
            "installLocation": str(paths.marketplaces_dir / "broken"),
            "lastUpdated": "2025-01-01T00:00:00.000Z",
        },
        "local-dir": {
            "source": {"source": "directory", "path": "/home/me/local-dir"},
            "installLocation": "/home/me/local-dir",
        },
        "no-source": {
            "installLocation": "/nowhere",
            "lastUpdated": "2025-01-01T00:00:00.000Z",
        },
    })

    return root


@pytest.fixture
def paths(claude_dir: Path) -> ClaudePaths:
    return ClaudePaths(claude_dir)


@pytest.fixture
def fake_plugin_command(tmp_path: Path) -> Callable[[str], list[str]]:
    """Create an executable shell script and return its argv."""

    def _make(body: str, name: str = "fake-claude") -> list[str]:
        script = tmp_path / name
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(0o755)
        return [str(script)]

    return _make
