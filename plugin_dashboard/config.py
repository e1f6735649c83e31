"""
Configuration management for the plugin dashboard.

Sources, highest priority first: environment variables, a .env file in the
working directory, config.yaml, built-in defaults.

config.yaml lives at $PLUGIN_DASHBOARD_CONFIG if set, otherwise at
$XDG_CONFIG_HOME/plugin-dashboard/config.yaml (~/.config when XDG is unset).
"""

import logging
import os
import shlex
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Keys accepted by `plugin-dashboard config set|get`
CONFIG_KEYS = frozenset({
    "claude_config_dir",
    "plugin_command",
    "log_level",
    "log_file",
    "page_size",
})


def get_config_path() -> Path:
    """Location of config.yaml (it may not exist)."""
    override = os.environ.get("PLUGIN_DASHBOARD_CONFIG", "")
    if override:
        return Path(override).expanduser()
    xdg_home = os.environ.get("XDG_CONFIG_HOME", "")
    config_home = Path(xdg_home).expanduser() if xdg_home else Path.home() / ".config"
    return config_home / "plugin-dashboard" / "config.yaml"


def _load_yaml_config(config_file: Optional[Path] = None) -> dict[str, Any]:
    """Values from config.yaml; an absent or unusable file counts as empty."""
    path = config_file or get_config_path()
    if not path.exists():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Error loading config.yaml: {e}")
        return {}
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        logger.warning(f"Ignoring {path}: top level is not a mapping")
        return {}
    return loaded


def save_yaml_config(data: dict[str, Any], config_file: Optional[Path] = None) -> Path:
    """Replace config.yaml with ``data`` and return its path."""
    path = config_file or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return path


class Settings(BaseSettings):
    """Effective dashboard configuration."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    claude_config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".claude",
        description="Claude Code configuration directory (CLAUDE_CONFIG_DIR)",
    )
    plugin_command: str = Field(
        default="claude plugin",
        description="Plugin command; the verb and plugin id are appended as arguments",
    )

    log_level: str = Field(default="WARNING", description="Root log level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        description="Format for console and file handlers",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Log file; the only log output of the interactive session",
    )

    page_size: int = Field(default=10, ge=1, description="Rows moved by page up/down")

    @model_validator(mode="before")
    @classmethod
    def _inject_yaml_config(cls, data: Any) -> Any:
        """Fill fields nobody set from config.yaml."""
        values = dict(data) if isinstance(data, dict) else {}
        for key, value in _load_yaml_config().items():
            if values.get(key) is not None:
                continue
            # Env vars win even when pydantic-settings has not mapped them yet
            if os.environ.get(key.upper()) is None and os.environ.get(key) is None:
                values[key] = value
        return values

    @property
    def plugin_command_argv(self) -> list[str]:
        """plugin_command as an argv list. It is never passed to a shell."""
        return shlex.split(self.plugin_command)


settings = Settings()


def get_settings() -> Settings:
    return settings


def reload_settings() -> Settings:
    """Rebuild the shared settings from the current environment and files."""
    global settings
    settings = Settings()
    return settings
