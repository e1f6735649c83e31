"""
Logging setup for the plugin dashboard.

The CLI logs to stderr. The interactive session owns the terminal, so it
only logs to a file (when configured) and to an in-memory buffer the footer
reads the latest warning from.
"""

import logging
import sys
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from plugin_dashboard.config import get_settings


class LogBuffer:
    """Bounded in-memory log, oldest entries dropped first."""

    def __init__(self, maxlen: int = 200):
        self._entries: deque[dict[str, Any]] = deque(maxlen=maxlen)

    def append(self, entry: dict[str, Any]) -> None:
        self._entries.append(entry)

    def get_recent(self, limit: int = 100) -> list[dict[str, Any]]:
        """Up to ``limit`` entries, oldest first."""
        return list(self._entries)[-limit:]

    def latest_warning(self) -> Optional[str]:
        """Message of the most recent WARNING-or-worse entry, if any."""
        for entry in reversed(self._entries):
            if entry["levelno"] >= logging.WARNING:
                return entry["message"]
        return None

    def clear(self) -> None:
        self._entries.clear()


class BufferedHandler(logging.Handler):
    """Copies formatted records into a LogBuffer."""

    def __init__(self, buffer: LogBuffer, level: int = logging.NOTSET):
        super().__init__(level)
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": record.levelname,
                "levelno": record.levelno,
                "logger": record.name,
                "message": self.format(record),
            }
        except Exception:
            self.handleError(record)
            return
        self.buffer.append(entry)


_log_buffer = LogBuffer()


def get_log_buffer() -> LogBuffer:
    """The process-wide buffer fed by setup_logging."""
    return _log_buffer


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    console: bool = True,
    log_file: Optional[Path] = None,
) -> None:
    """Configure the root logger from arguments, falling back to settings.

    Replaces any handlers already installed on the root logger.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper())
    formatter = logging.Formatter(format_string or settings.log_format)
    log_file = log_file or settings.log_file

    root = logging.getLogger()
    root.handlers.clear()
    # The buffer needs warnings even when a quieter level is configured
    root.setLevel(min(log_level, logging.WARNING))

    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    buffer_handler = BufferedHandler(_log_buffer, logging.WARNING)
    buffer_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(buffer_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
