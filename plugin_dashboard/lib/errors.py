"""
Typed errors for the plugin dashboard.

Every failure the dashboard reports to the user maps to one of these codes.
Non-interactive commands print the message and exit non-zero; the
interactive session shows it as a status line and keeps running.
"""

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorCode(str, Enum):
    """Error codes for programmatic handling."""

    NOT_FOUND = "not_found"
    MALFORMED_DOCUMENT = "malformed_document"
    WRITE_FAILED = "write_failed"
    ACTION_FAILED = "action_failed"


class DashboardError(Exception):
    """Base class for every error the dashboard surfaces to the user."""

    code: ErrorCode = ErrorCode.NOT_FOUND

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(DashboardError):
    """A requested plugin or document does not exist."""

    code = ErrorCode.NOT_FOUND


class MalformedDocument(DashboardError):
    """A JSON document exists but cannot be parsed into the expected shape."""

    code = ErrorCode.MALFORMED_DOCUMENT

    def __init__(self, path: Path, reason: str, unreadable: bool = False):
        prefix = "Cannot read" if unreadable else "Invalid JSON in"
        super().__init__(f"{prefix} {path}: {reason}")
        self.path = path
        self.reason = reason


class WriteFailed(DashboardError):
    """A durable write could not complete. The previous document is intact."""

    code = ErrorCode.WRITE_FAILED

    def __init__(self, path: Path, cause: BaseException):
        super().__init__(f"Failed to write {path}: {cause}")
        self.path = path
        self.cause = cause


class ActionFailed(DashboardError):
    """The external plugin command failed or could not be launched."""

    code = ErrorCode.ACTION_FAILED

    def __init__(self, verb: str, plugin_id: str, diagnostic: Optional[str] = None):
        message = f"Failed to {verb} {plugin_id}"
        if diagnostic:
            message = f"{message}: {diagnostic}"
        super().__init__(message)
        self.verb = verb
        self.plugin_id = plugin_id
        self.diagnostic = diagnostic
