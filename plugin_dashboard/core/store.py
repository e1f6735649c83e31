"""
JSON document access.

Reads distinguish "absent" (None) from "present but unparseable"
(MalformedDocument). Writes go to a temporary sibling and are renamed into
place, so readers only ever see the old or the new document.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from plugin_dashboard.lib.errors import MalformedDocument, WriteFailed

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def read_document(path: Path) -> Optional[Any]:
    """Read and parse a JSON document.

    Returns:
        The parsed value, or None if the file does not exist.

    Raises:
        MalformedDocument: If the file exists but cannot be read or is not
            valid JSON.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise MalformedDocument(path, str(e)) from e
    except OSError as e:
        raise MalformedDocument(path, e.strerror or str(e), unreadable=True) from e

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedDocument(path, str(e)) from e


def read_model(path: Path, model: type[ModelT]) -> Optional[ModelT]:
    """Read a JSON document and validate it against a pydantic model.

    Raises:
        MalformedDocument: If the file is not valid JSON or does not match the model.
    """
    data = read_document(path)
    if data is None:
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedDocument(path, f"unexpected structure ({e.error_count()} errors)") from e


def write_document(path: Path, data: Any) -> None:
    """Atomically write a JSON document.

    Raises:
        WriteFailed: If the document could not be written. The file at
            ``path`` is left exactly as it was.
    """
    try:
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as e:
        raise WriteFailed(path, e) from e

    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix=f".{path.stem}-")
    except OSError as e:
        raise WriteFailed(path, e) from e

    closed = False
    try:
        os.write(fd, content.encode("utf-8"))
        os.fsync(fd)
        os.close(fd)
        closed = True
        os.replace(tmp_path, path)
    except OSError as e:
        if not closed:
            os.close(fd)
        if Path(tmp_path).exists():
            os.unlink(tmp_path)
        raise WriteFailed(path, e) from e

    logger.debug(f"Wrote {path}")


def path_exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


def is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def is_directory(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def list_subdirectories(path: Path) -> list[str]:
    """Names of the directories directly under ``path``, sorted.

    Any error (missing directory, permissions, races) yields an empty list.
    """
    try:
        return sorted(entry.name for entry in path.iterdir() if entry.is_dir())
    except OSError:
        return []
