"""
Tests for JSON document reads and atomic writes.
"""

import json
import os
from unittest.mock import patch

import pytest
from pydantic import BaseModel

from plugin_dashboard.core.store import (
    is_directory,
    is_file,
    list_subdirectories,
    path_exists,
    read_document,
    read_model,
    write_document,
)
from plugin_dashboard.lib.errors import ErrorCode, MalformedDocument, WriteFailed


class _Doc(BaseModel):
    name: str
    count: int = 0


class TestReadDocument:
    def test_missing_file_is_none(self, tmp_path):
        assert read_document(tmp_path / "nope.json") is None

    def test_parses_json(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text('{"a": [1, 2], "b": null}')
        assert read_document(path) == {"a": [1, 2], "b": None}

    def test_invalid_json_is_malformed(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text("{not json")
        with pytest.raises(MalformedDocument) as exc_info:
            read_document(path)
        assert exc_info.value.code is ErrorCode.MALFORMED_DOCUMENT
        assert str(path) in exc_info.value.message

    def test_directory_is_malformed(self, tmp_path):
        """A directory where a file is expected is present but unreadable."""
        (tmp_path / "doc.json").mkdir()
        with pytest.raises(MalformedDocument) as exc_info:
            read_document(tmp_path / "doc.json")
        assert exc_info.value.message.startswith("Cannot read")
        assert "Invalid JSON" not in exc_info.value.message


class TestReadModel:
    def test_validates(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text('{"name": "x", "count": 3, "extra": true}')
        doc = read_model(path, _Doc)
        assert doc == _Doc(name="x", count=3)

    def test_missing_is_none(self, tmp_path):
        assert read_model(tmp_path / "doc.json", _Doc) is None

    def test_wrong_shape_is_malformed(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text('{"count": "many"}')
        with pytest.raises(MalformedDocument) as exc_info:
            read_model(path, _Doc)
        assert "unexpected structure" in exc_info.value.reason


class TestWriteDocument:
    def test_writes_pretty_json(self, tmp_path):
        path = tmp_path / "settings.json"
        write_document(path, {"b": 1, "a": "é"})
        content = path.read_text(encoding="utf-8")
        assert content.endswith("\n")
        assert "é" in content
        assert json.loads(content) == {"b": 1, "a": "é"}

    def test_replaces_existing(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"old": true}')
        write_document(path, {"new": True})
        assert json.loads(path.read_text()) == {"new": True}

    def test_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "settings.json"
        write_document(path, {"x": 1})
        write_document(path, {"x": 2})
        assert [p.name for p in tmp_path.iterdir()] == ["settings.json"]

    def test_failed_rename_keeps_original(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"keep": "me"}')

        with patch("plugin_dashboard.core.store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(WriteFailed) as exc_info:
                write_document(path, {"keep": "not me"})

        assert exc_info.value.code is ErrorCode.WRITE_FAILED
        assert "disk full" in exc_info.value.message
        assert json.loads(path.read_text()) == {"keep": "me"}
        assert [p.name for p in tmp_path.iterdir()] == ["settings.json"]

    def test_missing_directory_fails(self, tmp_path):
        with pytest.raises(WriteFailed):
            write_document(tmp_path / "missing" / "settings.json", {})

    def test_unserializable_value_fails(self, tmp_path):
        path = tmp_path / "settings.json"
        with pytest.raises(WriteFailed):
            write_document(path, {"bad": object()})
        assert not path.exists()

    @pytest.mark.skipif(os.name != "posix", reason="permission bits are POSIX-only")
    def test_read_only_directory_fails(self, tmp_path):
        if os.geteuid() == 0:
            pytest.skip("root ignores directory permissions")
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "settings.json").write_text("{}")
        locked.chmod(0o500)
        try:
            with pytest.raises(WriteFailed):
                write_document(locked / "settings.json", {"a": 1})
        finally:
            locked.chmod(0o700)
        assert (locked / "settings.json").read_text() == "{}"


class TestFilesystemProbes:
    def test_probes(self, tmp_path):
        (tmp_path / "file.txt").write_text("x")
        (tmp_path / "dir").mkdir()

        assert path_exists(tmp_path / "file.txt")
        assert not path_exists(tmp_path / "nope")
        assert is_file(tmp_path / "file.txt")
        assert not is_file(tmp_path / "dir")
        assert is_directory(tmp_path / "dir")
        assert not is_directory(tmp_path / "file.txt")

    def test_list_subdirectories_sorted_dirs_only(self, tmp_path):
        for name in ("zeta", "alpha", "mid"):
            (tmp_path / name).mkdir()
        (tmp_path / "file.json").write_text("{}")
        assert list_subdirectories(tmp_path) == ["alpha", "mid", "zeta"]

    def test_list_subdirectories_missing_is_empty(self, tmp_path):
        assert list_subdirectories(tmp_path / "missing") == []
