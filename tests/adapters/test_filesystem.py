from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from lib_config_io.adapters.filesystem.local import NEW_FILE_MODE, LocalFileStore
from lib_config_io.domain.errors import ErrorKind, NotFound, ReadFailure, WriteFailure


@pytest.fixture()
def store() -> LocalFileStore:
    return LocalFileStore()


def test_write_then_read(tmp_path: Path, store: LocalFileStore) -> None:
    target = tmp_path / "cfg.json"
    store.write_bytes(str(target), b'{"a":1}')
    assert store.read_bytes(str(target)) == b'{"a":1}'


def test_write_replaces_existing_content(tmp_path: Path, store: LocalFileStore) -> None:
    target = tmp_path / "cfg.json"
    target.write_bytes(b"old content that is longer than the new one")
    store.write_bytes(str(target), b"new")
    assert target.read_bytes() == b"new"


def test_write_leaves_no_temporary_files(tmp_path: Path, store: LocalFileStore) -> None:
    store.write_bytes(str(tmp_path / "cfg.json"), b"{}")
    store.write_bytes(str(tmp_path / "cfg.json"), b"[]")
    assert sorted(entry.name for entry in tmp_path.iterdir()) == ["cfg.json"]


@pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permission bits")
def test_write_keeps_existing_permissions(tmp_path: Path, store: LocalFileStore) -> None:
    target = tmp_path / "cfg.json"
    target.write_bytes(b"{}")
    os.chmod(target, 0o640)
    store.write_bytes(str(target), b"[]")
    assert stat.S_IMODE(target.stat().st_mode) == 0o640


@pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX permission bits")
def test_new_files_follow_the_umask(tmp_path: Path, store: LocalFileStore) -> None:
    mask = os.umask(0o022)
    os.umask(mask)
    target = tmp_path / "cfg.json"
    store.write_bytes(str(target), b"{}")
    assert NEW_FILE_MODE == 0o666 & ~mask
    assert stat.S_IMODE(target.stat().st_mode) == 0o666 & ~mask


def test_read_missing_file(tmp_path: Path, store: LocalFileStore) -> None:
    missing = tmp_path / "missing.json"
    with pytest.raises(NotFound) as captured:
        store.read_bytes(str(missing))
    assert captured.value.kind is ErrorKind.NOT_FOUND
    assert captured.value.context["path"] == str(missing)
    assert isinstance(captured.value.__cause__, FileNotFoundError)


def test_read_directory_is_a_read_failure(tmp_path: Path, store: LocalFileStore) -> None:
    with pytest.raises(ReadFailure) as captured:
        store.read_bytes(str(tmp_path))
    assert captured.value.context["path"] == str(tmp_path)


def test_write_into_missing_directory(tmp_path: Path, store: LocalFileStore) -> None:
    target = tmp_path / "absent" / "cfg.json"
    with pytest.raises(WriteFailure) as captured:
        store.write_bytes(str(target), b"{}")
    assert captured.value.context["path"] == str(target)
    assert not target.parent.exists()


def test_failed_replace_keeps_previous_content(tmp_path: Path, store: LocalFileStore, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "cfg.json"
    target.write_bytes(b"previous")

    def refuse(src: str, dst: object) -> None:
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(os, "replace", refuse)
    with pytest.raises(WriteFailure):
        store.write_bytes(str(target), b"next")
    assert target.read_bytes() == b"previous"
    assert sorted(entry.name for entry in tmp_path.iterdir()) == ["cfg.json"]
