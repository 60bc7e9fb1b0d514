"""Tests for the directory archive reader and archive-level lookups."""

import struct
from pathlib import Path

import pytest

from chm_viewer.archive import (
    DirectoryArchive,
    find_default_page,
    find_toc_path,
    parse_system_default_topic,
)
from chm_viewer.errors import EntryNotFound
from chm_viewer.protocols import ArchiveReaderProtocol
from tests.unit.fakes import FakeArchive


def _system_file(*records: tuple[int, bytes]) -> bytes:
    data = struct.pack("<I", 3)
    for code, payload in records:
        data += struct.pack("<HH", code, len(payload)) + payload
    return data


def test_directory_archive_satisfies_protocol(archive_dir: Path) -> None:
    assert isinstance(DirectoryArchive(archive_dir), ArchiveReaderProtocol)
    assert isinstance(FakeArchive(), ArchiveReaderProtocol)


def test_list_entries_are_rooted_and_sorted(archive_dir: Path) -> None:
    paths = [e.path for e in DirectoryArchive(archive_dir).list_entries()]
    assert paths == sorted(paths)
    assert "/guide/calendar.htm" in paths
    assert "/Manual.hhc" in paths
    assert all(p.startswith("/") for p in paths)


def test_list_entries_record_sizes(archive_dir: Path) -> None:
    entries = {e.path: e for e in DirectoryArchive(archive_dir).list_entries()}
    assert entries["/intro.htm"].length == (archive_dir / "intro.htm").stat().st_size


def test_read_entry_returns_bytes(archive_dir: Path) -> None:
    data = DirectoryArchive(archive_dir).read_entry("/intro.htm")
    assert b"<title>Introduction</title>" in data


def test_read_entry_accepts_unrooted_and_case_insensitive_paths(archive_dir: Path) -> None:
    archive = DirectoryArchive(archive_dir)
    assert archive.read_entry("guide/calendar.htm") == archive.read_entry("/GUIDE/Calendar.HTM")


def test_read_entry_missing_raises(archive_dir: Path) -> None:
    with pytest.raises(EntryNotFound, match="/nope.htm"):
        DirectoryArchive(archive_dir).read_entry("/nope.htm")


def test_read_entry_rejects_escapes(archive_dir: Path) -> None:
    (archive_dir.parent / "secret.txt").write_text("secret")
    archive = DirectoryArchive(archive_dir)
    with pytest.raises(EntryNotFound):
        archive.read_entry("/../secret.txt")
    assert not archive.exists("/../secret.txt")
    assert archive.exists("/intro.htm")


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        DirectoryArchive(tmp_path / "missing")


def test_parse_system_default_topic() -> None:
    data = _system_file((0, b"ignored\0"), (2, b"start/welcome.htm\0"))
    assert parse_system_default_topic(data) == "/start/welcome.htm"


def test_parse_system_default_topic_absent_or_truncated() -> None:
    assert parse_system_default_topic(_system_file((3, b"title\0"))) is None
    assert parse_system_default_topic(b"") is None
    truncated = struct.pack("<I", 3) + struct.pack("<HH", 2, 50) + b"short"
    assert parse_system_default_topic(truncated) is None


def test_find_toc_path(fake_archive: FakeArchive) -> None:
    assert find_toc_path(fake_archive) == "/Manual.hhc"
    assert find_toc_path(FakeArchive({"/a.htm": b""})) is None


def test_find_default_page_from_system_file(fake_archive: FakeArchive) -> None:
    fake_archive.add("/#SYSTEM", _system_file((2, b"Guide/Calendar.htm\0")))
    assert find_default_page(fake_archive) == "/guide/calendar.htm"


def test_find_default_page_by_convention() -> None:
    archive = FakeArchive({"/a.htm": b"", "/Default.htm": b""})
    assert find_default_page(archive) == "/Default.htm"


def test_find_default_page_none(fake_archive: FakeArchive) -> None:
    assert find_default_page(fake_archive) is None
