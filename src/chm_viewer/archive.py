"""Archive readers and archive-level lookups.

Decoding the compiled container itself is left to external tools; the
reader here serves an archive that has already been extracted to a
directory (for example with ``7z x`` or ``extract_chmLib``).
"""

import struct
from pathlib import Path, PurePosixPath

from loguru import logger

from chm_viewer.config import DEFAULT_PAGE_CANDIDATES, SYSTEM_FILE_PATH
from chm_viewer.errors import EntryNotFound, ExtractionFailed
from chm_viewer.models.node import ArchiveEntry
from chm_viewer.protocols import ArchiveReaderProtocol

# #SYSTEM record holding the default topic.
_SYSTEM_DEFAULT_TOPIC = 2


class DirectoryArchive:
    """Archive reader over an extracted archive directory.

    Logical paths are ``/``-rooted and use forward slashes. Lookups fall back
    to a case-insensitive match, since archive paths are case-insensitive.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()
        if not self.root.is_dir():
            msg = f"Archive directory {str(self.root)!r} not found"
            raise ValueError(msg)
        self._entries: list[ArchiveEntry] | None = None
        self._by_lower_path: dict[str, str] | None = None
        logger.debug("Archive ready: {}", self.root)

    def list_entries(self) -> list[ArchiveEntry]:
        """Return every file below the root, sorted by path."""
        if self._entries is None:
            entries = [
                ArchiveEntry(
                    path="/" + p.relative_to(self.root).as_posix(),
                    length=p.stat().st_size,
                )
                for p in self.root.rglob("*")
                if p.is_file()
            ]
            self._entries = sorted(entries, key=lambda e: e.path)
        return list(self._entries)

    def _resolve(self, path: str) -> Path:
        parts = PurePosixPath("/" + path.lstrip("/")).parts[1:]
        if not parts or ".." in parts:
            raise EntryNotFound(path)

        candidate = self.root.joinpath(*parts)
        if candidate.is_file():
            return candidate

        if self._by_lower_path is None:
            self._by_lower_path = {e.path.lower(): e.path for e in self.list_entries()}
        actual = self._by_lower_path.get("/" + "/".join(parts).lower())
        if actual is None:
            raise EntryNotFound(path)
        return self.root / actual.lstrip("/")

    def exists(self, path: str) -> bool:
        """Whether the path names an entry in the archive."""
        try:
            self._resolve(path)
        except EntryNotFound:
            return False
        return True

    def read_entry(self, path: str) -> bytes:
        """Return the raw bytes of an entry.

        Raises:
            EntryNotFound: No such entry.
            ExtractionFailed: The file exists but could not be read.
        """
        file_path = self._resolve(path)
        try:
            return file_path.read_bytes()
        except OSError as e:
            raise ExtractionFailed(path) from e


def parse_system_default_topic(data: bytes) -> str | None:
    """Return the default topic recorded in a #SYSTEM file, if any.

    The file starts with a 4-byte version, followed by records of
    little-endian ``(code: u16, length: u16)`` headers and their payloads.
    """
    offset = 4
    while offset + 4 <= len(data):
        code, length = struct.unpack_from("<HH", data, offset)
        offset += 4
        if offset + length > len(data):
            break
        if code == _SYSTEM_DEFAULT_TOPIC:
            value = data[offset : offset + length].decode("utf-8", errors="replace").strip("\0")
            if value:
                return value if value.startswith("/") else f"/{value}"
        offset += length
    return None


def find_toc_path(archive: ArchiveReaderProtocol) -> str | None:
    """Find the path of the sitemap (.hhc) entry."""
    for entry in archive.list_entries():
        if entry.path.lower().endswith(".hhc"):
            return entry.path
    return None


def find_default_page(archive: ArchiveReaderProtocol) -> str | None:
    """Find the default page from #SYSTEM metadata or by convention."""
    paths = {e.path.lower(): e.path for e in archive.list_entries()}

    if SYSTEM_FILE_PATH.lower() in paths:
        try:
            topic = parse_system_default_topic(archive.read_entry(paths[SYSTEM_FILE_PATH.lower()]))
        except (EntryNotFound, ExtractionFailed) as e:
            logger.debug("Cannot read {}: {}", SYSTEM_FILE_PATH, e)
            topic = None
        if topic is not None:
            return paths.get(topic.lower(), topic)

    for candidate in DEFAULT_PAGE_CANDIDATES:
        if candidate in paths:
            return paths[candidate]
    return None
