"""Protocols for the archive collaborators used by the viewer core."""

from typing import Protocol, runtime_checkable

from chm_viewer.models.node import ArchiveEntry


@runtime_checkable
class ArchiveReaderProtocol(Protocol):
    """Protocol for readers that resolve logical archive paths to bytes."""

    def list_entries(self) -> list[ArchiveEntry]:
        """Return every file entry in the archive."""
        ...

    def read_entry(self, path: str) -> bytes:
        """Return the raw bytes of one entry.

        Raises:
            EntryNotFound: The path is not in the archive.
            ExtractionFailed: The bytes could not be retrieved.
        """
        ...
