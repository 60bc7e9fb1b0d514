"""Exceptions raised at the boundaries of the CHM viewer."""


class ChmError(Exception):
    """Base class for CHM viewer errors."""


class EntryNotFound(ChmError):
    """The requested path does not exist in the archive."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Entry not found: {path}")


class ExtractionFailed(ChmError):
    """The archive reader could not retrieve an entry's bytes."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Failed to extract entry: {path}")


class InvalidData(ChmError):
    """Bytes could not be decoded as text."""

    def __init__(self, msg: str = "Invalid data in CHM file") -> None:
        super().__init__(msg)


class TOCParseFailed(ChmError):
    """The table of contents could not be decoded as text."""

    def __init__(self, msg: str = "Failed to parse table of contents") -> None:
        super().__init__(msg)
