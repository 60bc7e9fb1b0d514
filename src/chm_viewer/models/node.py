"""Domain models for the CHM viewer."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TopicNode:
    """A single entry in the table of contents tree."""

    title: str
    target: str | None = None
    children: tuple["TopicNode", ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when the node has neither a target nor children."""
        return self.target is None and not self.children


@dataclass(frozen=True)
class ArchiveEntry:
    """A single logical file inside an archive."""

    path: str
    length: int = 0

    @property
    def is_page(self) -> bool:
        """Whether this entry is an HTML page."""
        lower = self.path.lower()
        return lower.endswith((".htm", ".html"))

    @property
    def filename(self) -> str:
        """The final segment of the path."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class PageRecord:
    """An indexed page with its cached plain text."""

    path: str
    title: str
    text: str = field(repr=False)


@dataclass(frozen=True)
class SearchResult:
    """A search hit with context."""

    title: str
    path: str
    snippet: str


@dataclass(frozen=True)
class IndexStats:
    """Summary of an index build."""

    pages_indexed: int
    pages_skipped: int
    tokens: int
