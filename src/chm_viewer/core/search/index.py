"""In-memory inverted index over an archive's HTML pages."""

import bisect
import threading
from collections.abc import Iterable, Iterator

from loguru import logger

from chm_viewer.core.search.snippet import make_snippet
from chm_viewer.core.search.text import extract_html, extract_page
from chm_viewer.core.search.tokenizer import tokenize
from chm_viewer.errors import EntryNotFound, ExtractionFailed, InvalidData
from chm_viewer.models.node import ArchiveEntry, IndexStats, PageRecord, SearchResult
from chm_viewer.protocols import ArchiveReaderProtocol


def _basename(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


class SearchIndex:
    """Word-level inverted index with prefix search.

    Maps each token to the set of page paths containing it, and caches each
    page's title and plain text for result display. A single build runs at a
    time; searches may run concurrently with it and see every page committed
    so far. Each page is committed under a lock, so a search never observes
    a half-ingested page.

    Create one instance per opened archive.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._build_lock = threading.Lock()
        self._postings: dict[str, set[str]] = {}
        # Sorted keys of _postings for prefix range lookups. Rebuilt on the
        # first search after the token set changes.
        self._vocabulary: list[str] | None = None
        self._pages: dict[str, PageRecord] = {}
        self._page_tokens: dict[str, frozenset[str]] = {}
        self._is_built = False

    @property
    def is_built(self) -> bool:
        """Whether a build has completed."""
        return self._is_built

    @property
    def vocabulary_size(self) -> int:
        """Number of distinct indexed tokens."""
        with self._lock:
            return len(self._postings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)

    def page(self, path: str) -> PageRecord | None:
        """Return the indexed record for a path, if any."""
        with self._lock:
            return self._pages.get(path)

    # --- Ingestion ---

    def ingest_text(self, path: str, html: str, *, filename: str | None = None) -> PageRecord:
        """Index one page from already decoded markup."""
        page = extract_html(html)
        title = page.title or filename or _basename(path)
        return self._commit(PageRecord(path=path, title=title, text=page.text))

    def ingest(self, path: str, data: bytes, *, filename: str | None = None) -> PageRecord | None:
        """Index one page from raw bytes.

        Returns the new record, or None when the bytes cannot be decoded.
        """
        try:
            page = extract_page(data)
        except InvalidData as e:
            logger.debug("Skipping {}: {}", path, e)
            return None
        title = page.title or filename or _basename(path)
        return self._commit(PageRecord(path=path, title=title, text=page.text))

    def _commit(self, record: PageRecord) -> PageRecord:
        tokens = frozenset(tokenize(record.text))
        with self._lock:
            if record.path in self._page_tokens:
                self._unlink(record.path)
            self._pages[record.path] = record
            self._page_tokens[record.path] = tokens
            for token in tokens:
                posting = self._postings.get(token)
                if posting is None:
                    self._postings[token] = {record.path}
                    self._vocabulary = None
                else:
                    posting.add(record.path)
        return record

    def _unlink(self, path: str) -> None:
        """Remove a page's postings. Caller holds the lock."""
        for token in self._page_tokens.pop(path):
            posting = self._postings[token]
            posting.discard(path)
            if not posting:
                del self._postings[token]
                self._vocabulary = None
        del self._pages[path]

    # --- Building ---

    def build_from_entries(self, entries: Iterable[tuple[ArchiveEntry, bytes]]) -> IndexStats:
        """Index pre-read (entry, bytes) pairs, skipping non-page entries."""
        return self._build((entry, data) for entry, data in entries if entry.is_page)

    def build(self, archive: ArchiveReaderProtocol) -> IndexStats:
        """Read and index every page in the archive.

        Entries are read one at a time, so the build interleaves with the
        reader's latency. Entries that cannot be read or decoded are skipped.
        """
        return self._build(self._read_pages(archive))

    @staticmethod
    def _read_pages(archive: ArchiveReaderProtocol) -> Iterator[tuple[ArchiveEntry, bytes | None]]:
        for entry in archive.list_entries():
            if not entry.is_page:
                continue
            try:
                data = archive.read_entry(entry.path)
            except (EntryNotFound, ExtractionFailed) as e:
                logger.debug("Skipping {}: {}", entry.path, e)
                yield entry, None
                continue
            yield entry, data

    def _build(self, pages: Iterable[tuple[ArchiveEntry, bytes | None]]) -> IndexStats:
        if not self._build_lock.acquire(blocking=False):
            msg = "A build is already running on this index"
            raise RuntimeError(msg)
        try:
            indexed = 0
            skipped = 0
            for entry, data in pages:
                if data is None or self.ingest(entry.path, data, filename=entry.filename) is None:
                    skipped += 1
                    continue
                indexed += 1
            self._is_built = True
        finally:
            self._build_lock.release()

        stats = IndexStats(pages_indexed=indexed, pages_skipped=skipped, tokens=self.vocabulary_size)
        logger.info(
            "Index built: {} pages, {} skipped, {} tokens",
            stats.pages_indexed, stats.pages_skipped, stats.tokens,
        )
        return stats

    # --- Querying ---

    def _prefix_postings(self, prefix: str) -> set[str]:
        """Union of posting sets of all tokens starting with prefix. Caller holds the lock."""
        result: set[str] = set()
        if self._vocabulary is None:
            self._vocabulary = sorted(self._postings)
        vocabulary = self._vocabulary
        i = bisect.bisect_left(vocabulary, prefix)
        while i < len(vocabulary) and vocabulary[i].startswith(prefix):
            result |= self._postings[vocabulary[i]]
            i += 1
        return result

    def search(self, query: str) -> list[SearchResult]:
        """Find pages matching every word of the query.

        Each query word matches any indexed word it is a prefix of; pages
        must match all query words. Results are ordered by title,
        case-insensitively.
        """
        words = tokenize(query)
        if not words:
            return []

        with self._lock:
            matching: set[str] | None = None
            for word in dict.fromkeys(words):
                paths = self._prefix_postings(word)
                matching = paths if matching is None else matching & paths
                if not matching:
                    return []
            records = [self._pages[path] for path in matching or ()]

        results = [
            SearchResult(
                title=record.title or _basename(record.path),
                path=record.path,
                snippet=make_snippet(record.text, query),
            )
            for record in records
        ]
        # Sort by path first so equal titles come out in a stable order.
        results.sort(key=lambda r: r.path)
        results.sort(key=lambda r: r.title.casefold())
        return results
