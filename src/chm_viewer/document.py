"""An opened archive: table of contents, start page, and search index."""

import threading

from loguru import logger

from chm_viewer.archive import find_default_page, find_toc_path
from chm_viewer.core.search.index import SearchIndex
from chm_viewer.core.search.text import ExtractedPage, extract_page
from chm_viewer.core.toc.builder import parse_toc
from chm_viewer.core.toc.navigation import first_target, flat_toc
from chm_viewer.errors import ChmError
from chm_viewer.models.node import SearchResult, TopicNode
from chm_viewer.protocols import ArchiveReaderProtocol


class ChmDocument:
    """Everything a viewer needs from one opened archive.

    The table of contents is loaded eagerly. The search index is built on
    demand, either synchronously with build_index() or on a background
    thread with start_indexing(); searches work at any point and see
    whatever has been indexed so far.
    """

    def __init__(self, archive: ArchiveReaderProtocol) -> None:
        self.archive = archive
        self.index = SearchIndex()
        self.toc_path = find_toc_path(archive)
        self.toc = self._load_toc()
        self.start_page = find_default_page(archive) or first_target(self.toc)
        self._indexer: threading.Thread | None = None

    def _load_toc(self) -> list[TopicNode]:
        if self.toc_path is None:
            logger.debug("No table of contents, listing pages instead")
            return flat_toc(self.archive.list_entries())
        try:
            return parse_toc(self.archive.read_entry(self.toc_path))
        except ChmError as e:
            logger.warning("Cannot read table of contents {}: {}", self.toc_path, e)
            return flat_toc(self.archive.list_entries())

    @property
    def is_index_built(self) -> bool:
        return self.index.is_built

    def build_index(self) -> None:
        """Build the search index in the calling thread."""
        self.index.build(self.archive)

    def start_indexing(self) -> threading.Thread:
        """Build the search index on a background thread.

        Calling again while a build is running returns the running thread.
        """
        if self._indexer is not None and (self._indexer.is_alive() or self.index.is_built):
            return self._indexer
        self._indexer = threading.Thread(target=self._index_in_background, daemon=True)
        self._indexer.start()
        return self._indexer

    def _index_in_background(self) -> None:
        try:
            self.build_index()
        except Exception:
            logger.exception("Index build failed; search stays partial")

    def search(self, query: str) -> list[SearchResult]:
        """Search the pages indexed so far."""
        return self.index.search(query)

    def read_page(self, path: str) -> ExtractedPage:
        """Extract a page's title and plain text.

        Raises:
            EntryNotFound, ExtractionFailed: From the archive reader.
            InvalidData: The page is not decodable text.
        """
        return extract_page(self.archive.read_entry(path))
