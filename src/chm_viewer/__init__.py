"""Table of contents and full-text search for compiled HTML help archives."""

from chm_viewer.archive import DirectoryArchive
from chm_viewer.core.search.index import SearchIndex
from chm_viewer.core.toc.builder import parse_toc, parse_toc_html
from chm_viewer.document import ChmDocument
from chm_viewer.protocols import ArchiveReaderProtocol

__all__ = [
    "ArchiveReaderProtocol",
    "ChmDocument",
    "DirectoryArchive",
    "SearchIndex",
    "parse_toc",
    "parse_toc_html",
]
