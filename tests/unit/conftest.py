"""Shared test fixtures."""

from pathlib import Path

import pytest

from chm_viewer.document import ChmDocument
from tests.unit.fakes import FakeArchive, make_archive


@pytest.fixture
def fake_archive() -> FakeArchive:
    """Return an in-memory archive with a sitemap and four pages."""
    return make_archive()


@pytest.fixture
def indexed_document(fake_archive: FakeArchive) -> ChmDocument:
    """Return a document over the fake archive with its index built."""
    doc = ChmDocument(fake_archive)
    doc.build_index()
    return doc


@pytest.fixture
def archive_dir(tmp_path: Path) -> Path:
    """Write the sample archive to disk as an extracted directory."""
    root = tmp_path / "manual"
    root.mkdir()
    for path, data in make_archive().files.items():
        target = root / path.lstrip("/")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    return root
