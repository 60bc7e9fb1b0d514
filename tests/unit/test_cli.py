"""Tests for the chm-viewer CLI."""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from loguru import logger
from typer.testing import CliRunner

from chm_viewer.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[None]:
    """Keep log lines out of the captured CLI output."""
    with patch("chm_viewer.cli.configure_logging", lambda **_: logger.remove()):
        yield


def test_toc_command_renders_tree(archive_dir: Path) -> None:
    result = runner.invoke(app, ["toc", str(archive_dir)])
    assert result.exit_code == 0, result.output
    assert "- Calendar Guide (/guide/calendar.htm)" in result.output
    assert "    - Calibrating Clocks" in result.output


def test_toc_command_json_with_depth(archive_dir: Path) -> None:
    result = runner.invoke(app, ["toc", str(archive_dir), "--json", "--max-depth", "1"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["toc_path"] == "/Manual.hhc"
    assert data["start_page"] == "/intro.htm"
    assert [t["title"] for t in data["topics"]] == ["Introduction", "Calendar Guide"]
    assert "children" not in data["topics"][1]


def test_pages_command_lists_html_only(archive_dir: Path) -> None:
    result = runner.invoke(app, ["pages", str(archive_dir)])
    assert result.exit_code == 0, result.output
    assert "4 pages" in result.output
    assert "/guide/alphabeta.htm" in result.output
    assert "main.css" not in result.output


def test_read_command_prints_text(archive_dir: Path) -> None:
    result = runner.invoke(app, ["read", str(archive_dir), "/guide/calendar.htm"])
    assert result.exit_code == 0, result.output
    assert "# Calendar Guide" in result.output
    assert "every month" in result.output


def test_read_command_missing_page_fails(archive_dir: Path) -> None:
    result = runner.invoke(app, ["read", str(archive_dir), "/missing.htm"])
    assert result.exit_code == 1


def test_search_command_returns_results(archive_dir: Path) -> None:
    result = runner.invoke(app, ["search", str(archive_dir), "cal"])
    assert result.exit_code == 0, result.output
    assert "Found 3 results" in result.output
    assert "Calendar Guide" in result.output


def test_search_command_json(archive_dir: Path) -> None:
    result = runner.invoke(app, ["search", str(archive_dir), "alpha beta", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["total"] == 1
    assert data["results"][0]["path"] == "/guide/alphabeta.htm"


def test_search_command_respects_limit(archive_dir: Path) -> None:
    result = runner.invoke(app, ["search", str(archive_dir), "cal", "--limit", "1"])
    assert result.exit_code == 0, result.output
    assert "Found 3 results (showing 1)" in result.output


def test_missing_archive_directory_exits(tmp_path: Path) -> None:
    result = runner.invoke(app, ["toc", str(tmp_path / "missing")])
    assert result.exit_code == 1
