"""CLI for browsing extracted CHM archives (toc, pages, read, search, MCP server)."""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from chm_viewer.archive import DirectoryArchive
from chm_viewer.core.toc.markdown import render_toc_as_markdown, toc_to_dicts
from chm_viewer.document import ChmDocument
from chm_viewer.errors import ChmError
from chm_viewer.logging_config import configure_logging

app = typer.Typer(help="CHM viewer: browse and search extracted compiled-help archives.")

ArchiveDir = Annotated[Path, typer.Argument(help="Directory holding the extracted archive")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_document(archive_dir: Path) -> ChmDocument:
    """Open the archive directory, exiting if it doesn't exist."""
    if not archive_dir.is_dir():
        logger.error("Archive directory not found: {}", archive_dir)
        raise typer.Exit(1)
    return ChmDocument(DirectoryArchive(archive_dir))


@app.command()
def toc(
    archive_dir: ArchiveDir,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show the table of contents."""
    doc = _open_document(archive_dir)
    if output_json:
        data = {
            "toc_path": doc.toc_path,
            "start_page": doc.start_page,
            "topics": toc_to_dicts(doc.toc, max_depth=max_depth),
        }
        typer.echo(json.dumps(data, indent=2))
        return

    if not doc.toc:
        typer.echo("No topics.")
        return
    typer.echo(render_toc_as_markdown(doc.toc, max_depth=max_depth), nl=False)


@app.command()
def pages(archive_dir: ArchiveDir) -> None:
    """List all HTML pages in the archive."""
    doc = _open_document(archive_dir)
    entries = [e for e in doc.archive.list_entries() if e.is_page]
    typer.echo(f"{len(entries)} pages:\n")
    for entry in entries:
        typer.echo(f"  {entry.path}  ({entry.length} bytes)")


@app.command()
def read(
    archive_dir: ArchiveDir,
    path: str = typer.Argument(..., help="Page path inside the archive, e.g. /intro.htm"),
) -> None:
    """Print a page's title and plain text."""
    doc = _open_document(archive_dir)
    try:
        page = doc.read_page(path)
    except ChmError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    typer.echo(f"# {page.title or path}\n")
    typer.echo(page.text)


@app.command()
def search(
    archive_dir: ArchiveDir,
    query: str = typer.Argument(..., help="Search query"),
    limit: int = typer.Option(10, "--limit", "-n", help="Max results"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search all pages for a query."""
    doc = _open_document(archive_dir)
    doc.build_index()
    results = doc.search(query)
    shown = results[:limit]

    if output_json:
        data = {
            "results": [{"title": r.title, "path": r.path, "snippet": r.snippet} for r in shown],
            "total": len(results),
        }
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"Found {len(results)} results (showing {len(shown)}):\n")
    for r in shown:
        typer.echo(f"  {r.title}  [{r.path}]")
        if r.snippet:
            typer.echo(f"    {r.snippet}")
        typer.echo()


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from chm_viewer.mcp.server import run_mcp_server

    run_mcp_server()
