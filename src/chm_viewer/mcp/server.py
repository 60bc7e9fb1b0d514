"""MCP server exposing CHM table-of-contents, page and search tools."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from chm_viewer.archive import DirectoryArchive
from chm_viewer.config import ARCHIVE_DIR_ENV, resolve_archive_directory
from chm_viewer.core.toc.markdown import render_toc_as_markdown, toc_to_dicts
from chm_viewer.core.toc.navigation import find_breadcrumbs, get_siblings
from chm_viewer.document import ChmDocument
from chm_viewer.errors import ChmError


def _breadcrumbs_str(doc: ChmDocument, target: str) -> str:
    crumbs = find_breadcrumbs(doc.toc, target)
    return " > ".join(c.title[:40] for c in crumbs[:-1]) if crumbs else ""


# --- Core functions (testable without MCP context) ---


def chm_search(
    doc: ChmDocument,
    *,
    query: str = "",
    include_breadcrumbs: bool = True,
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """Search the archive's pages.

    Words are ANDed; each word matches any indexed word starting with it.

    Args:
        query: Search text.
        include_breadcrumbs: Include the table-of-contents chain in results.
        limit: Max results (1-50, default 20).
        offset: Pagination offset.
    """
    if not query.strip():
        return {"error": "No search query provided.", "results": [], "count": 0, "total": 0}

    limit = max(1, min(limit, 50))
    offset = max(0, offset)
    results = doc.search(query)
    total = len(results)
    page = results[offset : offset + limit]

    serialized = []
    for r in page:
        entry: dict[str, Any] = {"title": r.title, "path": r.path, "snippet": r.snippet}
        if include_breadcrumbs:
            entry["breadcrumbs"] = _breadcrumbs_str(doc, r.path)
        serialized.append(entry)

    output: dict[str, Any] = {
        "results": serialized,
        "count": len(serialized),
        "total": total,
        "has_more": offset + len(serialized) < total,
        "index_complete": doc.is_index_built,
    }
    if output["has_more"]:
        output["next_offset"] = offset + limit
    return output


def chm_read_toc(
    doc: ChmDocument,
    *,
    max_depth: int | None = None,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read the table of contents as markdown or structured JSON.

    Args:
        max_depth: Max depth levels to include (None = unlimited).
        output_format: "markdown" or "json".
    """
    result: dict[str, Any] = {"toc_path": doc.toc_path, "start_page": doc.start_page}
    if output_format == "markdown":
        result["content"] = render_toc_as_markdown(doc.toc, max_depth=max_depth)
    else:
        result["topics"] = toc_to_dicts(doc.toc, max_depth=max_depth)
    return result


def chm_read_page(doc: ChmDocument, *, path: str) -> dict[str, Any]:
    """Read one page as plain text.

    Args:
        path: Page path inside the archive, e.g. "/intro.htm".
    """
    try:
        page = doc.read_page(path)
    except ChmError as e:
        return {"error": str(e)}

    estimated_tokens = len(page.text) // 4
    result: dict[str, Any] = {
        "path": path,
        "title": page.title,
        "content": page.text,
        "breadcrumbs": _breadcrumbs_str(doc, path),
        "estimated_tokens": estimated_tokens,
    }
    if estimated_tokens > 5000:
        result["warning"] = f"Large result (~{estimated_tokens} tokens)."
    return result


def chm_list_pages(doc: ChmDocument) -> dict[str, Any]:
    """List all HTML pages in the archive."""
    entries = [e for e in doc.archive.list_entries() if e.is_page]
    return {
        "pages": [{"path": e.path, "filename": e.filename, "length": e.length} for e in entries],
        "count": len(entries),
    }


def chm_get_topic_context(
    doc: ChmDocument,
    *,
    path: str,
    sibling_count: int = 3,
) -> dict[str, Any]:
    """Get a topic's position in the table of contents.

    Args:
        path: Target path of the topic.
        sibling_count: Siblings before/after to include.
    """
    crumbs = find_breadcrumbs(doc.toc, path)
    if crumbs is None:
        return {"error": f"No topic points at '{path}'."}

    node = crumbs[-1]
    before, after = get_siblings(doc.toc, path)

    def _brief(items: tuple) -> list[dict[str, Any]]:
        return [{"title": n.title, "target": n.target} for n in items]

    return {
        "topic": {"title": node.title, "target": node.target, "child_count": len(node.children)},
        "breadcrumbs": _breadcrumbs_str(doc, path),
        "siblings_before": _brief(before[-sibling_count:] if sibling_count else ()),
        "siblings_after": _brief(after[:sibling_count]),
        "children": _brief(node.children),
    }


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    document: ChmDocument


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open the archive on startup and start indexing in the background."""
    archive_dir = resolve_archive_directory()
    if archive_dir is None:
        msg = f"Set {ARCHIVE_DIR_ENV} to the extracted archive directory"
        raise RuntimeError(msg)

    document = ChmDocument(DirectoryArchive(archive_dir))
    document.start_indexing()
    logger.info("Serving {} ({} top-level topics)", archive_dir, len(document.toc))
    yield ServerContext(document=document)


mcp_server = FastMCP(
    "chm-viewer",
    instructions="""\
A compiled-help archive: HTML pages organized by a table of contents.

1. Use chm_read_toc_tool to see the structure (max_depth=2 for large manuals).
2. Use chm_search_tool to find pages; words are ANDed and prefix-matched.
3. Use chm_read_page_tool with a result's path to read the full page.

The index is built in the background after startup. While index_complete is
false, search results may be missing pages.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def chm_search_tool(
    ctx: Context,
    query: str = "",
    include_breadcrumbs: bool = True,
    limit: int = 20,
    offset: int = 0,
) -> dict[str, Any]:
    """Search the archive's pages by text.

    Words are ANDed, and each word matches any word starting with it
    ("cal" finds "calendar"). Results are ordered by page title.

    Pagination: When has_more is true, use next_offset in a follow-up call.

    Args:
        query: Search text.
        include_breadcrumbs: Include the table-of-contents chain in results.
        limit: Max results (1-50, default 20).
        offset: Pagination offset.
    """
    return chm_search(
        _ctx(ctx).document,
        query=query,
        include_breadcrumbs=include_breadcrumbs,
        limit=limit,
        offset=offset,
    )


@mcp_server.tool()
async def chm_read_toc_tool(
    ctx: Context,
    max_depth: int | None = None,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read the table of contents.

    Args:
        max_depth: Max depth levels (None = unlimited).
        output_format: "markdown" (human-readable) or "json" (structured).
    """
    return chm_read_toc(_ctx(ctx).document, max_depth=max_depth, output_format=output_format)


@mcp_server.tool()
async def chm_read_page_tool(ctx: Context, path: str) -> dict[str, Any]:
    """Read a page's plain text by its archive path.

    Args:
        path: Page path, as returned by search or the table of contents.
    """
    return chm_read_page(_ctx(ctx).document, path=path)


@mcp_server.tool()
async def chm_list_pages_tool(ctx: Context) -> dict[str, Any]:
    """List every HTML page in the archive."""
    return chm_list_pages(_ctx(ctx).document)


@mcp_server.tool()
async def chm_get_topic_context_tool(
    ctx: Context,
    path: str,
    sibling_count: int = 3,
) -> dict[str, Any]:
    """Get a topic with its breadcrumbs, siblings, and children.

    Args:
        path: Target path of the topic.
        sibling_count: Siblings before/after to include.
    """
    return chm_get_topic_context(_ctx(ctx).document, path=path, sibling_count=sibling_count)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from chm_viewer.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
