"""Render topic trees as markdown."""

import io
from collections.abc import Iterable

from chm_viewer.core.toc.navigation import walk
from chm_viewer.models.node import TopicNode


def render_toc_as_markdown(
    forest: Iterable[TopicNode],
    *,
    max_depth: int | None = None,
    include_targets: bool = True,
) -> str:
    """Render a forest as an indented markdown bullet list.

    Args:
        forest: Top-level topics.
        max_depth: Max levels to include, 1 = top level only (None = unlimited).
        include_targets: Whether to append each topic's target path.

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    out = io.StringIO()
    for node, depth in walk(forest):
        if max_depth is not None and depth >= max_depth:
            continue
        indent = "    " * depth
        line = f"{indent}- {node.title}"
        if include_targets and node.target:
            line += f" ({node.target})"
        out.write(line + "\n")

        # Truncation indicator when children are cut off by max_depth
        if max_depth is not None and depth == max_depth - 1 and node.children:
            count = len(node.children)
            noun = "child" if count == 1 else "children"
            out.write(f"{indent}    - ... ({count} more {noun})\n")

    return out.getvalue()


def toc_to_dicts(forest: Iterable[TopicNode], *, max_depth: int | None = None) -> list[dict]:
    """Convert a forest to JSON-ready dicts, truncating below max_depth.

    Nodes at the depth limit keep a child_count but lose their children key.
    """
    result = []
    for node in forest:
        entry: dict = {"title": node.title, "target": node.target, "child_count": len(node.children)}
        if max_depth is None or max_depth > 1:
            next_depth = None if max_depth is None else max_depth - 1
            entry["children"] = toc_to_dicts(node.children, max_depth=next_depth)
        result.append(entry)
    return result
