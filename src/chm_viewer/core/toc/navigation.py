"""Tree navigation: walking, breadcrumbs, first page, flat fallback."""

from collections.abc import Iterable, Iterator

from chm_viewer.models.node import ArchiveEntry, TopicNode


def walk(forest: Iterable[TopicNode], *, depth: int = 0) -> Iterator[tuple[TopicNode, int]]:
    """Yield (node, depth) pairs in document order (pre-order)."""
    for node in forest:
        yield node, depth
        yield from walk(node.children, depth=depth + 1)


def first_target(forest: Iterable[TopicNode]) -> str | None:
    """Return the first target in document order, if any."""
    for node, _depth in walk(forest):
        if node.target is not None:
            return node.target
    return None


def find_breadcrumbs(forest: Iterable[TopicNode], target: str) -> tuple[TopicNode, ...] | None:
    """Get the chain of topics leading to the first node with this target.

    Returns nodes in order from the top level down to the matching node
    itself, or None when no node points at the target. Targets compare
    case-insensitively, since archive paths are case-insensitive.
    """
    wanted = target.lower()
    for node in forest:
        if node.target is not None and node.target.lower() == wanted:
            return (node,)
        below = find_breadcrumbs(node.children, target)
        if below is not None:
            return (node, *below)
    return None


def get_siblings(
    forest: list[TopicNode],
    target: str,
) -> tuple[tuple[TopicNode, ...], tuple[TopicNode, ...]]:
    """Get siblings before and after the node with this target.

    Returns (siblings_before, siblings_after) tuples; both empty when the
    target is not in the tree.
    """
    crumbs = find_breadcrumbs(forest, target)
    if crumbs is None:
        return (), ()
    level: tuple[TopicNode, ...] = tuple(forest) if len(crumbs) == 1 else crumbs[-2].children
    index = level.index(crumbs[-1])
    return level[:index], level[index + 1 :]


def flat_toc(entries: Iterable[ArchiveEntry]) -> list[TopicNode]:
    """Build a one-level table of contents listing every page.

    Used when an archive ships no sitemap, or one that cannot be read.
    """
    pages = sorted((e for e in entries if e.is_page), key=lambda e: e.path.casefold())
    return [TopicNode(title=e.filename, target=e.path) for e in pages]
