"""Build a topic tree from sitemap tag events."""

from dataclasses import replace

from loguru import logger

from chm_viewer.core.encoding import decode_text
from chm_viewer.core.toc.scanner import Tag, decode_entities, iter_tags, parse_attributes
from chm_viewer.errors import InvalidData, TOCParseFailed
from chm_viewer.models.node import TopicNode


def _rooted(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


def _prune(nodes: list[TopicNode]) -> list[TopicNode]:
    """Drop nodes that end up with neither a target nor children."""
    result: list[TopicNode] = []
    for node in nodes:
        if node.children:
            node = replace(node, children=tuple(_prune(list(node.children))))
        if not node.is_empty:
            result.append(node)
    return result


class TocBuilder:
    """State machine turning tag events into a forest of TopicNodes.

    The stack holds one sibling list per open ``<UL>``; the bottom list is the
    forest. Closing a list attaches it as the children of the last node in
    the enclosing list. Unbalanced markup never loses nodes: lists without a
    parent node, and lists still open at the end, are spliced into the
    enclosing list.
    """

    def __init__(self) -> None:
        self._stack: list[list[TopicNode]] = [[]]
        self._in_object = False
        self._name: str | None = None
        self._local: str | None = None

    def feed(self, tag: Tag) -> None:
        """Process one tag event."""
        name = tag.name
        if name == "ul":
            self._stack.append([])
        elif name == "/ul":
            self._close_list()
        elif name == "object":
            self._in_object = True
            self._name = None
            self._local = None
        elif name == "/object":
            if self._in_object and self._name is not None:
                target = _rooted(self._local) if self._local is not None else None
                self._stack[-1].append(TopicNode(title=self._name, target=target))
            self._in_object = False
        elif name == "param" and self._in_object:
            attrs = parse_attributes(tag.raw)
            param_name = attrs.get("name", "").lower()
            value = attrs.get("value", "")
            if param_name == "name":
                self._name = decode_entities(value)
            elif param_name == "local":
                self._local = value

    def _close_list(self) -> None:
        if len(self._stack) == 1:
            # Stray </UL> with nothing open.
            return
        children = self._stack.pop()
        siblings = self._stack[-1]
        if siblings:
            parent = siblings.pop()
            siblings.append(replace(parent, children=parent.children + tuple(children)))
        else:
            siblings.extend(children)

    def finish(self) -> list[TopicNode]:
        """Flatten any unclosed lists and return the forest."""
        while len(self._stack) > 1:
            children = self._stack.pop()
            self._stack[-1].extend(children)
        return _prune(self._stack[0])


def parse_toc_html(markup: str) -> list[TopicNode]:
    """Parse sitemap markup into a forest. Never raises."""
    builder = TocBuilder()
    for tag in iter_tags(markup):
        builder.feed(tag)
    return builder.finish()


def parse_toc(data: bytes) -> list[TopicNode]:
    """Decode and parse raw .hhc bytes.

    Raises:
        TOCParseFailed: The bytes are not text in any supported encoding.
    """
    try:
        markup = decode_text(data)
    except InvalidData as e:
        logger.debug("Table of contents is not decodable: {}", e)
        raise TOCParseFailed from e
    forest = parse_toc_html(markup)
    logger.debug("Parsed table of contents: {} top-level topics", len(forest))
    return forest
