"""Tag scanning for sitemap markup (.hhc files).

Sitemap files are rarely well-formed: closing tags are missing, entities are
left unescaped, and attribute quoting varies. The scanner does not try to
build a DOM; it yields one event per ``<...>`` span and leaves the meaning of
each tag to the tree builder.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

_ATTRIBUTE_RE = re.compile(r'(\w+)\s*=\s*"([^"]*)"')

_ENTITIES: dict[str, str] = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&nbsp;": " ",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES), re.IGNORECASE)


@dataclass(frozen=True)
class Tag:
    """A single tag event: the raw text between ``<`` and ``>``."""

    raw: str
    name: str


def iter_tags(markup: str) -> Iterator[Tag]:
    """Yield tag events in document order.

    Text outside tags is skipped. An unterminated tag ends the stream.
    """
    pos = 0
    while True:
        start = markup.find("<", pos)
        if start == -1:
            return
        end = markup.find(">", start + 1)
        if end == -1:
            return
        pos = end + 1

        raw = markup[start + 1 : end].strip()
        if not raw:
            continue
        yield Tag(raw=raw, name=raw.split(None, 1)[0].lower())


def parse_attributes(raw: str) -> dict[str, str]:
    """Extract double-quoted ``key="value"`` pairs from a tag.

    Keys are lower-cased; values are returned untouched. Attributes that do
    not match the pattern are omitted.
    """
    return {m.group(1).lower(): m.group(2) for m in _ATTRIBUTE_RE.finditer(raw)}


def decode_entities(text: str) -> str:
    """Decode the common HTML entities in a single pass."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0).lower()], text)
