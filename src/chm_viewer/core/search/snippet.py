"""Build short excerpts around query matches."""

import re

from chm_viewer.config import SNIPPET_CONTEXT_BEFORE, SNIPPET_ELLIPSIS, SNIPPET_LENGTH


def make_snippet(text: str, query: str) -> str:
    """Return an excerpt of text around the first occurrence of query.

    The whole query is matched case-insensitively as a substring. When it is
    not found (the page matched on word prefixes only), the start of the
    text is returned without ellipses.
    """
    needle = query.strip()
    match = re.search(re.escape(needle), text, re.IGNORECASE) if needle else None
    if match is None:
        return text[:SNIPPET_LENGTH]
    index = match.start()

    start = max(0, index - SNIPPET_CONTEXT_BEFORE)
    end = min(len(text), start + SNIPPET_LENGTH)
    snippet = text[start:end]
    if start > 0:
        snippet = SNIPPET_ELLIPSIS + snippet
    if end < len(text):
        snippet = snippet + SNIPPET_ELLIPSIS
    return snippet
