"""Split text into normalized search tokens."""

import re

from chm_viewer.config import MIN_TOKEN_LENGTH

# Letters and digits only; underscore is a separator.
_SEPARATOR_RE = re.compile(r"[\W_]+")


def tokenize(text: str) -> list[str]:
    """Lower-case the text and split it on non-alphanumeric characters.

    Tokens shorter than MIN_TOKEN_LENGTH are dropped. Order and duplicates
    are preserved.
    """
    return [t for t in _SEPARATOR_RE.split(text.lower()) if len(t) >= MIN_TOKEN_LENGTH]
