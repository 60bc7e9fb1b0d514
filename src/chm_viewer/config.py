"""Configuration constants for chm-viewer."""

import os
from pathlib import Path

# Text decoding: strict UTF-8 first, then the Western code page used by
# the legacy help compiler.
PRIMARY_ENCODING: str = "utf-8"
FALLBACK_ENCODING: str = "cp1252"

# Word tokenizer: shorter tokens are dropped.
MIN_TOKEN_LENGTH: int = 2

# Snippet window around the first match.
SNIPPET_CONTEXT_BEFORE: int = 40
SNIPPET_LENGTH: int = 120
SNIPPET_ELLIPSIS: str = "..."

# Interactive search debounce.
SEARCH_DEBOUNCE_SECONDS: float = 0.2

# Pages tried in order when the archive does not name a default topic.
DEFAULT_PAGE_CANDIDATES: list[str] = [
    "/index.htm",
    "/index.html",
    "/default.htm",
    "/default.html",
]

# Internal metadata file holding the default topic.
SYSTEM_FILE_PATH: str = "/#SYSTEM"

# Environment variable naming the extracted archive served by the MCP server.
ARCHIVE_DIR_ENV: str = "CHM_VIEWER_ARCHIVE"

# Logging. The level applies unless --verbose is passed.
LOG_LEVEL: str = os.environ.get("CHM_VIEWER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = "{level.icon} {message}"


def resolve_archive_directory() -> Path | None:
    """Return the archive directory from the environment, if set."""
    value = os.environ.get(ARCHIVE_DIR_ENV)
    if not value:
        return None
    return Path(value).expanduser()
