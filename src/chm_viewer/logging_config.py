"""Logging configuration for the CHM viewer."""

import sys

from loguru import logger

from chm_viewer.config import LOG_FORMAT, LOG_LEVEL


def configure_logging(*, verbose: bool = False) -> None:
    """Send loguru output to stderr, at DEBUG when verbose.

    stdout is left to command output and the MCP stdio transport.
    """
    logger.remove()
    level = "DEBUG" if verbose else LOG_LEVEL
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
