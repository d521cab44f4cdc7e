"""Logging setup shared by the CLI and the MCP server."""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send loguru output to stderr.

    stdout stays free for card listings, copied prompt text and the MCP stdio transport.
    `quiet` wins over `verbose`.
    """
    logger.remove()
    if quiet:
        level = "WARNING"
    elif verbose:
        level = "DEBUG"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
