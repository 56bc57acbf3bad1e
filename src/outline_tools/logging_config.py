"""Logging configuration for the outline-tools CLI."""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send loguru output to stderr at DEBUG, INFO or WARNING level."""
    logger.remove()
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
