"""Logging configuration for the storefront command line.

Library modules only create ``logging.getLogger(__name__)`` loggers;
handlers and levels are set here, once, by the entry point.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: int = logging.WARNING) -> None:
    """Send log records to stderr so command output on stdout stays clean."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
