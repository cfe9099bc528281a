"""
Logging setup for the command line.

Library modules only call logging.getLogger(__name__); the package logger
carries a NullHandler (see __init__.py). The CLI calls configure_logging()
once so diagnostics (rejected matches, fallback failures) reach stderr.
"""

from __future__ import annotations

import logging
import sys


def configure_logging(level: str | int = "WARNING") -> logging.Logger:
    logger = logging.getLogger("courseguide")

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger.setLevel(level)

    # Replace our own stream handler on repeated calls, keep the NullHandler
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
