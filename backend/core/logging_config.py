"""Logging setup for the API process."""

import logging

from backend.core import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str | None = None) -> None:
    """Attach a stream handler to the root logger unless one is already configured."""
    resolved = logging.getLevelName((level or config.LOG_LEVEL).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    root.setLevel(resolved)

    # Prevent duplicate handlers
    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
