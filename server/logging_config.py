"""Logging setup shared by the server and the `mattermost_actions` library."""

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger("mattermost_actions.server")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_QUIET_LOGGERS = ("httpx", "httpcore")


def resolve_level(name: Optional[str]) -> int:
    """Map a level name like "debug" to its number, INFO when unknown."""
    level = getattr(logging, (name or "INFO").strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> None:
    """Set the level of the adapter loggers, adding a root handler if none exists.

    A host process (uvicorn, a test runner) that already configured the root
    logger keeps its handlers; only levels are applied.
    """
    numeric_level = resolve_level(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=numeric_level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    logging.getLogger("mattermost_actions").setLevel(numeric_level)
    # httpx logs every request line at INFO, including URLs with post ids
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
