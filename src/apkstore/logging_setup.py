"""
Logging setup for the web process.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def _convert_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Attach a single stdout handler to the root logger.

    Calling it again only adjusts the level.

    Args:
        level: Logging level name or constant.
    """
    global _configured

    root = logging.getLogger()
    root.setLevel(_convert_level(level))

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # SQL echo stays off unless explicitly requested
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
