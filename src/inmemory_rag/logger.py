"""Logger factory with a shared format.

Usage:
    from inmemory_rag.logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys

from inmemory_rag.config import settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Return a named logger writing to stderr.

    Args:
        name: Usually ``__name__`` of the calling module.
        level: Explicit level; defaults to ``settings.log_level``.
    """
    resolved_level = level if level is not None else _resolve_level(settings.log_level)
    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers if the logger already exists
    if not logger.handlers:
        logger.setLevel(resolved_level)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
