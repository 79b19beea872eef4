"""Logging for the ``shop_ledger`` package.

Every module logs through ``get_logger("shop_ledger.<module>")`` and never
attaches handlers itself. Output is switched on by an entry point (the CLI
root callback) through :func:`configure_logging`, which installs one
``StreamHandler`` on the ``"shop_ledger"`` logger. Until then the package
logger only carries a ``NullHandler``, so embedding the reporting engine in
another program is silent by default.

Environment
-----------
- ``SHOP_LEDGER_LOG_LEVEL``: level name or number (default ``INFO``).
- ``SHOP_LEDGER_LOG_FORMAT``: ``logging.Formatter`` format string.

Messages follow an ``area:event key=value`` shape, e.g.
``ingest:malformed_date raw='x' coerced_to=2024-06-01``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "shop_ledger"
LEVEL_ENV = "SHOP_LEDGER_LOG_LEVEL"
FORMAT_ENV = "SHOP_LEDGER_LOG_FORMAT"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or ``$SHOP_LEDGER_LOG_LEVEL``) into a numeric level.

    Unknown names fall back to ``INFO``.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send package log records to ``stream`` (``sys.stderr`` at call time).

    Only the first call has an effect; later calls are no-ops until
    :func:`reset_logging`.
    """

    global _handler
    if _handler is not None:
        return

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)

    numeric = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt or os.getenv(FORMAT_ENV) or DEFAULT_FORMAT))

    logger.setLevel(numeric)
    logger.addHandler(handler)
    # Records stop here; the root logger never sees them twice.
    logger.propagate = False
    _handler = handler


def reset_logging() -> None:
    """Detach the handler installed by :func:`configure_logging`."""

    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "DEFAULT_FORMAT",
    "configure_logging",
    "get_logger",
    "reset_logging",
    "resolve_level",
]
