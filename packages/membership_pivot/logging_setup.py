"""Logging configuration for the ``membership_pivot`` package.

Entry points (the CLI, or a host application embedding the report engine) call
``configure_logging(...)`` once; every library module acquires its logger with
``get_logger("membership_pivot.<module>")`` and never attaches handlers.

Report builds log at three levels: INFO for per-stage counts (categories
discovered, rows materialized), DEBUG for the compiled aggregate SQL, WARNING
for per-field money formatting fallbacks.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "membership_pivot"
_LEVEL_ENV = "MEMBERSHIP_PIVOT_LOG_LEVEL"
_DEFAULT_FMT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(_LEVEL_ENV)
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    force: bool = False,
) -> None:
    """Attach a single ``StreamHandler`` to the package logger.

    Parameters
    ----------
    level:
        ``int`` or level name. ``None`` reads ``MEMBERSHIP_PIVOT_LOG_LEVEL`` and
        falls back to ``INFO``.
    fmt:
        Optional format string for the handler.
    stream:
        Destination stream; defaults to ``sys.stderr`` at call time.
    force:
        Replace a handler installed by an earlier call instead of returning
        early. Used when the CLI receives an explicit ``--log-level``.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        if not force:
            return
        logger.removeHandler(_handler)
        _handler = None

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FMT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    _handler = handler


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)``, keeping the package logger quiet until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
