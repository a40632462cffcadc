"""Logging for the ``ledger_normalizer`` package.

Modules log through ``get_logger("ledger_normalizer.<module>")`` and stay
silent (a ``NullHandler`` on the package logger) until the CLI calls
:func:`configure_logging`, which sends package records to stderr at the
level named by ``LEDGER_NORMALIZER_LOG_LEVEL``.
"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER = "ledger_normalizer"
LOG_LEVEL_ENV = "LEDGER_NORMALIZER_LOG_LEVEL"
STDERR_HANDLER_NAME = "ledger_normalizer.stderr"
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _parse_level(level: int | str | None) -> int:
    """Level from an int, a name or number string, or the environment.

    Unknown names fall back to ``INFO``.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelNamesMapping().get(name)
    return logging.INFO if value is None else value


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Route package records to stderr and return the package logger.

    Only one stderr handler is ever attached; later calls just update the
    level.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = _parse_level(level)

    handler = next((h for h in logger.handlers if h.get_name() == STDERR_HANDLER_NAME), None)
    if handler is None:
        for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
            logger.removeHandler(h)
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(STDERR_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        # The root logger would print the same record again.
        logger.propagate = False

    handler.setLevel(resolved)
    logger.setLevel(resolved)
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger"]
