"""Logging setup for relcat runs."""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT = "relcat"
_CONSOLE_FORMAT = "[relcat] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``relcat.<name>``, or the package logger when no name is given."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def _level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Send relcat log records to stderr and, optionally, to ``log_file``.

    ``verbose`` wins over ``quiet``. Calling this again replaces the handlers
    installed by the previous call.
    """
    level = _level(verbose, quiet)
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    logger.propagate = False

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT)
        )
    return logger


__all__ = ["configure_logging", "get_logger"]
