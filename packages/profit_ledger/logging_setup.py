"""Centralized logging configuration for the ``profit_ledger`` package.

Two public helpers:

- ``configure_logging(...)``: attach one ``StreamHandler`` to the package
  logger (``"profit_ledger"``). Entrypoints (the CLI, a host app) call it at
  startup; repeated calls are no-ops unless ``force=True``.
- ``get_logger(name)``: return a child logger, installing a ``NullHandler`` on
  the package logger while nothing is configured so library use stays silent.

Library modules never attach handlers of their own; they call
``get_logger("profit_ledger.<module>")`` and leave output to the entrypoint.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "profit_ledger"
LOG_LEVEL_ENV = "PROFIT_LEDGER_LOG_LEVEL"
_DEFAULT_FMT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _coerce_level(value: int | str) -> int | None:
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = getattr(logging, name, None)
    return numeric if isinstance(numeric, int) else None


def resolve_level(level: int | str | None = None) -> int:
    """Return the effective level: explicit value, then env, then ``INFO``."""

    if level is not None:
        resolved = _coerce_level(level)
        if resolved is not None:
            return resolved
    env_val = os.getenv(LOG_LEVEL_ENV)
    if env_val:
        resolved = _coerce_level(env_val)
        if resolved is not None:
            return resolved
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    force: bool = False,
) -> logging.Logger:
    """Configure the package logger once and return it.

    Parameters
    ----------
    level:
        ``int`` or level name. ``None`` falls back to ``PROFIT_LEDGER_LOG_LEVEL``
        and then ``logging.INFO``.
    fmt:
        Format string; defaults to ``"%(asctime)s %(name)s %(levelname)s
        %(message)s"``.
    stream:
        Target stream. Resolved to the *current* ``sys.stderr`` when omitted.
    force:
        Replace a handler installed by an earlier call.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None and not force:
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or h is _handler:
            logger.removeHandler(h)

    effective = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(effective)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FMT))

    logger.setLevel(effective)
    logger.addHandler(handler)
    # Avoid double emission via the root logger.
    logger.propagate = False

    _handler = handler
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name with library-safe defaults."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
