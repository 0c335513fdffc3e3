"""Logging for the ``sponsor_recon`` package.

All modules log through children of the ``"sponsor_recon"`` logger obtained
with :func:`get_logger`. Nothing is emitted until an entrypoint calls
:func:`configure_logging`; the CLI does so in its root callback.

Handlers always write to stderr: stdout carries the CSV result and must stay
clean enough to be redirected into a file.

The level is taken from the ``level`` argument, then from the
``SPONSOR_RECON_LOG_LEVEL`` environment variable (which may come from a local
``.env``), and falls back to ``INFO``. At ``INFO`` each command logs a one-line
summary per stage; ``DEBUG`` adds one line per input file and per ledger row.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "sponsor_recon"
_LEVEL_ENV_VAR = "SPONSOR_RECON_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def _parse_level(value: int | str) -> int:
    """Turn a level name or number into a ``logging`` level.

    Unknown names resolve to ``INFO`` rather than failing, since a typo in
    ``.env`` should not stop a reconciliation run.
    """

    if isinstance(value, int):
        return value
    text = value.strip().upper()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text)
    return level if isinstance(level, int) else logging.INFO


def _resolve_level(level: int | str | None) -> int:
    if level is not None:
        return _parse_level(level)
    from_env = os.getenv(_LEVEL_ENV_VAR)
    return _parse_level(from_env) if from_env else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Attach one ``StreamHandler`` to the package logger.

    Only the first call has an effect; later calls return immediately so
    that library code can call this defensively without stacking handlers.

    Parameters
    ----------
    level:
        Level as ``int`` or name (``"DEBUG"``). ``None`` reads
        ``SPONSOR_RECON_LOG_LEVEL`` and falls back to ``INFO``.
    fmt:
        Format string for the handler.
    stream:
        Target stream; ``sys.stderr`` as it is at call time when omitted.
    """

    global _configured
    if _configured:
        return

    resolved = _resolve_level(level)
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(pkg_logger.handlers):
        if isinstance(h, logging.NullHandler):
            pkg_logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    handler.setLevel(resolved)
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    # The host application's root handlers would print every record twice.
    pkg_logger.propagate = False

    _configured = True


def reset_logging() -> None:
    """Undo :func:`configure_logging` so the next call configures afresh."""

    global _configured
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True
    _configured = False


def get_logger(name: str) -> logging.Logger:
    """Return the logger ``name``, keeping the package silent until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
