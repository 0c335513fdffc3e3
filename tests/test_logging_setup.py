from __future__ import annotations

import io
import logging

import pytest

from sponsor_recon.logging_setup import configure_logging, get_logger


def test_library_logging_is_silent_until_configured():
    get_logger("sponsor_recon.merge")
    handlers = logging.getLogger("sponsor_recon").handlers
    assert handlers and all(isinstance(h, logging.NullHandler) for h in handlers)


def test_configure_logging_once_with_env_level(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SPONSOR_RECON_LOG_LEVEL", "debug")
    stream = io.StringIO()
    configure_logging(stream=stream, fmt="%(levelname)s %(message)s")
    configure_logging(level="ERROR", stream=io.StringIO())

    get_logger("sponsor_recon.reconcile").debug("hello %d", 1)
    assert stream.getvalue() == "DEBUG hello 1\n"
    pkg = logging.getLogger("sponsor_recon")
    assert pkg.level == logging.DEBUG
    assert len(pkg.handlers) == 1
    assert pkg.propagate is False
