"""Pytest configuration for test isolation.

The CLI loads ``.env`` from the current working directory and configures the
package logger once per process. Both leak across tests: a stray ``.env`` in
the checkout could change the log level, and a handler bound to one test's
captured stderr would be reused by the next.

An autouse fixture runs every test from its own temporary directory with a
quiet log level and detaches the package handlers afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from sponsor_recon.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_cwd_and_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    workdir = tmp_path / "cwd"
    workdir.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(workdir)
    # Keep INFO summaries out of captured CLI output.
    monkeypatch.setenv("SPONSOR_RECON_LOG_LEVEL", "WARNING")
    yield
    reset_logging()
