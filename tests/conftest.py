"""Pytest configuration for test isolation.

The CLI and ``open_store`` read ``DATABASE_URL`` and ``PROFIT_LEDGER_DATA_DIR``
from the environment (and from a ``.env`` in the working directory). A value
leaking in from the developer's shell would point tests at a real ledger, so
every test runs with those variables cleared and the working directory moved
to its own temporary directory.

``configure_logging`` also leaves process-wide state behind (a handler and
``propagate = False`` on the package logger), which would hide records from
``caplog`` in later tests; it is undone after each test.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from db.client import dispose_engines
from profit_ledger import logging_setup


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("DATABASE_URL", "PROFIT_LEDGER_DATA_DIR", "PROFIT_LEDGER_LOG_LEVEL"):
        # Set first so the delete is recorded and a value loaded from .env
        # during the test is removed again on teardown.
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    workdir = tmp_path / "cwd"
    workdir.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    pkg_logger = logging.getLogger("profit_ledger")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
    logging_setup._handler = None


@pytest.fixture(autouse=True)
def _dispose_db_engines():
    yield
    dispose_engines()
