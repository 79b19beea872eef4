"""Pytest configuration for test isolation.

Local storage persists the ledger in a SQLite file (``./.ledger/ledger.db`` by
default) and the remote endpoint, the policy file and the log level are read
from the environment. A developer's ``.env`` or a previous test could leak into
a run, so every test gets its own database file and a clean environment via an
autouse fixture.
"""

# ruff: noqa: E402, I001
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir and the db lib are importable
_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

from db.client import dispose_engines
from shop_ledger.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_ledger_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point storage at a per-test SQLite file and clear remote/policy settings."""

    db_file = tmp_path / "ledger" / "ledger.db"
    monkeypatch.setenv("LEDGER_DATABASE_URL", f"sqlite+pysqlite:///{os.fspath(db_file)}")
    for name in (
        "LEDGER_REMOTE_URL",
        "LEDGER_REMOTE_TIMEOUT",
        "LEDGER_POLICY_FILE",
        "SHOP_LEDGER_LOG_LEVEL",
        "SHOP_LEDGER_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    # CLI tests run from here so load_dotenv() never picks up a real .env
    monkeypatch.chdir(tmp_path)
    yield
    dispose_engines()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo ``configure_logging`` so each CLI invocation binds a fresh stream."""

    yield
    reset_logging()
