"""Pytest configuration for test isolation.

``db.client`` keeps one process-wide engine and refuses to switch URLs, and
``membership_pivot.settings`` reads ``DATABASE_URL``/``MP_*`` from the
environment. To keep tests hermetic, every test starts with a clean
environment and a fresh engine, and package logging is restored afterwards
(the CLI callback installs a handler bound to the runner's stderr).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import get_session, reset_engine, session_scope
from sqlalchemy.orm import Session

from membership_pivot import logging_setup
from tests.helpers.db import StoreSeeder, bootstrap_sqlite_db

_ENV_PREFIXES = ("MP_", "MEMBERSHIP_PIVOT_")


@pytest.fixture(autouse=True)
def _isolate_env_and_engine(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)

    pkg_logger = logging.getLogger("membership_pivot")
    saved = (list(pkg_logger.handlers), pkg_logger.level, pkg_logger.propagate)

    yield

    reset_engine()
    pkg_logger.handlers[:] = saved[0]
    pkg_logger.setLevel(saved[1])
    pkg_logger.propagate = saved[2]
    logging_setup._handler = None


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "crm.sqlite")


@pytest.fixture
def session(database_url: str) -> Iterator[Session]:
    s = get_session(database_url=database_url)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def gold_store(database_url: str) -> dict[str, int]:
    """Two memberships: A has one Gold line of 100, B has no lines at all."""

    with session_scope(database_url=database_url) as s:
        seed = StoreSeeder(s)
        alice = seed.contact("Alice Able")
        bob = seed.contact("Bob Baker")
        a = seed.membership(alice, status_id=1)
        b = seed.membership(bob, status_id=2)
        gold = seed.option("Gold", id=11)
        seed.line(a, gold, "100")
    return {"a": a, "b": b, "gold": gold}
