"""Functional test bootstrap for the questionnaire review service.

Functional tests share one file-backed SQLite database for the process. The
environment is pointed at it before the app is imported, and the package
migrations are applied once at session start so the schema exists before
tests create the FastAPI app via TestClient.
"""

from __future__ import annotations

import os
import pathlib
import tempfile

import pytest

from sample_data import SAMPLE_ROWS, make_csv

_DB_FILE = pathlib.Path(tempfile.gettempdir()) / f"preop_functional_{os.getpid()}.db"
if _DB_FILE.exists():
    _DB_FILE.unlink()

os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
# The session fixture applies migrations; app startup must not race it
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap():
    """Session-level bootstrap: apply migrations once for the shared DB."""
    from preop_review.db.base import get_engine, reset_engine
    from preop_review.db.migrations_runner import apply_migrations

    apply_migrations(get_engine(os.environ["TEST_DATABASE_URL"]))
    yield
    reset_engine()
    try:
        _DB_FILE.unlink()
    except OSError:
        pass


@pytest.fixture
def sample_csv() -> bytes:
    return make_csv(SAMPLE_ROWS)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from preop_review import create_app

    with TestClient(create_app()) as c:
        yield c
