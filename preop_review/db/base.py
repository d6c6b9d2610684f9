"""SQLAlchemy engine management.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. Repositories issue SQL through `text()` against the
shared Engine; no declarative models are defined here.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from preop_review.config import load_config

logger = logging.getLogger(__name__)


# Module-level cached Engine so repositories share one pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None
# DSN from config files, read at most once until reset_engine()
_CONFIGURED_DSN: str | None = None


def _default_dsn() -> str:
    global _CONFIGURED_DSN
    env_dsn = os.environ.get("TEST_DATABASE_URL") or os.environ.get("DATABASE_URL")
    if env_dsn:
        return env_dsn
    if _CONFIGURED_DSN is None:
        _CONFIGURED_DSN = load_config().database.dsn
    return _CONFIGURED_DSN


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    The URL defaults to ``TEST_DATABASE_URL`` or ``DATABASE_URL``, then to the
    DSN from the config files, which are read once. A different URL replaces
    the cached Engine. In-memory SQLite uses a StaticPool so every checkout
    sees the same database.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _default_dsn()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in resolved_url:
                kwargs["poolclass"] = StaticPool
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(resolved_url, **kwargs)
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created", extra={"dialect": _ENGINE.dialect.name})

    return _ENGINE


def reset_engine() -> None:
    """Dispose the cached Engine and forget the configured DSN."""
    global _ENGINE, _ENGINE_URL, _CONFIGURED_DSN
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None
    _CONFIGURED_DSN = None
