"""Database bootstrap utilities for the questionnaire review service.

Exposes engine construction and the SQL migrations runner that applies files
from the package `migrations/` directory. Repositories use SQLAlchemy Core
text queries; no ORM models leak into route handlers.
"""

from preop_review.db.base import get_engine, reset_engine
from preop_review.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "reset_engine",
    "apply_migrations",
]
