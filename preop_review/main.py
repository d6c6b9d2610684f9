from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from preop_review.db.base import get_engine
from preop_review.db.migrations_runner import apply_migrations
from preop_review.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from preop_review.http.request_id import RequestIdMiddleware
from preop_review.logging_setup import configure_logging
from preop_review.routes import api_router

logger = logging.getLogger(__name__)


def _auto_apply_migrations() -> bool:
    return (os.getenv("AUTO_APPLY_MIGRATIONS") or "1").strip().lower() not in {"0", "false", "no"}


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    if _auto_apply_migrations():
        applied = apply_migrations(get_engine())
        logger.info("startup_migrations", extra={"applied": applied})
    yield


def health_check() -> dict:
    try:
        with get_engine().connect() as conn:
            conn.execute(sql_text("SELECT 1"))
        return {"status": "ok", "db": True}
    except SQLAlchemyError as e:
        logger.error("Health DB check failed", exc_info=True)
        return {"status": "degraded", "db": False, "reason": type(e).__name__}


def create_app() -> FastAPI:
    # Configure global logging before app instantiation so all modules emit
    configure_logging()
    app = FastAPI(
        title="MyPreOp Questionnaire Review",
        version="1.0.0",
        lifespan=_lifespan,
    )
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)
    app.include_router(api_router)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"], summary="Liveness and DB probe")
    return app
