"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type, a helper to raise problem responses from
route handlers, and handler callables registered by the app factory.
"""

from __future__ import annotations

from typing import Any, Optional
import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse

from preop_review.http.request_id import current_request_id

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem(status: int, title: str, detail: Optional[str] = None, **extra: Any) -> HTTPException:
    """Build an HTTPException whose detail is a problem+json document."""
    body: dict[str, Any] = {"title": title, "status": status}
    if detail is not None:
        body["detail"] = detail
    body.update(extra)
    return HTTPException(status_code=status, detail=body)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        body = dict(exc.detail)
    else:
        body = {"title": "Error", "status": status_code, "detail": str(exc.detail or "")}
    body.setdefault("instance", str(request.url.path))
    body.setdefault("request_id", current_request_id())
    return JSONResponse(
        body,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=dict(exc.headers) if exc.headers else None,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem_body = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "errors": [
            {"loc": list(err.get("loc", ())), "msg": str(err.get("msg", "")), "type": str(err.get("type", ""))}
            for err in exc.errors()
        ],
        "instance": str(request.url.path),
        "request_id": current_request_id(),
    }
    return JSONResponse(problem_body, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error", extra={"path": str(request.url.path)}, exc_info=exc)
    return JSONResponse(
        {"title": "Internal Server Error", "status": 500, "request_id": current_request_id()},
        status_code=500,
        media_type=PROBLEM_MEDIA_TYPE,
    )


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
