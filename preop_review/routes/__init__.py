"""APIRouter registration for the questionnaire review service."""

from __future__ import annotations

from fastapi import APIRouter

from preop_review.routes.enable_when import router as enable_when_router
from preop_review.routes.instances import router as instances_router
from preop_review.routes.masters import router as masters_router
from preop_review.routes.suggestions import router as suggestions_router

api_router = APIRouter()
api_router.include_router(masters_router)
api_router.include_router(instances_router)
api_router.include_router(suggestions_router)
api_router.include_router(enable_when_router)

__all__ = ["api_router"]
