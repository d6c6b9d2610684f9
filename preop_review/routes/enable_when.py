"""EnableWhen helper endpoint for authoring tools."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from preop_review.logic.enable_when import has_mixed_connectives, parse_enable_when
from preop_review.models.question import EnableWhen


router = APIRouter()


class ParseRequest(BaseModel):
    expression: str = ""


class ParseResult(BaseModel):
    enable_when: Optional[EnableWhen] = None
    # OR wins when both connectives appear; callers should surface this
    mixed_connectives: bool = False


@router.post(
    "/api/v1/enable-when/parse",
    summary="Parse an EnableWhen expression",
    operation_id="parseEnableWhen",
    tags=["EnableWhen"],
    response_model=ParseResult,
)
def parse_expression(payload: ParseRequest):
    return ParseResult(
        enable_when=parse_enable_when(payload.expression),
        mixed_connectives=has_mixed_connectives(payload.expression),
    )


__all__ = ["router"]
