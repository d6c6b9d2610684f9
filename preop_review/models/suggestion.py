"""Pydantic models for trust suggestions and their comment threads.

Trust users propose changes to single questions of their instance. The master
owner triages each suggestion by status and either side may comment on it.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

SuggestionStatus = Literal["pending", "approved", "rejected"]
AuthorType = Literal["admin", "trust_user"]

SUGGESTION_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        return value.strip() or None
    return value


OptionalEmail = Annotated[
    Optional[Annotated[str, Field(max_length=255, pattern=EMAIL_PATTERN)]],
    BeforeValidator(_blank_to_none),
]


class SuggestionCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    question_id: str = Field(min_length=1, max_length=255)
    submitter_name: str = Field(min_length=1, max_length=100)
    submitter_email: OptionalEmail = None
    suggestion_text: str = Field(min_length=1, max_length=2000)
    reason: str = Field(min_length=1, max_length=1000)


class SuggestionUpdate(BaseModel):
    """Triage changes; only fields present in the request body are applied.

    A blank ``response_message`` clears the stored message.
    """

    status: Optional[SuggestionStatus] = None
    response_message: Annotated[
        Optional[Annotated[str, Field(max_length=1000)]],
        BeforeValidator(_blank_to_none),
    ] = None


class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    author_type: AuthorType
    author_name: str = Field(min_length=1, max_length=100)
    author_email: OptionalEmail = None
    message: str = Field(min_length=1, max_length=2000)


class SuggestedQuestion(BaseModel):
    question_id: str
    section: Optional[str] = None
    question_text: Optional[str] = None


class Suggestion(BaseModel):
    suggestion_id: str
    # Owning instance; kept out of responses
    instance_id: Optional[str] = Field(default=None, exclude=True)
    question: SuggestedQuestion
    submitter_name: str
    submitter_email: Optional[str] = None
    suggestion_text: str
    reason: str
    status: SuggestionStatus
    response_message: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None
    comment_count: int = 0


class SuggestionComment(BaseModel):
    comment_id: str
    suggestion_id: str
    author_type: AuthorType
    author_name: str
    author_email: Optional[str] = None
    message: str
    created_at: str


class SuggestionCounts(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class TrustSuggestionSummary(BaseModel):
    trust_name: str
    trust_link_id: str
    created_at: str
    suggestion_counts: SuggestionCounts


class SuggestionList(BaseModel):
    trust_name: str
    total_count: int
    suggestions: List[Suggestion]


class CommentList(BaseModel):
    total_count: int
    comments: List[SuggestionComment]


class MasterSuggestionSummary(BaseModel):
    master_name: str
    trusts: List[TrustSuggestionSummary]


__all__ = [
    "SuggestionStatus",
    "AuthorType",
    "SUGGESTION_STATUSES",
    "EMAIL_PATTERN",
    "SuggestionCreate",
    "SuggestionUpdate",
    "CommentCreate",
    "SuggestedQuestion",
    "Suggestion",
    "SuggestionComment",
    "SuggestionCounts",
    "TrustSuggestionSummary",
    "SuggestionList",
    "CommentList",
    "MasterSuggestionSummary",
]
