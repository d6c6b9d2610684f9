"""Display-time types for explaining why a question is shown."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel

from preop_review.models.question import Logic


class QuestionForMapping(BaseModel):
    question_id: str
    question_text: str
    answer_options: Optional[str] = None
    characteristic: Optional[str] = None


class CharacteristicSource(BaseModel):
    question_id: str
    question_text: str
    option_text: Optional[str] = None


class TranslatedCondition(BaseModel):
    characteristic: str
    question_text: str
    option_text: Optional[str] = None
    operator: str
    value: Optional[str] = None
    readable: str
    # True when the token could not be resolved against the map
    raw: bool
    logical_op: Optional[Literal["AND", "OR"]] = None


class TranslatedEnableWhen(BaseModel):
    conditions: List[TranslatedCondition]
    logic: Logic
    summary: str


__all__ = [
    "QuestionForMapping",
    "CharacteristicSource",
    "TranslatedCondition",
    "TranslatedEnableWhen",
]
