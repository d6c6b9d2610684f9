"""Conversions between parsed, stored and mapping views of a question.

Storage keeps options and their characteristic tokens as two pipe-separated
strings aligned by position. An option without a token keeps an empty slot so
that later options stay aligned.
"""

from __future__ import annotations

from preop_review.models.characteristics import QuestionForMapping
from preop_review.models.question import ParsedQuestion, StoredQuestion


def question_to_record(question: ParsedQuestion) -> StoredQuestion:
    if question.options:
        answer_options = "|".join(o.value for o in question.options)
        tokens = [o.characteristic or "" for o in question.options]
        characteristic = "|".join(tokens) if any(tokens) else None
    else:
        answer_options = None
        characteristic = question.characteristic
    return StoredQuestion(
        question_id=question.id,
        section=question.section,
        page=question.page,
        item_type=question.item_type,
        question_text=question.question_text,
        answer_options=answer_options,
        characteristic=characteristic,
        required=question.required,
        enable_when=question.enable_when,
        has_helper=question.has_helper,
        helper_type=question.helper_type,
        helper_name=question.helper_name,
        helper_value=question.helper_value,
    )


def record_to_mapping(record: StoredQuestion) -> QuestionForMapping:
    return QuestionForMapping(
        question_id=record.question_id,
        question_text=record.question_text,
        answer_options=record.answer_options,
        characteristic=record.characteristic,
    )


__all__ = ["question_to_record", "record_to_mapping"]
