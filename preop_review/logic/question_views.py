"""Assemble the question payload served for a master or an instance.

The characteristic map is built from every question in the rendering context,
so an instance explains its logic against its own copies of the questions.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from preop_review.logic.characteristics import parse_characteristics, split_answer_options
from preop_review.logic.question_records import record_to_mapping
from preop_review.logic.translation import translate_questions
from preop_review.models.question import StoredQuestion


def question_views(questions: Sequence[StoredQuestion]) -> List[Dict[str, Any]]:
    translations = translate_questions(
        [record_to_mapping(q) for q in questions],
        {q.question_id: q.enable_when for q in questions},
    )
    out: List[Dict[str, Any]] = []
    for q in questions:
        view = q.model_dump(mode="json")
        options = split_answer_options(q.answer_options)
        tokens = parse_characteristics(q.characteristic) if options else []
        view["options"] = [
            {"value": opt, "characteristic": (tokens[i] if i < len(tokens) else "") or None}
            for i, opt in enumerate(options)
        ]
        translated = translations.get(q.question_id)
        view["enable_when_summary"] = translated.summary if translated else None
        view["enable_when_translation"] = translated.model_dump(mode="json") if translated else None
        out.append(view)
    return out


__all__ = ["question_views"]
