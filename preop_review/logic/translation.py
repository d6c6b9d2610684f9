"""Translate EnableWhen conditions into human-readable explanations.

Phrasing is table driven and must stay verbatim: the UI and the tests match on
these strings. Unresolvable tokens are not an error; they are rendered as the
raw token and flagged ``raw=True`` so callers can style them differently.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional

from preop_review.logic.characteristics import build_characteristic_map
from preop_review.models.characteristics import (
    CharacteristicSource,
    QuestionForMapping,
    TranslatedCondition,
    TranslatedEnableWhen,
)
from preop_review.models.question import EnableWhen, EnableWhenCondition

logger = logging.getLogger(__name__)

CharacteristicMap = Mapping[str, CharacteristicSource]


def operator_text(operator: str, value: Optional[str] = None) -> str:
    if operator == "=":
        if value == "true":
            return "is answered"
        if value == "false":
            return "is not answered"
        return f'equals "{value or ""}"'
    if operator == "!=":
        return f'does not equal "{value or ""}"'
    if operator == "<":
        return f"is less than {value or ''}"
    if operator == ">":
        return f"is greater than {value or ''}"
    if operator == "<=":
        return f"is at most {value or ''}"
    if operator == ">=":
        return f"is at least {value or ''}"
    if operator == "exists":
        if not value or value == "null":
            return "has no value"
        return "has a value"
    return f"{operator} {value or ''}"


def translate_condition(
    condition: EnableWhenCondition,
    characteristic_map: CharacteristicMap,
    logical_op: Optional[str] = None,
) -> TranslatedCondition:
    source = characteristic_map.get(condition.characteristic)
    phrase = operator_text(condition.operator, condition.value)

    if source is None:
        return TranslatedCondition(
            characteristic=condition.characteristic,
            question_text=condition.characteristic,
            operator=condition.operator,
            value=condition.value,
            readable=f"{condition.characteristic} {phrase}",
            raw=True,
            logical_op=logical_op,
        )

    if source.option_text:
        if condition.operator == "=" and condition.value == "true":
            readable = f'"{source.question_text}" is answered "{source.option_text}"'
        elif condition.operator == "=" and condition.value == "false":
            readable = f'"{source.question_text}" is not "{source.option_text}"'
        else:
            readable = f'"{source.question_text}" → "{source.option_text}" {phrase}'
    else:
        readable = f'"{source.question_text}" {phrase}'

    return TranslatedCondition(
        characteristic=condition.characteristic,
        question_text=source.question_text,
        option_text=source.option_text,
        operator=condition.operator,
        value=condition.value,
        readable=readable,
        raw=False,
        logical_op=logical_op,
    )


def translate_enable_when(enable_when: EnableWhen, characteristic_map: CharacteristicMap) -> TranslatedEnableWhen:
    """Translate every condition and join them into a ``Shown when:`` summary."""
    last = len(enable_when.conditions) - 1
    conditions = [
        translate_condition(cond, characteristic_map, enable_when.logic if idx < last else None)
        for idx, cond in enumerate(enable_when.conditions)
    ]
    connector = " or " if enable_when.logic == "OR" else " and "
    summary = "Shown when: " + connector.join(c.readable for c in conditions)
    return TranslatedEnableWhen(conditions=conditions, logic=enable_when.logic, summary=summary)


def translate_questions(
    questions: Iterable[QuestionForMapping],
    enable_whens: Mapping[str, Optional[EnableWhen]],
) -> Dict[str, TranslatedEnableWhen]:
    """Translate the EnableWhen of each question in one rendering context.

    ``questions`` is every question visible in the context (a master or an
    instance); ``enable_whens`` maps question id to its parsed expression.
    """
    cmap = build_characteristic_map(questions)
    out: Dict[str, TranslatedEnableWhen] = {}
    for qid, enable_when in enable_whens.items():
        if enable_when is None:
            continue
        out[qid] = translate_enable_when(enable_when, cmap)
    unresolved = sum(1 for t in out.values() for c in t.conditions if c.raw)
    if unresolved:
        logger.info(
            "enable_when_unresolved_characteristics",
            extra={"count": unresolved, "characteristics": len(cmap)},
        )
    return out


__all__ = [
    "CharacteristicMap",
    "operator_text",
    "translate_condition",
    "translate_enable_when",
    "translate_questions",
]
