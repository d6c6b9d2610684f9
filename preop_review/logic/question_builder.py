"""Build one `ParsedQuestion` from a group of MyPreOp rows.

Question-level fields come from the first row of the group. Later rows are
only consulted for their ``Option``/``Characteristic`` pair; disagreeing
scalar cells are reported by `find_scalar_mismatches` and logged, but never
change the result.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional, Sequence

from preop_review.logic.enable_when import parse_enable_when
from preop_review.models.question import MyPreOpCsvRow, ParsedQuestion, QuestionOption

logger = logging.getLogger(__name__)

# Row attributes that describe the question rather than one option
SCALAR_FIELDS: tuple[str, ...] = (
    "section",
    "page",
    "item_type",
    "question",
    "required",
    "enable_when",
    "has_helper",
    "helper_type",
    "helper_name",
    "helper_value",
)


class EmptyRowGroupError(ValueError):
    """Raised when a question is built from zero rows."""


class ScalarMismatch(NamedTuple):
    question_id: str
    field: str
    expected: str
    found: str
    line: Optional[int]


def parse_bool_flag(raw: Optional[str]) -> bool:
    """Return True only for the token ``TRUE`` in any case, ignoring padding."""
    return (raw or "").strip().upper() == "TRUE"


def _clean(raw: Optional[str]) -> str:
    return (raw or "").strip()


def _optional(raw: Optional[str]) -> Optional[str]:
    value = _clean(raw)
    return value or None


def _scalar(row: MyPreOpCsvRow, field: str) -> str:
    value = _clean(getattr(row, field))
    if field == "item_type":
        return value.lower()
    if field in {"required", "has_helper"}:
        return "TRUE" if parse_bool_flag(value) else value.upper()
    return value


def find_scalar_mismatches(rows: Sequence[MyPreOpCsvRow]) -> List[ScalarMismatch]:
    """List scalar cells in later rows that disagree with the first row.

    Blank cells on continuation rows are common in hand-edited files and are
    not reported.
    """
    if not rows:
        return []
    first = rows[0]
    qid = _clean(first.id)
    out: List[ScalarMismatch] = []
    for row in rows[1:]:
        for field in SCALAR_FIELDS:
            found = _scalar(row, field)
            if not found:
                continue
            expected = _scalar(first, field)
            if found != expected:
                out.append(ScalarMismatch(qid, field, expected, found, row.line))
    return out


def rows_to_question(rows: Sequence[MyPreOpCsvRow]) -> ParsedQuestion:
    if not rows:
        raise EmptyRowGroupError("Cannot create question from empty rows")

    first = rows[0]

    options: List[QuestionOption] = []
    for row in rows:
        value = _clean(row.option)
        if value:
            options.append(QuestionOption(value=value, characteristic=_optional(row.characteristic)))

    for mismatch in find_scalar_mismatches(rows):
        logger.warning(
            "question_scalar_mismatch",
            extra={
                "question_id": mismatch.question_id,
                "field": mismatch.field,
                "expected": mismatch.expected,
                "found": mismatch.found,
                "line": mismatch.line,
            },
        )

    has_helper = parse_bool_flag(first.has_helper)
    return ParsedQuestion(
        id=_clean(first.id),
        section=_clean(first.section),
        page=_clean(first.page),
        item_type=_clean(first.item_type).lower(),
        question_text=_clean(first.question),
        options=options,
        required=parse_bool_flag(first.required),
        enable_when=parse_enable_when(first.enable_when),
        has_helper=has_helper,
        helper_type=_optional(first.helper_type) if has_helper else None,
        helper_name=_optional(first.helper_name) if has_helper else None,
        helper_value=_optional(first.helper_value) if has_helper else None,
        characteristic=None if options else _optional(first.characteristic),
    )


__all__ = [
    "SCALAR_FIELDS",
    "EmptyRowGroupError",
    "ScalarMismatch",
    "parse_bool_flag",
    "find_scalar_mismatches",
    "rows_to_question",
]
