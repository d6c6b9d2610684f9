"""Batch validation for uploaded questionnaires.

Structural rules reject the whole upload with a message naming the question
(1-based position in the batch and its id). Softer findings are returned as
warnings and never block persistence.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from preop_review.config import UploadConfig
from preop_review.logic.grouping import SplitGroup
from preop_review.logic.question_builder import ScalarMismatch
from preop_review.logic.upload_errors import UploadValidationError
from preop_review.models.item_type import (
    ITEM_TYPES_NO_OPTIONS,
    ITEM_TYPES_REQUIRING_OPTIONS,
    MYPREOP_ITEM_TYPES,
)
from preop_review.models.question import ParsedQuestion

logger = logging.getLogger(__name__)

MIN_CHOICE_OPTIONS = 2


def validate_question_count(count: int, max_questions: int) -> None:
    if count == 0:
        raise UploadValidationError("CSV file contains no data rows")
    if count > max_questions:
        raise UploadValidationError(f"CSV file exceeds maximum of {max_questions} questions")


def validate_question(n: int, q: ParsedQuestion, cfg: UploadConfig) -> List[str]:
    """Check one question; raise on structural errors, return warnings."""

    def fail(message: str) -> UploadValidationError:
        return UploadValidationError(f"Question {n} ({q.id}): {message}", index=n, question_id=q.id)

    if not q.question_text:
        raise fail("Question text is empty")
    if len(q.question_text) > cfg.max_question_text:
        raise fail(f"Question text exceeds {cfg.max_question_text} character limit")
    if not q.item_type:
        raise fail("ItemType is required")
    if q.item_type not in MYPREOP_ITEM_TYPES:
        raise fail(f'ItemType must be one of: {", ".join(MYPREOP_ITEM_TYPES)} (got "{q.item_type}")')
    if q.item_type in ITEM_TYPES_REQUIRING_OPTIONS and len(q.options) < MIN_CHOICE_OPTIONS:
        raise fail(
            f'"{q.item_type}" type requires at least {MIN_CHOICE_OPTIONS} options (found {len(q.options)})'
        )
    for idx, option in enumerate(q.options, start=1):
        # Storage joins options with '|'
        if "|" in option.value:
            raise fail(f"Option {idx} must not contain '|'")
        if option.characteristic and "|" in option.characteristic:
            raise fail(f"Characteristic for option {idx} must not contain '|'")

    warnings: List[str] = []
    label = f"Question {n} ({q.id})"
    if q.item_type in ITEM_TYPES_NO_OPTIONS and q.options:
        warnings.append(f'{label}: options are ignored for "{q.item_type}" type questions')
    if len(q.options) > cfg.warn_option_count:
        warnings.append(f"{label}: More than {cfg.warn_option_count} options may affect usability")
    for idx, option in enumerate(q.options, start=1):
        if len(option.value) > cfg.warn_option_length:
            warnings.append(f"{label}: Option {idx} exceeds {cfg.warn_option_length} characters")
    return warnings


def mismatch_warnings(mismatches: Iterable[ScalarMismatch]) -> List[str]:
    out: List[str] = []
    for m in mismatches:
        where = f" (line {m.line})" if m.line else ""
        out.append(
            f'Question {m.question_id}{where}: {m.field} "{m.found}" differs from first row "{m.expected}"; first row used'
        )
    return out


def split_group_warnings(splits: Iterable[SplitGroup]) -> List[str]:
    out: List[str] = []
    for s in splits:
        where = f" (line {s.line})" if s.line else ""
        out.append(f"Question {s.question_id}{where}: rows are not contiguous; merged with earlier rows")
    return out


def validate_questions(
    questions: Sequence[ParsedQuestion],
    cfg: Optional[UploadConfig] = None,
    mismatches: Iterable[ScalarMismatch] = (),
    split_groups: Iterable[SplitGroup] = (),
) -> List[str]:
    """Validate a whole upload and return its warnings.

    Raises `UploadValidationError` on the first failing rule.
    """
    cfg = cfg or UploadConfig()
    validate_question_count(len(questions), cfg.max_questions)

    warnings: List[str] = []
    for n, q in enumerate(questions, start=1):
        warnings.extend(validate_question(n, q, cfg))

    sections = Counter(q.section for q in questions if q.section)
    for section, count in sections.items():
        if count == 1:
            warnings.append(f'Section "{section}" has only 1 question')

    warnings.extend(split_group_warnings(split_groups))
    warnings.extend(mismatch_warnings(mismatches))
    if warnings:
        logger.info("upload_validation_warnings", extra={"warning_count": len(warnings)})
    return warnings


__all__ = [
    "MIN_CHOICE_OPTIONS",
    "validate_question_count",
    "validate_question",
    "mismatch_warnings",
    "split_group_warnings",
    "validate_questions",
]
