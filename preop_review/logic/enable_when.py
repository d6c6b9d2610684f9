"""EnableWhen expression parsing.

An EnableWhen cell is a flat list of parenthesised conditions joined by one
connective, for example::

    (patient_has_preferred_name=true)
    (patient_is_female=true) AND(patient_has_sex-male=true)
    (patient_age<16) AND(patient_ageexistsnull)

The grammar has a single polarity: the whole expression is either AND or OR.
OR is detected first, so an expression containing both connectives is parsed
as OR even though it is split on both; such input is reported by
`has_mixed_connectives` and logged, not repaired.

Parsing is lenient and never raises. A fragment without an operator becomes an
``exists`` check on the bare token.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from preop_review.models.question import EnableWhen, EnableWhenCondition, Logic

logger = logging.getLogger(__name__)

OPERATORS: tuple[str, ...] = ("=", "<", ">", "<=", ">=", "!=", "exists")

_SPLIT_RE = re.compile(r"\s*(?:AND|OR)\s*|\)(?:AND|OR)\(")
_EDGE_PAREN_RE = re.compile(r"\A\(|\)\Z")
# Two-character operators are tried before their one-character prefixes
_CONDITION_RE = re.compile(r"([^=<>!]+)(<=|>=|!=|=|<|>|exists)(.*)", re.DOTALL)


def _has_connective(expr: str, word: str) -> bool:
    return f" {word}" in expr or f"){word}" in expr


def detect_logic(expr: str) -> Logic:
    return "OR" if _has_connective(expr, "OR") else "AND"


def has_mixed_connectives(expr: Optional[str]) -> bool:
    text = (expr or "").strip()
    return _has_connective(text, "AND") and _has_connective(text, "OR")


def parse_condition(fragment: str) -> Optional[EnableWhenCondition]:
    """Parse one ``<characteristic><operator><value>`` fragment.

    Returns None for fragments that are empty once their outer parentheses
    are removed.
    """
    cleaned = _EDGE_PAREN_RE.sub("", fragment).strip()
    if not cleaned:
        return None
    match = _CONDITION_RE.fullmatch(cleaned)
    if not match:
        return EnableWhenCondition(characteristic=cleaned, operator="exists")
    value = match.group(3).strip()
    return EnableWhenCondition(
        characteristic=match.group(1).strip(),
        operator=match.group(2),
        value=value or None,
    )


def parse_enable_when(raw: Optional[str]) -> Optional[EnableWhen]:
    """Parse an EnableWhen cell; None means the question is always visible."""
    if not raw or not raw.strip():
        return None
    expr = raw.strip()

    logic = detect_logic(expr)
    if has_mixed_connectives(expr):
        logger.warning("enable_when_mixed_connectives", extra={"expression": expr, "logic": logic})

    conditions: List[EnableWhenCondition] = []
    for part in _SPLIT_RE.split(expr):
        condition = parse_condition(part)
        if condition is not None:
            conditions.append(condition)

    if not conditions:
        return None
    return EnableWhen(conditions=conditions, logic=logic)


def format_condition(condition: EnableWhenCondition) -> str:
    if condition.operator == "exists" and condition.value is None:
        return f"({condition.characteristic})"
    return f"({condition.characteristic}{condition.operator}{condition.value or ''})"


def format_enable_when(enable_when: Optional[EnableWhen]) -> str:
    """Serialise back to the compact ``(a=true) AND(b=false)`` cell form."""
    if enable_when is None:
        return ""
    return f" {enable_when.logic}".join(format_condition(c) for c in enable_when.conditions)


__all__ = [
    "OPERATORS",
    "detect_logic",
    "has_mixed_connectives",
    "parse_condition",
    "parse_enable_when",
    "format_condition",
    "format_enable_when",
]
