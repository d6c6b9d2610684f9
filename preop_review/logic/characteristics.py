"""Characteristic map building.

A characteristic is the variable name EnableWhen expressions test. It lives
either on a whole question (text-like items, one token, no options) or on each
option of a choice question, where the pipe-separated token list is aligned
by position with the pipe-separated option list.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from preop_review.models.characteristics import CharacteristicSource, QuestionForMapping


def parse_characteristics(characteristic: Optional[str]) -> List[str]:
    """Split a pipe-separated characteristic field into trimmed tokens."""
    return [c.strip() for c in characteristic.split("|")] if characteristic else []


def split_answer_options(answer_options: Optional[str]) -> List[str]:
    return [o.strip() for o in answer_options.split("|")] if answer_options else []


def build_characteristic_map(questions: Iterable[QuestionForMapping]) -> Dict[str, CharacteristicSource]:
    """Map each characteristic token to the question (and option) defining it.

    Built from every question visible in one rendering context. A token seen
    on a later question replaces the earlier entry.
    """
    cmap: Dict[str, CharacteristicSource] = {}
    for q in questions:
        if not q.characteristic:
            continue
        tokens = parse_characteristics(q.characteristic)
        options = split_answer_options(q.answer_options)

        if len(tokens) == 1 and not options:
            cmap[tokens[0]] = CharacteristicSource(question_id=q.question_id, question_text=q.question_text)
            continue

        for idx, token in enumerate(tokens):
            if not token:
                continue
            option_text = options[idx] if idx < len(options) else None
            cmap[token] = CharacteristicSource(
                question_id=q.question_id,
                question_text=q.question_text,
                option_text=option_text or None,
            )
    return cmap


__all__ = ["parse_characteristics", "split_answer_options", "build_characteristic_map"]
