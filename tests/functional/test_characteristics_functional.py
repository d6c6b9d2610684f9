"""Functional tests for characteristic map building."""

from __future__ import annotations

from preop_review.logic.characteristics import build_characteristic_map, parse_characteristics
from preop_review.models.characteristics import QuestionForMapping


def q(qid: str, text: str, options: str | None, chars: str | None) -> QuestionForMapping:
    return QuestionForMapping(question_id=qid, question_text=text, answer_options=options, characteristic=chars)


def test_parse_characteristics():
    assert parse_characteristics(None) == []
    assert parse_characteristics("") == []
    assert parse_characteristics(" a | b ") == ["a", "b"]


def test_option_level_tokens_align_with_options():
    cmap = build_characteristic_map([q("Q1", "Smoker?", "Yes|No", "c1|c2")])
    assert cmap["c1"].option_text == "Yes"
    assert cmap["c2"].option_text == "No"
    assert cmap["c1"].question_id == "Q1"
    assert cmap["c2"].question_text == "Smoker?"


def test_single_token_without_options_is_question_level():
    cmap = build_characteristic_map([q("Q3", "Age?", None, "c3")])
    assert cmap["c3"].option_text is None
    assert cmap["c3"].question_text == "Age?"


def test_single_token_with_options_is_option_level():
    cmap = build_characteristic_map([q("Q1", "Pick", "Only|Other", "c1")])
    assert cmap["c1"].option_text == "Only"


def test_surplus_tokens_have_no_option_text():
    cmap = build_characteristic_map([q("Q1", "Pick", "A", "c1|c2")])
    assert cmap["c1"].option_text == "A"
    assert cmap["c2"].option_text is None


def test_empty_slots_are_skipped_and_keep_alignment():
    cmap = build_characteristic_map([q("Q1", "Pick", "A|B|C", "c1||c3")])
    assert set(cmap) == {"c1", "c3"}
    assert cmap["c3"].option_text == "C"


def test_questions_without_characteristic_are_ignored():
    assert build_characteristic_map([q("Q1", "Free text", None, None), q("Q2", "x", "A|B", "")]) == {}


def test_later_question_overwrites_duplicate_token():
    cmap = build_characteristic_map([
        q("Q1", "First", "Yes|No", "dup|other"),
        q("Q2", "Second", None, "dup"),
    ])
    assert cmap["dup"].question_id == "Q2"
    assert cmap["dup"].option_text is None
    assert cmap["other"].question_id == "Q1"
