"""Functional tests for translating EnableWhen conditions into prose."""

from __future__ import annotations

import pytest

from preop_review.logic.characteristics import build_characteristic_map
from preop_review.logic.enable_when import parse_enable_when
from preop_review.logic.translation import (
    operator_text,
    translate_condition,
    translate_enable_when,
    translate_questions,
)
from preop_review.models.characteristics import QuestionForMapping
from preop_review.models.question import EnableWhen, EnableWhenCondition


@pytest.fixture
def cmap():
    return build_characteristic_map([
        QuestionForMapping(question_id="Q1", question_text="Do you smoke?", answer_options="Yes|No", characteristic="c1|c2"),
        QuestionForMapping(question_id="Q3", question_text="How old are you?", characteristic="c3"),
    ])


@pytest.mark.parametrize(
    "operator, value, expected",
    [
        ("=", "true", "is answered"),
        ("=", "false", "is not answered"),
        ("=", "blue", 'equals "blue"'),
        ("!=", "blue", 'does not equal "blue"'),
        ("<", "16", "is less than 16"),
        (">", "16", "is greater than 16"),
        ("<=", "16", "is at most 16"),
        (">=", "16", "is at least 16"),
        ("<", None, "is less than "),
        (">", None, "is greater than "),
        ("<=", None, "is at most "),
        (">=", None, "is at least "),
        ("exists", None, "has no value"),
        ("exists", "null", "has no value"),
        ("exists", "yes", "has a value"),
        ("~", "x", "~ x"),
    ],
)
def test_operator_phrases(operator, value, expected):
    assert operator_text(operator, value) == expected


def test_option_level_true_reads_as_answered(cmap):
    t = translate_condition(EnableWhenCondition(characteristic="c1", operator="=", value="true"), cmap)
    assert t.readable == '"Do you smoke?" is answered "Yes"'
    assert t.raw is False
    assert t.option_text == "Yes"


def test_option_level_false_reads_as_not(cmap):
    t = translate_condition(EnableWhenCondition(characteristic="c2", operator="=", value="false"), cmap)
    assert t.readable == '"Do you smoke?" is not "No"'


def test_option_level_other_operator_uses_arrow_template(cmap):
    t = translate_condition(EnableWhenCondition(characteristic="c1", operator="exists"), cmap)
    assert t.readable == '"Do you smoke?" → "Yes" has no value'


def test_question_level(cmap):
    t = translate_condition(EnableWhenCondition(characteristic="c3", operator="<", value="16"), cmap)
    assert t.readable == '"How old are you?" is less than 16'
    assert t.option_text is None


def test_unresolved_token_falls_back_to_raw(cmap):
    t = translate_condition(EnableWhenCondition(characteristic="mystery", operator="=", value="true"), cmap)
    assert t.raw is True
    assert t.readable == "mystery is answered"
    assert t.question_text == "mystery"


def test_single_condition_summary(cmap):
    out = translate_enable_when(parse_enable_when("(c1=true)"), cmap)
    assert out.summary == 'Shown when: "Do you smoke?" is answered "Yes"'
    assert out.conditions[0].logical_op is None


def test_comparison_without_value_reads_blank(cmap):
    out = translate_enable_when(parse_enable_when("(age<)"), cmap)
    assert "None" not in out.summary
    assert out.summary.rstrip() == "Shown when: age is less than"


def test_or_summary_joins_with_or_only(cmap):
    out = translate_enable_when(parse_enable_when("(c1=true) OR(mystery=true)"), cmap)
    assert out.logic == "OR"
    assert " or " in out.summary
    assert " and " not in out.summary
    assert out.summary == 'Shown when: "Do you smoke?" is answered "Yes" or mystery is answered'
    assert [c.logical_op for c in out.conditions] == ["OR", None]


def test_and_summary_marks_all_but_last(cmap):
    ew = EnableWhen(
        conditions=[
            EnableWhenCondition(characteristic="c1", operator="=", value="true"),
            EnableWhenCondition(characteristic="c3", operator=">=", value="18"),
            EnableWhenCondition(characteristic="c2", operator="=", value="false"),
        ],
        logic="AND",
    )
    out = translate_enable_when(ew, cmap)
    assert [c.logical_op for c in out.conditions] == ["AND", "AND", None]
    assert out.summary.count(" and ") == 2


def test_translate_questions_uses_whole_context():
    questions = [
        QuestionForMapping(question_id="Q1", question_text="Smoke?", answer_options="Yes|No", characteristic="s_yes|s_no"),
        QuestionForMapping(question_id="Q2", question_text="How many a day?"),
    ]
    out = translate_questions(questions, {"Q1": None, "Q2": parse_enable_when("(s_yes=true)")})
    assert list(out) == ["Q2"]
    assert out["Q2"].summary == 'Shown when: "Smoke?" is answered "Yes"'
