"""Functional tests for row grouping and question building."""

from __future__ import annotations

import logging

import pytest

from preop_review.logic.grouping import SplitGroup, find_split_groups, group_rows_by_question
from preop_review.logic.question_builder import (
    EmptyRowGroupError,
    find_scalar_mismatches,
    parse_bool_flag,
    rows_to_question,
)
from preop_review.models.question import MyPreOpCsvRow


def row(**cells) -> MyPreOpCsvRow:
    return MyPreOpCsvRow(**cells)


def test_grouping_preserves_first_seen_order_and_row_order():
    rows = [
        row(Id="B", Option="b1"),
        row(Id="A", Option="a1"),
        row(Id="B", Option="b2"),
        row(Id=" A ", Option="a2"),
    ]
    groups = group_rows_by_question(rows)
    assert list(groups) == ["B", "A"]
    assert [r.option for r in groups["B"]] == ["b1", "b2"]
    assert [r.option for r in groups["A"]] == ["a1", "a2"]


def test_grouping_drops_blank_ids():
    groups = group_rows_by_question([row(Id=""), row(Id="   ", Option="x"), row(Id="Q1")])
    assert list(groups) == ["Q1"]


def test_interleaved_ids_are_reported_where_they_resume():
    rows = [
        row(Id="B", Option="b1", line=2),
        row(Id="A", Option="a1", line=3),
        row(Id="B", Option="b2", line=4),
        row(Id="B", Option="b3", line=5),
        row(Id=" A ", Option="a2", line=6),
    ]
    assert find_split_groups(rows) == [SplitGroup("B", 4), SplitGroup("A", 6)]


def test_filler_rows_do_not_split_a_question():
    rows = [row(Id="Q1", line=2), row(Id="", line=3), row(Id="Q1", line=4), row(Id="Q2", line=5)]
    assert find_split_groups(rows) == []


def test_options_follow_rows_with_non_empty_option():
    rows = [
        row(Id="Q1", ItemType="radio", Question="Pick", Option="Yes", Characteristic="c_yes"),
        row(Id="Q1", Option="  "),
        row(Id="Q1", Option="No", Characteristic="   "),
        row(Id="Q1", Option="Maybe", Characteristic=" c_maybe "),
    ]
    q = rows_to_question(rows)
    assert [o.value for o in q.options] == ["Yes", "No", "Maybe"]
    assert [o.characteristic for o in q.options] == ["c_yes", None, "c_maybe"]


@pytest.mark.parametrize("raw", ["TRUE", " true ", "True"])
def test_true_tokens(raw):
    assert parse_bool_flag(raw) is True


@pytest.mark.parametrize("raw", ["false", "", "no", None, "1", "yes"])
def test_non_true_tokens(raw):
    assert parse_bool_flag(raw) is False


def test_scalar_fields_come_from_first_row():
    rows = [
        row(Id=" Q7 ", Section=" Intro ", Page="2", ItemType=" Text-Field ", Question=" Your name? ",
            Required="TRUE", EnableWhen="(a=true)"),
    ]
    q = rows_to_question(rows)
    assert q.id == "Q7"
    assert q.section == "Intro"
    assert q.page == "2"
    assert q.item_type == "text-field"
    assert q.question_text == "Your name?"
    assert q.required is True
    assert q.enable_when is not None and q.enable_when.conditions[0].characteristic == "a"


def test_helper_fields_only_when_has_helper():
    filled = dict(HelperType="info", HelperName="Why", HelperValue="Because")
    without = rows_to_question([row(Id="Q1", HasHelper="FALSE", **filled)])
    assert without.has_helper is False
    assert (without.helper_type, without.helper_name, without.helper_value) == (None, None, None)

    with_helper = rows_to_question([row(Id="Q1", HasHelper="true", HelperType=" info ", HelperName="", HelperValue="Because")])
    assert with_helper.has_helper is True
    assert with_helper.helper_type == "info"
    assert with_helper.helper_name is None
    assert with_helper.helper_value == "Because"


def test_question_level_characteristic_only_without_options():
    text_q = rows_to_question([row(Id="Q1", ItemType="age", Characteristic=" patient_age ")])
    assert text_q.options == []
    assert text_q.characteristic == "patient_age"

    choice_q = rows_to_question([
        row(Id="Q2", ItemType="radio", Option="Yes", Characteristic="c1"),
        row(Id="Q2", Option="No", Characteristic="c2"),
    ])
    assert choice_q.characteristic is None


def test_empty_group_is_a_contract_violation():
    with pytest.raises(EmptyRowGroupError):
        rows_to_question([])
    assert issubclass(EmptyRowGroupError, ValueError)


def test_mismatched_scalars_are_reported_but_first_row_wins(caplog):
    rows = [
        row(Id="Q1", ItemType="radio", Question="Original?", Option="Yes", line=2),
        row(Id="Q1", ItemType="RADIO", Question="Edited?", Option="No", line=3),
        row(Id="Q1", ItemType="radio", Question="", Option="Maybe", line=4),
    ]
    mismatches = find_scalar_mismatches(rows)
    assert [(m.field, m.expected, m.found, m.line) for m in mismatches] == [
        ("question", "Original?", "Edited?", 3)
    ]
    with caplog.at_level(logging.WARNING, logger="preop_review.logic.question_builder"):
        q = rows_to_question(rows)
    assert q.question_text == "Original?"
    assert len(q.options) == 3
    assert any(r.getMessage() == "question_scalar_mismatch" for r in caplog.records)
