"""Shared row mapping for the master_question and instance_question tables.

Both tables carry the same question columns and differ only in the owning
key, so the insert and select statements are built from one column list.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Sequence

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from preop_review.models.question import EnableWhen, StoredQuestion

logger = logging.getLogger(__name__)

QUESTION_COLUMNS: tuple[str, ...] = (
    "question_id",
    "section",
    "page",
    "item_type",
    "question_text",
    "answer_options",
    "characteristic",
    "required",
    "enable_when",
    "has_helper",
    "helper_type",
    "helper_name",
    "helper_value",
)

# table name -> owning key column
_OWNERS = {"master_question": "master_id", "instance_question": "instance_id"}


def _owner(table: str) -> str:
    if table not in _OWNERS:
        raise ValueError(f"unknown question table: {table}")
    return _OWNERS[table]


def record_params(record: StoredQuestion) -> Dict[str, Any]:
    params = record.model_dump(include=set(QUESTION_COLUMNS))
    params["enable_when"] = record.enable_when.model_dump_json() if record.enable_when else None
    return params


def row_to_record(row: Mapping[str, Any]) -> StoredQuestion:
    raw_ew = row.get("enable_when")
    enable_when = None
    if raw_ew:
        try:
            enable_when = EnableWhen.model_validate_json(raw_ew)
        except ValueError:
            # A corrupt cell hides the explanation, not the question
            logger.error("stored_enable_when_invalid question_id=%s", row.get("question_id"), exc_info=True)
    return StoredQuestion(
        question_id=str(row["question_id"]),
        section=row.get("section") or "",
        page=row.get("page") or "",
        item_type=row["item_type"],
        question_text=row["question_text"],
        answer_options=row.get("answer_options"),
        characteristic=row.get("characteristic"),
        required=bool(row.get("required")),
        enable_when=enable_when,
        has_helper=bool(row.get("has_helper")),
        helper_type=row.get("helper_type"),
        helper_name=row.get("helper_name"),
        helper_value=row.get("helper_value"),
    )


def insert_questions(conn: Connection, table: str, owner_id: str, records: Sequence[StoredQuestion]) -> None:
    owner = _owner(table)
    cols = (owner, "sort_index") + QUESTION_COLUMNS
    if not records:
        return
    stmt = sql_text(
        f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({', '.join(':' + c for c in cols)})"
    )
    conn.execute(
        stmt,
        [{owner: owner_id, "sort_index": idx, **record_params(r)} for idx, r in enumerate(records, start=1)],
    )


def select_questions(conn: Connection, table: str, owner_id: str) -> List[StoredQuestion]:
    owner = _owner(table)
    rows = conn.execute(
        sql_text(
            f"SELECT {', '.join(QUESTION_COLUMNS)} FROM {table} "
            f"WHERE {owner} = :oid ORDER BY sort_index ASC, question_id ASC"
        ),
        {"oid": owner_id},
    ).mappings().all()
    return [row_to_record(r) for r in rows]


__all__ = [
    "QUESTION_COLUMNS",
    "record_params",
    "row_to_record",
    "insert_questions",
    "select_questions",
]
