"""Master questionnaire data access helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, NamedTuple, Optional
from uuid import uuid4

from sqlalchemy import text as sql_text

from preop_review.db.base import get_engine
from preop_review.logic.link_ids import generate_secure_link_id
from preop_review.logic.question_records import question_to_record
from preop_review.logic.repository_questions import insert_questions, select_questions
from preop_review.models.question import ParsedQuestion, StoredQuestion

logger = logging.getLogger(__name__)


class MasterRow(NamedTuple):
    master_id: str
    name: str
    admin_link_id: str
    created_at: str


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def create_master(name: str, questions: Iterable[ParsedQuestion], link_id_bytes: int = 16) -> MasterRow:
    """Persist a master and all of its questions in one transaction."""
    records = [question_to_record(q) for q in questions]
    master = MasterRow(
        master_id=str(uuid4()),
        name=name.strip(),
        admin_link_id=generate_secure_link_id(link_id_bytes),
        created_at=utc_now_iso(),
    )
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(
            sql_text(
                """
                INSERT INTO master_questionnaire (master_id, name, admin_link_id, created_at)
                VALUES (:mid, :name, :link, :created)
                """
            ),
            {"mid": master.master_id, "name": master.name, "link": master.admin_link_id, "created": master.created_at},
        )
        insert_questions(conn, "master_question", master.master_id, records)
    logger.info(
        "master_created",
        extra={"master_id": master.master_id, "question_count": len(records)},
    )
    return master


def get_master(admin_link_id: str) -> Optional[MasterRow]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(
                "SELECT master_id, name, admin_link_id, created_at FROM master_questionnaire WHERE admin_link_id = :link"
            ),
            {"link": admin_link_id},
        ).fetchone()
    if not row:
        return None
    return MasterRow(str(row[0]), str(row[1]), str(row[2]), str(row[3]))


def list_master_questions(master_id: str) -> List[StoredQuestion]:
    eng = get_engine()
    with eng.connect() as conn:
        return select_questions(conn, "master_question", master_id)


# Children first: SQLite does not enforce ON DELETE CASCADE unless foreign keys are switched on
_DELETE_MASTER_TREE = (
    "DELETE FROM suggestion_comment WHERE suggestion_id IN (SELECT s.suggestion_id FROM suggestion s "
    "JOIN trust_instance t ON t.instance_id = s.instance_id WHERE t.master_id = :mid)",
    "DELETE FROM suggestion WHERE instance_id IN (SELECT instance_id FROM trust_instance WHERE master_id = :mid)",
    "DELETE FROM instance_question WHERE instance_id IN (SELECT instance_id FROM trust_instance WHERE master_id = :mid)",
    "DELETE FROM trust_instance WHERE master_id = :mid",
    "DELETE FROM master_question WHERE master_id = :mid",
    "DELETE FROM master_questionnaire WHERE master_id = :mid",
)


def delete_master(admin_link_id: str) -> bool:
    """Delete a master with its instances, suggestions and comments in one transaction.

    Returns False when no master owns ``admin_link_id``.
    """
    master = get_master(admin_link_id)
    if master is None:
        return False
    eng = get_engine()
    with eng.begin() as conn:
        for stmt in _DELETE_MASTER_TREE:
            conn.execute(sql_text(stmt), {"mid": master.master_id})
    logger.info("master_deleted", extra={"master_id": master.master_id})
    return True


__all__ = ["MasterRow", "utc_now_iso", "create_master", "get_master", "list_master_questions", "delete_master"]
