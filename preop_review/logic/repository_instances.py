"""Trust instance data access helpers.

An instance is a copy of a master's questions handed to one respondent group.
Questions are copied at creation so later edits on either side stay apart.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional
from uuid import uuid4

from sqlalchemy import text as sql_text

from preop_review.db.base import get_engine
from preop_review.logic.link_ids import generate_secure_link_id
from preop_review.logic.repository_masters import utc_now_iso, get_master
from preop_review.logic.repository_questions import insert_questions, select_questions
from preop_review.models.question import StoredQuestion

logger = logging.getLogger(__name__)


class InstanceRow(NamedTuple):
    instance_id: str
    master_id: str
    trust_name: str
    trust_link_id: str
    created_at: str


def create_instance(admin_link_id: str, trust_name: str, link_id_bytes: int = 16) -> Optional[tuple[InstanceRow, int]]:
    """Clone a master into a new trust instance.

    Returns the instance and the number of copied questions, or None when no
    master owns ``admin_link_id``.
    """
    master = get_master(admin_link_id)
    if master is None:
        return None
    instance = InstanceRow(
        instance_id=str(uuid4()),
        master_id=master.master_id,
        trust_name=trust_name.strip(),
        trust_link_id=generate_secure_link_id(link_id_bytes),
        created_at=utc_now_iso(),
    )
    eng = get_engine()
    with eng.begin() as conn:
        questions = select_questions(conn, "master_question", master.master_id)
        conn.execute(
            sql_text(
                """
                INSERT INTO trust_instance (instance_id, master_id, trust_name, trust_link_id, created_at)
                VALUES (:iid, :mid, :trust, :link, :created)
                """
            ),
            {
                "iid": instance.instance_id,
                "mid": instance.master_id,
                "trust": instance.trust_name,
                "link": instance.trust_link_id,
                "created": instance.created_at,
            },
        )
        insert_questions(conn, "instance_question", instance.instance_id, questions)
    logger.info(
        "instance_created",
        extra={"instance_id": instance.instance_id, "master_id": master.master_id, "question_count": len(questions)},
    )
    return instance, len(questions)


def get_instance(trust_link_id: str) -> Optional[InstanceRow]:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(
                """
                SELECT instance_id, master_id, trust_name, trust_link_id, created_at
                FROM trust_instance WHERE trust_link_id = :link
                """
            ),
            {"link": trust_link_id},
        ).fetchone()
    if not row:
        return None
    return InstanceRow(*(str(v) for v in row))


def list_instance_questions(instance_id: str) -> List[StoredQuestion]:
    eng = get_engine()
    with eng.connect() as conn:
        return select_questions(conn, "instance_question", instance_id)


__all__ = ["InstanceRow", "create_instance", "get_instance", "list_instance_questions"]
