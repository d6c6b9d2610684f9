"""Suggestion and comment data access helpers.

Suggestions belong to a trust instance and name one of its questions by id.
Comments belong to a suggestion. Both carry a per-parent ``seq`` that fixes
list order, since ``created_at`` only has second precision.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from preop_review.db.base import get_engine
from preop_review.logic.repository_masters import utc_now_iso
from preop_review.models.suggestion import (
    SUGGESTION_STATUSES,
    CommentCreate,
    SuggestedQuestion,
    Suggestion,
    SuggestionComment,
    SuggestionCounts,
    SuggestionCreate,
    TrustSuggestionSummary,
)

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS: tuple[str, ...] = ("status", "response_message")

_SUGGESTION_SELECT = """
    SELECT s.suggestion_id, s.instance_id, s.question_id, q.section, q.question_text,
           s.submitter_name, s.submitter_email, s.suggestion_text, s.reason,
           s.status, s.response_message, s.created_at, s.updated_at,
           (SELECT COUNT(*) FROM suggestion_comment c WHERE c.suggestion_id = s.suggestion_id) AS comment_count
    FROM suggestion s
    LEFT JOIN instance_question q ON q.instance_id = s.instance_id AND q.question_id = s.question_id
"""

_COMMENT_COLUMNS = "comment_id, suggestion_id, author_type, author_name, author_email, message, created_at"


def _row_to_suggestion(row: Mapping[str, Any]) -> Suggestion:
    return Suggestion(
        suggestion_id=str(row["suggestion_id"]),
        instance_id=str(row["instance_id"]),
        question=SuggestedQuestion(
            question_id=str(row["question_id"]),
            section=row.get("section"),
            question_text=row.get("question_text"),
        ),
        submitter_name=row["submitter_name"],
        submitter_email=row.get("submitter_email"),
        suggestion_text=row["suggestion_text"],
        reason=row["reason"],
        status=row["status"],
        response_message=row.get("response_message"),
        created_at=str(row["created_at"]),
        updated_at=row.get("updated_at"),
        comment_count=int(row.get("comment_count") or 0),
    )


def _row_to_comment(row: Mapping[str, Any]) -> SuggestionComment:
    return SuggestionComment(
        comment_id=str(row["comment_id"]),
        suggestion_id=str(row["suggestion_id"]),
        author_type=row["author_type"],
        author_name=row["author_name"],
        author_email=row.get("author_email"),
        message=row["message"],
        created_at=str(row["created_at"]),
    )


def _next_seq(conn: Connection, table: str, parent_column: str, parent_id: str) -> int:
    return int(
        conn.execute(
            sql_text(f"SELECT COALESCE(MAX(seq), 0) + 1 FROM {table} WHERE {parent_column} = :pid"),
            {"pid": parent_id},
        ).scalar_one()
    )


def _select_suggestion(conn: Connection, suggestion_id: str) -> Optional[Suggestion]:
    row = conn.execute(
        sql_text(_SUGGESTION_SELECT + " WHERE s.suggestion_id = :sid"),
        {"sid": suggestion_id},
    ).mappings().fetchone()
    return _row_to_suggestion(row) if row else None


def create_suggestion(instance_id: str, payload: SuggestionCreate) -> Optional[Suggestion]:
    """Store a pending suggestion.

    Returns None when the instance has no question ``payload.question_id``.
    """
    suggestion_id = str(uuid4())
    eng = get_engine()
    with eng.begin() as conn:
        known = conn.execute(
            sql_text("SELECT 1 FROM instance_question WHERE instance_id = :iid AND question_id = :qid"),
            {"iid": instance_id, "qid": payload.question_id},
        ).fetchone()
        if not known:
            return None
        conn.execute(
            sql_text(
                """
                INSERT INTO suggestion (
                    suggestion_id, instance_id, seq, question_id, submitter_name, submitter_email,
                    suggestion_text, reason, status, created_at
                )
                VALUES (:sid, :iid, :seq, :qid, :name, :email, :text, :reason, 'pending', :created)
                """
            ),
            {
                "sid": suggestion_id,
                "iid": instance_id,
                "seq": _next_seq(conn, "suggestion", "instance_id", instance_id),
                "qid": payload.question_id,
                "name": payload.submitter_name,
                "email": payload.submitter_email,
                "text": payload.suggestion_text,
                "reason": payload.reason,
                "created": utc_now_iso(),
            },
        )
        created = _select_suggestion(conn, suggestion_id)
    logger.info(
        "suggestion_submitted",
        extra={"suggestion_id": suggestion_id, "instance_id": instance_id, "question_id": payload.question_id},
    )
    return created


def get_suggestion(suggestion_id: str) -> Optional[Suggestion]:
    eng = get_engine()
    with eng.connect() as conn:
        return _select_suggestion(conn, suggestion_id)


def list_suggestions(instance_id: str) -> List[Suggestion]:
    """Return an instance's suggestions, newest first."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(_SUGGESTION_SELECT + " WHERE s.instance_id = :iid ORDER BY s.seq DESC, s.suggestion_id"),
            {"iid": instance_id},
        ).mappings().all()
    return [_row_to_suggestion(r) for r in rows]


def update_suggestion(suggestion_id: str, changes: Mapping[str, Any]) -> Optional[Suggestion]:
    unknown = set(changes) - set(UPDATABLE_COLUMNS)
    if unknown:
        raise ValueError(f"cannot update suggestion columns: {', '.join(sorted(unknown))}")
    if "status" in changes and changes["status"] not in SUGGESTION_STATUSES:
        raise ValueError(f"invalid suggestion status: {changes['status']}")
    cols = [c for c in UPDATABLE_COLUMNS if c in changes]
    params: Dict[str, Any] = {c: changes[c] for c in cols}
    params.update({"sid": suggestion_id, "updated": utc_now_iso()})
    assignments = ", ".join([f"{c} = :{c}" for c in cols] + ["updated_at = :updated"])
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(sql_text(f"UPDATE suggestion SET {assignments} WHERE suggestion_id = :sid"), params)
        updated = _select_suggestion(conn, suggestion_id)
    if updated is not None:
        logger.info(
            "suggestion_updated",
            extra={"suggestion_id": suggestion_id, "fields": cols, "status": updated.status},
        )
    return updated


def delete_suggestion(suggestion_id: str) -> bool:
    eng = get_engine()
    with eng.begin() as conn:
        # SQLite leaves foreign keys unenforced by default, so children go first
        conn.execute(sql_text("DELETE FROM suggestion_comment WHERE suggestion_id = :sid"), {"sid": suggestion_id})
        result = conn.execute(sql_text("DELETE FROM suggestion WHERE suggestion_id = :sid"), {"sid": suggestion_id})
    deleted = bool(result.rowcount)
    if deleted:
        logger.info("suggestion_deleted", extra={"suggestion_id": suggestion_id})
    return deleted


def add_comment(suggestion_id: str, payload: CommentCreate) -> SuggestionComment:
    comment = SuggestionComment(
        comment_id=str(uuid4()),
        suggestion_id=suggestion_id,
        author_type=payload.author_type,
        author_name=payload.author_name,
        author_email=payload.author_email,
        message=payload.message,
        created_at=utc_now_iso(),
    )
    eng = get_engine()
    with eng.begin() as conn:
        conn.execute(
            sql_text(
                f"""
                INSERT INTO suggestion_comment (seq, {_COMMENT_COLUMNS})
                VALUES (:seq, :comment_id, :suggestion_id, :author_type, :author_name,
                        :author_email, :message, :created_at)
                """
            ),
            {"seq": _next_seq(conn, "suggestion_comment", "suggestion_id", suggestion_id), **comment.model_dump()},
        )
    logger.info(
        "suggestion_comment_added",
        extra={"suggestion_id": suggestion_id, "comment_id": comment.comment_id, "author_type": comment.author_type},
    )
    return comment


def list_comments(suggestion_id: str) -> List[SuggestionComment]:
    """Return a suggestion's comments, oldest first."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                f"SELECT {_COMMENT_COLUMNS} FROM suggestion_comment "
                "WHERE suggestion_id = :sid ORDER BY seq ASC, comment_id"
            ),
            {"sid": suggestion_id},
        ).mappings().all()
    return [_row_to_comment(r) for r in rows]


def suggestion_counts_by_trust(master_id: str) -> List[TrustSuggestionSummary]:
    """Per-instance suggestion counts by status for one master, newest instance first.

    Instances without suggestions are listed with zero counts.
    """
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                """
                SELECT t.instance_id, t.trust_name, t.trust_link_id, t.created_at, s.status,
                       COUNT(s.suggestion_id) AS n
                FROM trust_instance t
                LEFT JOIN suggestion s ON s.instance_id = t.instance_id
                WHERE t.master_id = :mid
                GROUP BY t.instance_id, t.trust_name, t.trust_link_id, t.created_at, s.status
                ORDER BY t.created_at DESC, t.instance_id
                """
            ),
            {"mid": master_id},
        ).mappings().all()

    summaries: Dict[str, TrustSuggestionSummary] = {}
    for r in rows:
        summary = summaries.get(r["instance_id"])
        if summary is None:
            summary = TrustSuggestionSummary(
                trust_name=r["trust_name"],
                trust_link_id=r["trust_link_id"],
                created_at=str(r["created_at"]),
                suggestion_counts=SuggestionCounts(),
            )
            summaries[r["instance_id"]] = summary
        n = int(r["n"] or 0)
        if r["status"] in SUGGESTION_STATUSES and n:
            counts = summary.suggestion_counts
            setattr(counts, r["status"], getattr(counts, r["status"]) + n)
            counts.total += n
    return list(summaries.values())


__all__ = [
    "UPDATABLE_COLUMNS",
    "create_suggestion",
    "get_suggestion",
    "list_suggestions",
    "update_suggestion",
    "delete_suggestion",
    "add_comment",
    "list_comments",
    "suggestion_counts_by_trust",
]
