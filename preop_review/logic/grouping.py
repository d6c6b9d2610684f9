"""Group flat MyPreOp CSV rows into per-question row groups."""

from __future__ import annotations

from typing import Dict, Iterable, List, NamedTuple, Optional

from preop_review.models.question import MyPreOpCsvRow


class SplitGroup(NamedTuple):
    """A run of rows for ``question_id`` that resumes after another question's rows."""

    question_id: str
    line: Optional[int]


def group_rows_by_question(rows: Iterable[MyPreOpCsvRow]) -> Dict[str, List[MyPreOpCsvRow]]:
    """Return rows keyed by trimmed ``Id`` in first-seen order.

    Row order inside each group is preserved since it defines option order.
    Rows with a blank ``Id`` are filler and are dropped without error. Rows
    for one Id need not be adjacent; see `find_split_groups`.
    """
    groups: Dict[str, List[MyPreOpCsvRow]] = {}
    for row in rows:
        qid = (row.id or "").strip()
        if not qid:
            continue
        groups.setdefault(qid, []).append(row)
    return groups


def find_split_groups(rows: Iterable[MyPreOpCsvRow]) -> List[SplitGroup]:
    """List each place where an Id seen earlier reappears after a different Id.

    Blank-Id filler rows do not break a run.
    """
    seen = set()
    previous: Optional[str] = None
    splits: List[SplitGroup] = []
    for row in rows:
        qid = (row.id or "").strip()
        if not qid:
            continue
        if qid != previous and qid in seen:
            splits.append(SplitGroup(question_id=qid, line=row.line))
        seen.add(qid)
        previous = qid
    return splits


__all__ = ["SplitGroup", "group_rows_by_question", "find_split_groups"]
