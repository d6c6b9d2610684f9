"""MyPreOp CSV import/export helpers.

Import reads the 13-column MyPreOp layout, where a question with options spans
one row per option sharing the same ``Id``, and turns it into grouped
questions. Export writes stored questions back in the same layout so a master
can be downloaded, edited and uploaded again.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, List, NamedTuple, Optional

from preop_review.logic.characteristics import parse_characteristics, split_answer_options
from preop_review.logic.enable_when import format_enable_when
from preop_review.logic.grouping import SplitGroup, find_split_groups, group_rows_by_question
from preop_review.logic.question_builder import ScalarMismatch, find_scalar_mismatches, rows_to_question
from preop_review.logic.upload_errors import CsvFormatError, UploadTooLargeError
from preop_review.models.question import (
    MYPREOP_REQUIRED_COLUMNS,
    MyPreOpCsvRow,
    ParsedQuestion,
    StoredQuestion,
)


HEADER = list(MYPREOP_REQUIRED_COLUMNS)


class ParsedUpload(NamedTuple):
    questions: List[ParsedQuestion]
    mismatches: List[ScalarMismatch]
    row_count: int
    split_groups: List[SplitGroup]


def _decode(data: bytes) -> str:
    try:
        # utf-8-sig drops the BOM spreadsheet exports tend to add
        return (data or b"").decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CsvFormatError(f"CSV file is not valid UTF-8 (byte {exc.start})") from exc


def read_mypreop_rows(data: bytes, max_bytes: Optional[int] = None) -> List[MyPreOpCsvRow]:
    if max_bytes is not None and len(data or b"") > max_bytes:
        raise UploadTooLargeError(f"CSV file exceeds maximum size of {max_bytes} bytes")
    text = _decode(data)
    reader = csv.DictReader(io.StringIO(text, newline=""))
    fieldnames = [(f or "").strip() for f in (reader.fieldnames or [])]
    if not fieldnames:
        raise CsvFormatError("CSV file is empty")
    missing = [c for c in MYPREOP_REQUIRED_COLUMNS if c not in fieldnames]
    if missing:
        raise CsvFormatError(f"CSV is missing required columns: {', '.join(missing)}")
    reader.fieldnames = fieldnames

    rows: List[MyPreOpCsvRow] = []
    for raw in reader:
        cells = {c: str(raw.get(c) or "") for c in MYPREOP_REQUIRED_COLUMNS}
        # reader.line_num is the physical line the record ended on
        rows.append(MyPreOpCsvRow.model_validate({**cells, "line": reader.line_num}))
    return rows


def parse_mypreop_csv(data: bytes, max_bytes: Optional[int] = None) -> ParsedUpload:
    rows = read_mypreop_rows(data, max_bytes=max_bytes)
    groups = group_rows_by_question(rows)
    questions: List[ParsedQuestion] = []
    mismatches: List[ScalarMismatch] = []
    for group in groups.values():
        questions.append(rows_to_question(group))
        mismatches.extend(find_scalar_mismatches(group))
    return ParsedUpload(
        questions=questions,
        mismatches=mismatches,
        row_count=len(rows),
        split_groups=find_split_groups(rows),
    )


def _question_rows(q: StoredQuestion) -> Iterable[dict]:
    scalar = {
        "Id": q.question_id,
        "Section": q.section,
        "Page": q.page,
        "ItemType": q.item_type,
        "Question": q.question_text,
        "Required": "TRUE" if q.required else "FALSE",
        "EnableWhen": format_enable_when(q.enable_when),
        "HasHelper": "TRUE" if q.has_helper else "FALSE",
        "HelperType": q.helper_type or "",
        "HelperName": q.helper_name or "",
        "HelperValue": q.helper_value or "",
    }
    options = split_answer_options(q.answer_options)
    if not options:
        yield {**scalar, "Option": "", "Characteristic": q.characteristic or ""}
        return
    tokens = parse_characteristics(q.characteristic)
    for idx, option in enumerate(options):
        yield {**scalar, "Option": option, "Characteristic": tokens[idx] if idx < len(tokens) else ""}


def build_export_csv(questions: Iterable[StoredQuestion]) -> bytes:
    buf = io.StringIO(newline="")
    writer = csv.DictWriter(buf, fieldnames=HEADER)
    writer.writeheader()
    for q in questions:
        for row in _question_rows(q):
            writer.writerow(row)
    return buf.getvalue().encode("utf-8")


__all__ = [
    "HEADER",
    "ParsedUpload",
    "read_mypreop_rows",
    "parse_mypreop_csv",
    "build_export_csv",
]
