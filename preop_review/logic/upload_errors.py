"""Errors raised while accepting a questionnaire upload."""

from __future__ import annotations

from typing import Optional


class UploadError(ValueError):
    # Base class for uploads rejected as a whole; nothing is persisted.
    status_code = 400


class CsvFormatError(UploadError):
    # File cannot be read as a MyPreOp CSV (encoding, header).
    pass


class UploadTooLargeError(CsvFormatError):
    status_code = 413


class UploadValidationError(UploadError):
    # A batch rule failed for one question.

    def __init__(self, message: str, index: Optional[int] = None, question_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.index = index
        self.question_id = question_id


__all__ = ["UploadError", "CsvFormatError", "UploadTooLargeError", "UploadValidationError"]
