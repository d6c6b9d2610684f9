"""Master questionnaire upload, display and export endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, File, Query, Request, Response, UploadFile
from pydantic import BaseModel, Field

from preop_review.config import load_config
from preop_review.http.problem import problem
from preop_review.logic.csv_io import ParsedUpload, build_export_csv, parse_mypreop_csv
from preop_review.logic.question_views import question_views
from preop_review.logic.repository_instances import create_instance
from preop_review.logic.repository_masters import create_master, delete_master, get_master, list_master_questions
from preop_review.logic.upload_errors import UploadError, UploadValidationError
from preop_review.logic.validation import validate_questions
from preop_review.models.question import ParsedQuestion


router = APIRouter()
logger = logging.getLogger(__name__)


class UploadPreview(BaseModel):
    questions: List[ParsedQuestion]
    warnings: List[str]
    row_count: int


class MasterCreated(BaseModel):
    admin_link_id: str
    question_count: int
    warnings: List[str]


class InstanceCreate(BaseModel):
    trust_name: str = Field(min_length=1, max_length=255)


class InstanceCreated(BaseModel):
    trust_link_id: str
    question_count: int


async def _read_upload(request: Request, file: Optional[UploadFile]) -> tuple[bytes, str]:
    if file is not None:
        return await file.read(), "multipart"
    # Raw text/csv body
    return await request.body(), "raw"


def _upload_problem(exc: UploadError):
    extra = {}
    if isinstance(exc, UploadValidationError) and exc.index is not None:
        extra = {"question_index": exc.index, "question_id": exc.question_id}
    return problem(exc.status_code, "Invalid questionnaire upload", str(exc), **extra)


def _parse_and_validate(data: bytes, source: str) -> tuple[ParsedUpload, List[str]]:
    cfg = load_config().upload
    logger.info("questionnaire_upload_received", extra={"source": source, "size_bytes": len(data)})
    try:
        parsed = parse_mypreop_csv(data, max_bytes=cfg.max_bytes)
        warnings = validate_questions(parsed.questions, cfg, parsed.mismatches, parsed.split_groups)
    except UploadError as exc:
        logger.info(
            "questionnaire_upload_rejected",
            extra={"source": source, "reason": str(exc), "error_type": type(exc).__name__},
        )
        raise _upload_problem(exc) from exc
    return parsed, warnings


@router.post(
    "/api/v1/masters/preview",
    summary="Parse and validate a MyPreOp CSV without saving it",
    operation_id="previewMasterCsv",
    tags=["Masters"],
    response_model=UploadPreview,
)
async def preview_master(request: Request, file: UploadFile | None = File(None)):
    data, source = await _read_upload(request, file)
    parsed, warnings = _parse_and_validate(data, source)
    return UploadPreview(questions=parsed.questions, warnings=warnings, row_count=parsed.row_count)


@router.post(
    "/api/v1/masters",
    summary="Upload a master questionnaire",
    operation_id="createMaster",
    tags=["Masters"],
    response_model=MasterCreated,
)
async def upload_master(
    request: Request,
    name: str | None = Query(None, max_length=255),
    file: UploadFile | None = File(None),
):
    if not (name or "").strip():
        raise problem(400, "Invalid questionnaire upload", "Questionnaire name is required")
    data, source = await _read_upload(request, file)
    parsed, warnings = _parse_and_validate(data, source)
    master = create_master(name or "", parsed.questions, link_id_bytes=load_config().links.link_id_bytes)
    return MasterCreated(
        admin_link_id=master.admin_link_id,
        question_count=len(parsed.questions),
        warnings=warnings,
    )


def _master_or_404(admin_link_id: str):
    master = get_master(admin_link_id)
    if master is None:
        raise problem(404, "Master questionnaire not found")
    return master


@router.get(
    "/api/v1/masters/{admin_link_id}",
    summary="Get a master questionnaire with explained display logic",
    operation_id="getMaster",
    tags=["Masters"],
)
def get_master_view(admin_link_id: str):
    master = _master_or_404(admin_link_id)
    questions = list_master_questions(master.master_id)
    return {
        "name": master.name,
        "created_at": master.created_at,
        "question_count": len(questions),
        "questions": question_views(questions),
    }


@router.delete(
    "/api/v1/masters/{admin_link_id}",
    summary="Delete a master with its trust instances and suggestions",
    operation_id="deleteMaster",
    tags=["Masters"],
    status_code=204,
)
def delete_master_view(admin_link_id: str):
    if not delete_master(admin_link_id):
        raise problem(404, "Master questionnaire not found")
    return Response(status_code=204)


@router.get(
    "/api/v1/masters/{admin_link_id}/export",
    summary="Export a master questionnaire as MyPreOp CSV",
    operation_id="exportMasterCsv",
    tags=["Masters"],
)
def export_master(admin_link_id: str):
    master = _master_or_404(admin_link_id)
    data = build_export_csv(list_master_questions(master.master_id))
    return Response(
        content=data,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="questionnaire.csv"'},
    )


@router.post(
    "/api/v1/masters/{admin_link_id}/instances",
    summary="Create a trust instance from a master",
    operation_id="createInstance",
    tags=["Instances"],
    response_model=InstanceCreated,
    status_code=201,
)
def create_master_instance(admin_link_id: str, payload: InstanceCreate):
    trust_name = payload.trust_name.strip()
    if not trust_name:
        raise problem(400, "Invalid instance", "Trust name is required")
    created = create_instance(admin_link_id, trust_name, link_id_bytes=load_config().links.link_id_bytes)
    if created is None:
        raise problem(404, "Master questionnaire not found")
    instance, count = created
    return InstanceCreated(trust_link_id=instance.trust_link_id, question_count=count)


__all__ = ["router"]
