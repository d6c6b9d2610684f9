"""Trust instance endpoints used by respondents."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from preop_review.http.problem import problem
from preop_review.logic.question_views import question_views
from preop_review.logic.repository_instances import get_instance, list_instance_questions


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/api/v1/instances/{trust_link_id}",
    summary="Get a trust instance with explained display logic",
    operation_id="getInstance",
    tags=["Instances"],
)
def get_instance_view(trust_link_id: str):
    instance = get_instance(trust_link_id)
    if instance is None:
        raise problem(404, "Questionnaire not found", "The link may be invalid.")
    questions = list_instance_questions(instance.instance_id)
    logger.info(
        "instance_viewed",
        extra={"instance_id": instance.instance_id, "question_count": len(questions)},
    )
    return {
        "trust_name": instance.trust_name,
        "created_at": instance.created_at,
        "question_count": len(questions),
        "questions": question_views(questions),
    }


__all__ = ["router"]
