"""Suggestion and comment endpoints.

Trust users reach these through their instance link; the master owner gets a
per-trust overview through the admin link. Holding a link is the only access
check.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from preop_review.http.problem import problem
from preop_review.logic.repository_instances import InstanceRow, get_instance
from preop_review.logic.repository_masters import get_master
from preop_review.logic.repository_suggestions import (
    add_comment,
    create_suggestion,
    delete_suggestion,
    get_suggestion,
    list_comments,
    list_suggestions,
    suggestion_counts_by_trust,
    update_suggestion,
)
from preop_review.models.suggestion import (
    CommentCreate,
    CommentList,
    MasterSuggestionSummary,
    Suggestion,
    SuggestionComment,
    SuggestionCreate,
    SuggestionList,
    SuggestionUpdate,
)


router = APIRouter()
logger = logging.getLogger(__name__)


def _instance_or_404(trust_link_id: str) -> InstanceRow:
    instance = get_instance(trust_link_id)
    if instance is None:
        raise problem(404, "Questionnaire not found", "The link may be invalid.")
    return instance


def _suggestion_in(instance: InstanceRow, suggestion_id: str) -> Suggestion:
    suggestion = get_suggestion(suggestion_id)
    if suggestion is None:
        raise problem(404, "Suggestion not found")
    if suggestion.instance_id != instance.instance_id:
        logger.info(
            "suggestion_instance_mismatch",
            extra={"suggestion_id": suggestion_id, "instance_id": instance.instance_id},
        )
        raise problem(403, "Forbidden", "Suggestion does not belong to this questionnaire")
    return suggestion


@router.post(
    "/api/v1/instances/{trust_link_id}/suggestions",
    summary="Suggest a change to one question of a trust instance",
    operation_id="createSuggestion",
    tags=["Suggestions"],
    response_model=Suggestion,
    status_code=201,
)
def submit_suggestion(trust_link_id: str, payload: SuggestionCreate):
    instance = _instance_or_404(trust_link_id)
    created = create_suggestion(instance.instance_id, payload)
    if created is None:
        raise problem(404, "Question not found", f"No question {payload.question_id} in this questionnaire")
    return created


@router.get(
    "/api/v1/instances/{trust_link_id}/suggestions",
    summary="List a trust instance's suggestions, newest first",
    operation_id="listSuggestions",
    tags=["Suggestions"],
    response_model=SuggestionList,
)
def list_instance_suggestions(trust_link_id: str):
    instance = _instance_or_404(trust_link_id)
    suggestions = list_suggestions(instance.instance_id)
    return SuggestionList(trust_name=instance.trust_name, total_count=len(suggestions), suggestions=suggestions)


@router.patch(
    "/api/v1/instances/{trust_link_id}/suggestions/{suggestion_id}",
    summary="Set a suggestion's status or response message",
    operation_id="updateSuggestion",
    tags=["Suggestions"],
    response_model=Suggestion,
)
def triage_suggestion(trust_link_id: str, suggestion_id: str, payload: SuggestionUpdate):
    instance = _instance_or_404(trust_link_id)
    _suggestion_in(instance, suggestion_id)
    changes = {name: getattr(payload, name) for name in payload.model_fields_set}
    # status is NOT NULL; an explicit null is ignored
    if changes.get("status", "") is None:
        del changes["status"]
    if not changes:
        raise problem(400, "Invalid suggestion update", "No valid fields to update")
    updated = update_suggestion(suggestion_id, changes)
    if updated is None:
        raise problem(404, "Suggestion not found")
    return updated


@router.delete(
    "/api/v1/instances/{trust_link_id}/suggestions/{suggestion_id}",
    summary="Delete a suggestion and its comments",
    operation_id="deleteSuggestion",
    tags=["Suggestions"],
    status_code=204,
)
def remove_suggestion(trust_link_id: str, suggestion_id: str):
    instance = _instance_or_404(trust_link_id)
    _suggestion_in(instance, suggestion_id)
    delete_suggestion(suggestion_id)
    return Response(status_code=204)


@router.get(
    "/api/v1/instances/{trust_link_id}/suggestions/{suggestion_id}/comments",
    summary="List the comment thread of a suggestion, oldest first",
    operation_id="listSuggestionComments",
    tags=["Suggestions"],
    response_model=CommentList,
)
def list_suggestion_comments(trust_link_id: str, suggestion_id: str):
    instance = _instance_or_404(trust_link_id)
    _suggestion_in(instance, suggestion_id)
    comments = list_comments(suggestion_id)
    return CommentList(total_count=len(comments), comments=comments)


@router.post(
    "/api/v1/instances/{trust_link_id}/suggestions/{suggestion_id}/comments",
    summary="Add a comment to a suggestion",
    operation_id="createSuggestionComment",
    tags=["Suggestions"],
    response_model=SuggestionComment,
    status_code=201,
)
def comment_on_suggestion(trust_link_id: str, suggestion_id: str, payload: CommentCreate):
    instance = _instance_or_404(trust_link_id)
    _suggestion_in(instance, suggestion_id)
    return add_comment(suggestion_id, payload)


@router.get(
    "/api/v1/masters/{admin_link_id}/suggestions",
    summary="Suggestion counts by status for every trust instance of a master",
    operation_id="getMasterSuggestionSummary",
    tags=["Suggestions"],
    response_model=MasterSuggestionSummary,
)
def master_suggestion_summary(admin_link_id: str):
    master = get_master(admin_link_id)
    if master is None:
        raise problem(404, "Master questionnaire not found")
    return MasterSuggestionSummary(master_name=master.name, trusts=suggestion_counts_by_trust(master.master_id))


__all__ = ["router"]
