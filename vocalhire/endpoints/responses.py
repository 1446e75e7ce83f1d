"""Response endpoints for the dashboard."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.middleware.auth import get_current_org
from vocalhire.middleware.error_handler import BadRequestError
from vocalhire.models import CandidateStatus, Response
from vocalhire.schemas.responses import ResponseEnvelope, ResponseList, ResponseUpdate
from vocalhire.services.identity import CurrentUser
from vocalhire.services.interview_service import InterviewService
from vocalhire.services.response_service import ResponseService

logger = structlog.get_logger()
router = APIRouter()


def owned_response(db: Session, call_id: str, user: CurrentUser) -> Response:
    """Response by call id, provided its interview belongs to the caller's org."""
    response = ResponseService(db).require(call_id)
    InterviewService(db).get(response.interview_id, user.org_id)
    return response


@router.get("", response_model=ResponseList)
async def list_responses(
    interview_id: Optional[str] = Query(None, alias="interviewId"),
    status: Optional[CandidateStatus] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    """List an interview's responses, newest first, optionally by status."""
    if not interview_id:
        raise BadRequestError("Missing interview ID", field="interviewId")

    InterviewService(db).get(interview_id, user.org_id)
    responses = ResponseService(db).list_for_interview(interview_id, status.value if status else None)
    return ResponseList(responses=responses)


@router.patch("/{call_id}", response_model=ResponseEnvelope)
async def update_response(
    call_id: str,
    data: ResponseUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    """Set the candidate status or mark a response viewed."""
    owned_response(db, call_id, user)

    changes = {}
    if data.candidate_status is not None:
        changes["candidate_status"] = data.candidate_status.value
    if data.is_viewed is not None:
        changes["is_viewed"] = data.is_viewed

    response = ResponseService(db).update(call_id, **changes)
    logger.info("Response updated", call_id=call_id, changes=changes)
    return ResponseEnvelope(response=response)


@router.delete("/{call_id}", status_code=204)
async def delete_response(
    call_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    """Permanently remove a response."""
    owned_response(db, call_id, user)
    ResponseService(db).delete(call_id)
