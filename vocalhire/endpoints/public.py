"""Public endpoints used by the candidate call page (no session required)."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.models import Feedback
from vocalhire.schemas.feedback import FeedbackCreate, FeedbackResponse
from vocalhire.schemas.interviews import (
    PublicInterviewInfo,
    RespondentCheckRequest,
    RespondentCheckResponse,
)
from vocalhire.schemas.responses import CandidateResponseUpdate, ResponseEnvelope
from vocalhire.services.interview_service import InterviewService
from vocalhire.services.response_service import ResponseService

logger = structlog.get_logger()
router = APIRouter()


@router.get("/interviews/{interview_id}", response_model=PublicInterviewInfo)
async def get_public_interview(
    interview_id: str,
    db: Session = Depends(get_db),
):
    """Interview details a candidate needs before joining."""
    return InterviewService(db).get(interview_id)


@router.post("/interviews/{interview_id}/respondent-check", response_model=RespondentCheckResponse)
async def check_respondent(
    interview_id: str,
    data: RespondentCheckRequest,
    db: Session = Depends(get_db),
):
    """Whether this email has already responded or is not on the allow-list."""
    service = InterviewService(db)
    interview = service.get(interview_id)
    is_old_user = service.is_returning_respondent(interview, data.email)

    if is_old_user:
        logger.info("Returning respondent blocked", interview_id=interview_id)
    return RespondentCheckResponse(is_old_user=is_old_user)


@router.patch("/responses/{call_id}", response_model=ResponseEnvelope)
async def save_candidate_response(
    call_id: str,
    data: CandidateResponseUpdate,
    db: Session = Depends(get_db),
):
    """End-of-call save: ended flag and tab switch count."""
    changes = data.model_dump(exclude_none=True)
    response = ResponseService(db).update(call_id, **changes)

    logger.info("Candidate response saved", call_id=call_id, **changes)
    return ResponseEnvelope(response=response)


@router.post("/feedback", response_model=FeedbackResponse, status_code=201)
async def submit_feedback(
    data: FeedbackCreate,
    db: Session = Depends(get_db),
):
    """Store the post-interview feedback form."""
    InterviewService(db).get(data.interview_id)

    feedback = Feedback(
        interview_id=data.interview_id,
        email=data.email,
        satisfaction=data.satisfaction,
        feedback=data.feedback,
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)

    logger.info("Feedback submitted", interview_id=data.interview_id, satisfaction=data.satisfaction)
    return feedback
