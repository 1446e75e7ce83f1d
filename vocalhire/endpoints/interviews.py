"""Interview endpoints for the dashboard."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.middleware.auth import get_current_org
from vocalhire.middleware.error_handler import BadRequestError
from vocalhire.schemas.interviews import InterviewAgentUpdate, InterviewEnvelope, InterviewUpdate
from vocalhire.services.identity import CurrentUser
from vocalhire.services.interview_service import InterviewService

logger = structlog.get_logger()
router = APIRouter()


@router.get("/{interview_id}", response_model=InterviewEnvelope)
async def get_interview(
    interview_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    """Get an interview by ID."""
    interview = InterviewService(db).get(interview_id, user.org_id)
    return InterviewEnvelope(interview=interview)


@router.post("/{interview_id}/update", response_model=InterviewEnvelope)
async def update_interview_agent(
    interview_id: str,
    data: InterviewAgentUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    """Attach a provider agent to an interview."""
    if not data.agent_id:
        raise BadRequestError("Missing agent_id in request body", field="agentId")

    interview = InterviewService(db).set_agent(interview_id, data.agent_id, user.org_id)
    return InterviewEnvelope(interview=interview)


@router.patch("/{interview_id}", response_model=InterviewEnvelope)
async def update_interview(
    interview_id: str,
    data: InterviewUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    """Toggle an interview open/closed or change its theme color."""
    interview = InterviewService(db).update(interview_id, user.org_id, **data.model_dump(exclude_unset=True))
    return InterviewEnvelope(interview=interview)
