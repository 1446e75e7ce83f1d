"""Web call registration for the candidate call page."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.integrations.retell import RetellClient, RetellError, get_retell_client
from vocalhire.middleware.error_handler import BadRequestError, ProviderError
from vocalhire.models import CandidateStatus
from vocalhire.schemas.calls import RegisterCallRequest, RegisterCallResponse
from vocalhire.services.interview_service import InterviewService
from vocalhire.services.response_service import ResponseService

logger = structlog.get_logger()
router = APIRouter()


@router.post("/register-call", response_model=RegisterCallResponse)
async def register_call(
    data: RegisterCallRequest,
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
):
    """
    Register a browser call with the interviewer's agent.

    Real interviews get a response row immediately so the end-of-call save
    and the webhooks have something to update. Practice calls are never
    stored.
    """
    if not data.interviewer_id:
        raise BadRequestError("Missing interviewer_id", field="interviewerId")
    if not data.is_practice and not data.interview_id:
        raise BadRequestError("Missing interview_id", field="interviewId")

    interviews = InterviewService(db)
    interviewer = interviews.get_interviewer(data.interviewer_id)
    if not interviewer.agent_id:
        raise BadRequestError("Interviewer has no agent configured", field="interviewerId")
    if not data.is_practice:
        interviews.get(data.interview_id)

    metadata = {"is_practice": True} if data.is_practice else {"interview_id": data.interview_id}

    try:
        created = await retell.create_web_call(
            interviewer.agent_id,
            dynamic_variables=data.dynamic_data,
            metadata=metadata,
        )
    except RetellError as e:
        raise ProviderError(f"Failed to register call: {e.message}", provider_status=e.status_code) from e

    call_id = created.get("call_id")
    if not call_id or not created.get("access_token"):
        raise ProviderError("Voice provider returned no call credentials")

    if not data.is_practice:
        ResponseService(db).create_if_absent(
            call_id,
            data.interview_id,
            name=data.name,
            email=data.email,
            candidate_status=CandidateStatus.NO_STATUS.value,
            is_ended=False,
            duration=0,
            tab_switch_count=0,
        )

    logger.info(
        "Call registered",
        call_id=call_id,
        interview_id=data.interview_id,
        agent_id=interviewer.agent_id,
        practice=data.is_practice,
    )

    return RegisterCallResponse(register_call_response=created)
