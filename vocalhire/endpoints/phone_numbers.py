"""Phone number provisioning, linking and call backfill endpoints."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.integrations.retell import RetellClient, RetellError, get_retell_client
from vocalhire.middleware.auth import get_current_org
from vocalhire.middleware.error_handler import BadRequestError, ProviderError
from vocalhire.schemas.calls import ProviderCall
from vocalhire.schemas.phone_numbers import (
    AcquirePhoneNumberRequest,
    LinkPhoneNumberRequest,
    ListAgentCallsRequest,
    ListAgentCallsResponse,
    NumberProviderCalls,
    PhoneNumberCallsResponse,
    PhoneNumberEnvelope,
    PhoneNumberList,
    UnlinkPhoneNumberRequest,
)
from vocalhire.services.call_reconciler import WebhookReconciler
from vocalhire.services.identity import CurrentUser
from vocalhire.services.interview_service import InterviewService
from vocalhire.services.phone_number_service import PhoneNumberService
from vocalhire.services.response_service import ResponseService

logger = structlog.get_logger()
router = APIRouter()


def provider_failure(action: str, error: RetellError) -> ProviderError:
    return ProviderError(f"Failed to {action}: {error.message}", provider_status=error.status_code)


@router.get("", response_model=PhoneNumberList)
async def list_phone_numbers(
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """List the organization's phone numbers."""
    return PhoneNumberList(phone_numbers=PhoneNumberService(db, retell).list_for_organization(user.org_id))


@router.get("/available", response_model=PhoneNumberList)
async def list_available_phone_numbers(
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """List the organization's numbers not linked to any interview."""
    return PhoneNumberList(phone_numbers=PhoneNumberService(db, retell).list_available(user.org_id))


@router.post("/acquire", response_model=PhoneNumberEnvelope)
async def acquire_phone_number(
    data: AcquirePhoneNumberRequest,
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """Buy a new number in an area code."""
    try:
        phone_number = await PhoneNumberService(db, retell).acquire(user.org_id, data.area_code, data.nickname)
    except RetellError as e:
        raise provider_failure("acquire phone number", e) from e

    return PhoneNumberEnvelope(phone_number=phone_number)


@router.post("/link", response_model=PhoneNumberEnvelope)
async def link_phone_number(
    data: LinkPhoneNumberRequest,
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """Route a number's inbound calls to an interview's agent."""
    if not data.phone_number_id:
        raise BadRequestError("Missing phone number ID", field="phoneNumberId")
    if not data.agent_id:
        raise BadRequestError("Missing agent ID", field="agentId")
    if not data.interview_id:
        raise BadRequestError("Missing interview ID", field="interviewId")

    InterviewService(db).get(data.interview_id, user.org_id)

    try:
        phone_number = await PhoneNumberService(db, retell).link(
            data.phone_number_id,
            data.agent_id,
            data.interview_id,
            organization_id=user.org_id,
            nickname=data.nickname,
        )
    except RetellError as e:
        raise provider_failure("link phone number", e) from e

    return PhoneNumberEnvelope(phone_number=phone_number)


@router.post("/unlink", response_model=PhoneNumberEnvelope)
async def unlink_phone_number(
    data: UnlinkPhoneNumberRequest,
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """Return a number to the available pool."""
    if not data.phone_number_id:
        raise BadRequestError("Missing phone number ID", field="phoneNumberId")

    try:
        phone_number = await PhoneNumberService(db, retell).unlink(data.phone_number_id, organization_id=user.org_id)
    except RetellError as e:
        raise provider_failure("unlink phone number", e) from e

    return PhoneNumberEnvelope(phone_number=phone_number)


@router.get("/calls", response_model=PhoneNumberCallsResponse)
async def phone_number_calls(
    interview_id: Optional[str] = Query(None, alias="interviewId"),
    phone_number_id: Optional[int] = Query(None, alias="phoneNumberId"),
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """
    Responses for an interview.

    When a phone number is given, ended calls on that number which never
    reached the webhook are stored first.
    """
    if not interview_id:
        raise BadRequestError("Missing interview ID", field="interviewId")

    InterviewService(db).get(interview_id, user.org_id)

    phone_number = None
    if phone_number_id:
        phone_number = PhoneNumberService(db, retell).get(phone_number_id, user.org_id)
        try:
            await WebhookReconciler(db, retell).sync_phone_number_calls(interview_id, phone_number.number)
        except RetellError as e:
            raise provider_failure("fetch calls", e) from e

    return PhoneNumberCallsResponse(
        responses=ResponseService(db).list_for_interview(interview_id),
        phone_number=phone_number,
    )


@router.get("/calls/{number}", response_model=NumberProviderCalls)
async def provider_calls_for_number(
    number: str,
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """Recent provider calls involving a number."""
    number = number.strip()
    if not number.startswith("+"):
        number = f"+{number}"

    try:
        raw_calls = await retell.list_recent_calls()
    except RetellError as e:
        raise provider_failure("fetch calls", e) from e

    calls = []
    for raw in raw_calls:
        try:
            call = ProviderCall.model_validate(raw)
        except ValidationError as e:
            logger.warning("Skipping malformed provider call", error=str(e))
            continue
        if call.number == number:
            calls.append(raw)
    logger.info("Fetched provider calls for number", number=number, count=len(calls))

    return NumberProviderCalls(phone_number=number, calls=calls)


@router.post("/list-agent-calls", response_model=ListAgentCallsResponse)
async def list_agent_calls(
    data: ListAgentCallsRequest,
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
    user: CurrentUser = Depends(get_current_org),
):
    """Store an agent's ended calls that never reached the webhook."""
    if not data.agent_id:
        raise BadRequestError("Missing agent ID", field="agentId")
    if not data.interview_id:
        raise BadRequestError("Missing interview ID", field="interviewId")

    InterviewService(db).get(data.interview_id, user.org_id)

    try:
        result = await WebhookReconciler(db, retell).list_agent_calls(data.agent_id, data.interview_id)
    except RetellError as e:
        raise provider_failure("fetch calls", e) from e

    return ListAgentCallsResponse(
        total_calls=result.total_calls,
        new_calls=result.new_calls,
        call_ids=result.call_ids,
        failed_call_ids=result.failed_call_ids,
        responses=ResponseService(db).list_for_interview(data.interview_id),
    )
