"""Pydantic schemas for phone number provisioning and call backfill."""

from datetime import datetime
from typing import Any, Optional, Union

from .base import CamelModel
from .responses import ResponseItem


class PhoneNumberItem(CamelModel):
    id: int
    number: str
    is_available: bool = True
    agent_linked: Optional[str] = None
    interview_id: Optional[str] = None
    organization_id: Optional[str] = None
    nickname: Optional[str] = None
    created_at: Optional[datetime] = None


class PhoneNumberEnvelope(CamelModel):
    phone_number: PhoneNumberItem


class PhoneNumberList(CamelModel):
    phone_numbers: list[PhoneNumberItem]


class AcquirePhoneNumberRequest(CamelModel):
    # Validated in the service so a malformed code gets the provider-style message.
    area_code: Optional[Union[str, int]] = None
    nickname: Optional[str] = None


class LinkPhoneNumberRequest(CamelModel):
    phone_number_id: Optional[int] = None
    agent_id: Optional[str] = None
    interview_id: Optional[str] = None
    nickname: Optional[str] = None


class UnlinkPhoneNumberRequest(CamelModel):
    phone_number_id: Optional[int] = None


class ListAgentCallsRequest(CamelModel):
    agent_id: Optional[str] = None
    interview_id: Optional[str] = None


class ListAgentCallsResponse(CamelModel):
    """Outcome of an agent backfill run."""

    success: bool = True
    total_calls: int
    new_calls: int
    call_ids: list[str]
    failed_call_ids: list[str] = []
    responses: list[ResponseItem]


class PhoneNumberCallsResponse(CamelModel):
    responses: list[ResponseItem]
    phone_number: Optional[PhoneNumberItem] = None


class NumberProviderCalls(CamelModel):
    phone_number: str
    calls: list[dict[str, Any]]
