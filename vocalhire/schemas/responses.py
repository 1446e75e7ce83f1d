"""Pydantic schemas for Response endpoints."""

from datetime import datetime
from typing import Any, Optional

from vocalhire.models.responses import CandidateStatus

from .base import CamelModel


class ResponseItem(CamelModel):
    """A stored response as shown on the dashboard."""

    id: int
    interview_id: str
    call_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    is_ended: bool = False
    is_analysed: bool = False
    is_viewed: bool = False
    candidate_status: str = CandidateStatus.NO_STATUS.value
    details: Optional[dict[str, Any]] = None
    analytics: Optional[dict[str, Any]] = None
    tab_switch_count: int = 0
    duration: int = 0
    created_at: Optional[datetime] = None


class ResponseList(CamelModel):
    responses: list[ResponseItem]


class ResponseEnvelope(CamelModel):
    response: ResponseItem


class ResponseUpdate(CamelModel):
    """Recruiter-side changes to a response."""

    candidate_status: Optional[CandidateStatus] = None
    is_viewed: Optional[bool] = None


class CandidateResponseUpdate(CamelModel):
    """End-of-call save from the candidate call page."""

    is_ended: Optional[bool] = None
    tab_switch_count: Optional[int] = None
