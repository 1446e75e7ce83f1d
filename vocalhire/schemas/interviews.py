"""Pydantic schemas for Interview endpoints."""

from datetime import datetime
from typing import Any, Optional

from .base import CamelModel


class InterviewResponse(CamelModel):
    """Schema for full interview response (dashboard)."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    objective: Optional[str] = None
    organization_id: Optional[str] = None
    user_id: Optional[str] = None
    interviewer_id: Optional[int] = None
    agent_id: Optional[str] = None
    interview_type: str = "web"
    is_active: bool = True
    is_anonymous: bool = False
    theme_color: Optional[str] = None
    logo_url: Optional[str] = None
    url: Optional[str] = None
    readable_slug: Optional[str] = None
    questions: Optional[list[dict[str, Any]]] = None
    metric_weights: Optional[dict[str, float]] = None
    respondents: Optional[list[str]] = None
    question_count: Optional[int] = None
    time_duration: Optional[str] = None
    job_context: Optional[str] = None
    created_at: Optional[datetime] = None


class InterviewEnvelope(CamelModel):
    interview: InterviewResponse


class InterviewAgentUpdate(CamelModel):
    """Body of POST /interviews/{id}/update."""

    agent_id: Optional[str] = None


class InterviewUpdate(CamelModel):
    """Dashboard toggles for an interview."""

    is_active: Optional[bool] = None
    theme_color: Optional[str] = None


class PublicInterviewInfo(CamelModel):
    """What a candidate sees before joining.

    Excludes ownership and the respondents allow-list.
    """

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    objective: Optional[str] = None
    interviewer_id: Optional[int] = None
    interview_type: str = "web"
    is_active: bool = True
    is_anonymous: bool = False
    theme_color: Optional[str] = None
    logo_url: Optional[str] = None
    questions: Optional[list[dict[str, Any]]] = None
    time_duration: Optional[str] = None
    job_context: Optional[str] = None


class RespondentCheckRequest(CamelModel):
    email: str


class RespondentCheckResponse(CamelModel):
    is_old_user: bool
