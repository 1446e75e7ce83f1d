"""Pydantic schemas for Interviewer endpoints."""

from datetime import datetime
from typing import Optional

from .base import CamelModel


class InterviewerResponse(CamelModel):
    id: int
    agent_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[str] = None
    rapport: Optional[int] = None
    exploration: Optional[int] = None
    empathy: Optional[int] = None
    speed: Optional[int] = None
    created_at: Optional[datetime] = None


class InterviewerEnvelope(CamelModel):
    interviewer: InterviewerResponse
