"""Pydantic schemas for the post-interview feedback form."""

from typing import Optional

from pydantic import Field

from .base import CamelModel


class FeedbackCreate(CamelModel):
    interview_id: str
    email: Optional[str] = None
    satisfaction: Optional[int] = Field(default=None, ge=0, le=2)
    feedback: Optional[str] = None


class FeedbackResponse(CamelModel):
    id: int
    interview_id: str
    email: Optional[str] = None
    satisfaction: Optional[int] = None
    feedback: Optional[str] = None
