"""Response model: one candidate's attempt at an interview."""

import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy import func
from sqlalchemy.orm import relationship

from vocalhire.config.database import Base


class CandidateStatus(str, enum.Enum):
    """Recruiter's decision on a response."""

    NO_STATUS = "NO_STATUS"
    NOT_SELECTED = "NOT_SELECTED"
    POTENTIAL = "POTENTIAL"
    SELECTED = "SELECTED"


class Response(Base):
    """
    A call made against an interview.

    Rows are keyed externally by `call_id` (assigned by the voice provider).
    They are created on call registration, on the first webhook that
    mentions the call, or by backfill, and are only removed by an explicit
    delete from the dashboard.

    `details` holds the raw provider call payload; `analytics` holds the
    derived scores and summary.
    """

    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    interview_id = Column(String(36), ForeignKey("interviews.id"), nullable=False, index=True)
    call_id = Column(String(255), unique=True, nullable=False)

    # Candidate
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)

    # Call state
    is_ended = Column(Boolean, default=False)
    is_analysed = Column(Boolean, default=False)
    is_viewed = Column(Boolean, default=False)
    candidate_status = Column(String(20), default=CandidateStatus.NO_STATUS.value)

    # Payloads
    details = Column(JSON, nullable=True)
    analytics = Column(JSON, nullable=True)

    # Proctoring / timing
    tab_switch_count = Column(Integer, default=0)
    duration = Column(Integer, default=0)  # seconds

    created_at = Column(DateTime, default=func.now())

    interview = relationship("Interview", back_populates="responses")

    def __repr__(self) -> str:
        return f"<Response(id={self.id}, call_id={self.call_id}, ended={self.is_ended})>"
