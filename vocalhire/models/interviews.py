"""Interview model for configured interview campaigns."""

import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, ForeignKey
from sqlalchemy import func
from sqlalchemy.orm import relationship

from vocalhire.config.database import Base


class Interview(Base):
    """
    A configured interview campaign.

    Interview Types:
    - web: Candidate joins a browser call via the interview link
    - phone: Candidate dials a phone number linked to the agent

    JSON columns:
    - questions: [{"question": "..."}]
    - metric_weights: {"communication": 0.4, ...}
    - respondents: ["allowed@example.com", ...] or NULL for open interviews
    """

    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    objective = Column(Text, nullable=True)

    # Ownership
    organization_id = Column(String(255), nullable=True, index=True)
    user_id = Column(String(255), nullable=True)

    # Agent configuration
    interviewer_id = Column(Integer, ForeignKey("interviewers.id"), nullable=True)
    agent_id = Column(String(255), nullable=True)
    interview_type = Column(String(10), default="web")

    # Flags
    is_active = Column(Boolean, default=True)
    is_anonymous = Column(Boolean, default=False)

    # Presentation
    theme_color = Column(String(20), nullable=True)
    logo_url = Column(String(500), nullable=True)
    url = Column(String(500), nullable=True)
    readable_slug = Column(String(255), nullable=True)

    # Content
    questions = Column(JSON, nullable=True)
    metric_weights = Column(JSON, nullable=True)
    respondents = Column(JSON, nullable=True)
    question_count = Column(Integer, nullable=True)
    time_duration = Column(String(10), default="10")  # minutes
    job_context = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now())

    # Relationships
    interviewer = relationship("Interviewer", back_populates="interviews")
    responses = relationship("Response", back_populates="interview", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Interview(id={self.id}, type={self.interview_type})>"
