"""Interviewer model: a voice persona backed by a provider agent."""

from sqlalchemy import Column, Integer, String, Text, DateTime, func
from sqlalchemy.orm import relationship

from vocalhire.config.database import Base


class Interviewer(Base):
    """
    An AI interviewer persona.

    `agent_id` references the agent owned by the voice provider; calls are
    registered against it. The trait scores (1-10) are display-only.
    """

    __tablename__ = "interviewers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    agent_id = Column(String(255), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    audio = Column(String(500), nullable=True)

    rapport = Column(Integer, nullable=True)
    exploration = Column(Integer, nullable=True)
    empathy = Column(Integer, nullable=True)
    speed = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=func.now())

    interviews = relationship("Interview", back_populates="interviewer")

    def __repr__(self) -> str:
        return f"<Interviewer(id={self.id}, name={self.name})>"
