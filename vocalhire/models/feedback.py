"""Feedback left by candidates after an interview."""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy import func

from vocalhire.config.database import Base


class Feedback(Base):
    """Post-interview feedback form submission."""

    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    interview_id = Column(String(36), ForeignKey("interviews.id"), nullable=False)
    email = Column(String(255), nullable=True)
    satisfaction = Column(Integer, nullable=True)  # 0 = unhappy, 1 = neutral, 2 = happy
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now())

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, interview_id={self.interview_id})>"
