"""PhoneNumber model for numbers provisioned from the voice provider."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy import func

from vocalhire.config.database import Base


class PhoneNumber(Base):
    """
    A provisioned telephony number.

    A number is either available (no agent, no interview) or linked to
    exactly one (interview, agent) pair; `is_available` is false iff both
    `agent_linked` and `interview_id` are set.
    """

    __tablename__ = "phone_numbers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    number = Column(String(32), unique=True, nullable=False)  # E.164
    is_available = Column(Boolean, default=True, nullable=False)
    agent_linked = Column(String(255), nullable=True, index=True)
    interview_id = Column(String(36), ForeignKey("interviews.id"), nullable=True)
    organization_id = Column(String(255), nullable=True, index=True)
    nickname = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=func.now())

    def __repr__(self) -> str:
        return f"<PhoneNumber(id={self.id}, number={self.number}, available={self.is_available})>"
