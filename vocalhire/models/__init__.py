"""SQLAlchemy ORM models for VocalHire.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from vocalhire.config.database import Base

from .interviewers import Interviewer
from .interviews import Interview
from .responses import Response, CandidateStatus
from .phone_numbers import PhoneNumber
from .feedback import Feedback

__all__ = [
    "Base",
    "Interviewer",
    "Interview",
    "Response",
    "CandidateStatus",
    "PhoneNumber",
    "Feedback",
]
