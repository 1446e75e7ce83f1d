"""Interview lookups and updates shared by dashboard and candidate routes."""

from typing import Optional

import structlog
from sqlalchemy.orm import Session

from vocalhire.middleware.error_handler import NotFoundError
from vocalhire.models import Interview, Interviewer

from .response_service import ResponseService

logger = structlog.get_logger()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class InterviewService:
    """Interview logic for the dashboard and the candidate call page."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, interview_id: str, organization_id: Optional[str] = None) -> Interview:
        """Fetch an interview, scoped to an organization when one is given."""
        query = self.db.query(Interview).filter(Interview.id == interview_id)
        if organization_id is not None:
            query = query.filter(Interview.organization_id == organization_id)
        interview = query.first()
        if not interview:
            raise NotFoundError("Interview", interview_id)
        return interview

    def get_interviewer(self, interviewer_id: int) -> Interviewer:
        interviewer = self.db.query(Interviewer).filter(Interviewer.id == interviewer_id).first()
        if not interviewer:
            raise NotFoundError("Interviewer", interviewer_id)
        return interviewer

    def set_agent(self, interview_id: str, agent_id: str, organization_id: Optional[str] = None) -> Interview:
        interview = self.get(interview_id, organization_id)
        interview.agent_id = agent_id
        self.db.commit()
        self.db.refresh(interview)

        logger.info("Interview agent updated", interview_id=interview_id, agent_id=agent_id)
        return interview

    def update(self, interview_id: str, organization_id: Optional[str] = None, **fields) -> Interview:
        interview = self.get(interview_id, organization_id)
        for key, value in fields.items():
            if value is not None:
                setattr(interview, key, value)
        self.db.commit()
        self.db.refresh(interview)

        logger.info("Interview updated", interview_id=interview_id, fields=sorted(fields))
        return interview

    def is_returning_respondent(self, interview: Interview, email: str) -> bool:
        """Whether `email` may not start a new (non-practice) session.

        True when the email already has a response for this interview, or
        when the interview restricts respondents and the email is not listed.
        """
        email = _normalize_email(email)
        previous = {_normalize_email(e) for e in ResponseService(self.db).emails_for_interview(interview.id)}
        if email in previous:
            return True
        if interview.respondents:
            allowed = {_normalize_email(e) for e in interview.respondents}
            return email not in allowed
        return False
