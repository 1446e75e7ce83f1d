"""Response persistence shared by webhooks, backfill and the dashboard."""

from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vocalhire.middleware.error_handler import NotFoundError
from vocalhire.models import Response

logger = structlog.get_logger()


class ResponseService:
    """Reads and writes `responses` rows keyed by provider call id."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_call_id(self, call_id: str) -> Optional[Response]:
        return self.db.query(Response).filter(Response.call_id == call_id).first()

    def require(self, call_id: str) -> Response:
        response = self.get_by_call_id(call_id)
        if not response:
            raise NotFoundError("Response", call_id)
        return response

    def create_if_absent(self, call_id: str, interview_id: str, **fields: Any) -> tuple[Response, bool]:
        """Insert a response unless one already exists for `call_id`.

        Returns the row and whether it was created. A concurrent insert of
        the same call id loses on the unique constraint and gets the winner.
        """
        existing = self.get_by_call_id(call_id)
        if existing:
            return existing, False

        response = Response(call_id=call_id, interview_id=interview_id, **fields)
        self.db.add(response)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_by_call_id(call_id)
            if existing is None:
                raise
            logger.info("Response already created concurrently", call_id=call_id)
            return existing, False

        self.db.refresh(response)
        return response, True

    def update(self, call_id: str, **fields: Any) -> Response:
        """Apply field changes to an existing response (404 if absent)."""
        response = self.require(call_id)
        for key, value in fields.items():
            setattr(response, key, value)
        self.db.commit()
        self.db.refresh(response)
        return response

    def delete(self, call_id: str) -> None:
        response = self.require(call_id)
        self.db.delete(response)
        self.db.commit()
        logger.info("Response deleted", call_id=call_id, interview_id=response.interview_id)

    def list_for_interview(self, interview_id: str, status: Optional[str] = None) -> list[Response]:
        query = self.db.query(Response).filter(Response.interview_id == interview_id)
        if status:
            query = query.filter(Response.candidate_status == status)
        return query.order_by(Response.created_at.desc(), Response.id.desc()).all()

    def existing_call_ids(self, call_ids: Iterable[str]) -> set[str]:
        call_ids = list(call_ids)
        if not call_ids:
            return set()
        rows = self.db.query(Response.call_id).filter(Response.call_id.in_(call_ids)).all()
        return {row[0] for row in rows}

    def emails_for_interview(self, interview_id: str) -> list[str]:
        rows = (
            self.db.query(Response.email)
            .filter(Response.interview_id == interview_id, Response.email.isnot(None))
            .all()
        )
        return [row[0] for row in rows]
