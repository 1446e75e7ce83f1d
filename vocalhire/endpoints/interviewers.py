"""Interviewer persona endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.middleware.auth import get_current_org
from vocalhire.models import Interviewer
from vocalhire.schemas.interviewers import InterviewerEnvelope, InterviewerResponse
from vocalhire.services.identity import CurrentUser
from vocalhire.services.interview_service import InterviewService

router = APIRouter()


@router.get("", response_model=list[InterviewerResponse])
async def list_interviewers(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    return db.query(Interviewer).order_by(Interviewer.id).all()


@router.get("/{interviewer_id}", response_model=InterviewerEnvelope)
async def get_interviewer(
    interviewer_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_org),
):
    interviewer = InterviewService(db).get_interviewer(interviewer_id)
    return InterviewerEnvelope(interviewer=interviewer)
