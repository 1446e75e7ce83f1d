"""Call detail lookups."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.integrations.retell import RetellClient, RetellError, get_retell_client
from vocalhire.middleware.error_handler import BadRequestError, ProviderError
from vocalhire.schemas.calls import GetCallRequest, GetCallResponse
from vocalhire.services.call_analysis import CallAnalysisService

logger = structlog.get_logger()
router = APIRouter()


@router.post("/get-call", response_model=GetCallResponse)
async def get_call(
    data: GetCallRequest,
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
):
    """Fetch a call and its analytics, storing them on the response.

    Already analysed responses are served from the database.
    """
    if not data.id:
        raise BadRequestError("Missing call id", field="id")

    try:
        call, analytics = await CallAnalysisService(db, retell).analyze(data.id, refresh=False)
    except RetellError as e:
        raise ProviderError(f"Failed to fetch call: {e.message}", provider_status=e.status_code) from e

    return GetCallResponse(call_response=call, analytics=analytics)
