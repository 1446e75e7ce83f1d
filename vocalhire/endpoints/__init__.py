"""API endpoints for VocalHire."""

from fastapi import APIRouter

from .health import router as health_router
from .register_call import router as register_call_router
from .webhooks import router as webhooks_router
from .calls import router as calls_router
from .phone_numbers import router as phone_numbers_router
from .interviews import router as interviews_router
from .interviewers import router as interviewers_router
from .responses import router as responses_router
from .public import router as public_router

# Create main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(register_call_router, tags=["Calls"])
api_router.include_router(calls_router, tags=["Calls"])
api_router.include_router(webhooks_router, tags=["Webhooks"])
api_router.include_router(phone_numbers_router, prefix="/phone-numbers", tags=["Phone Numbers"])
api_router.include_router(interviews_router, prefix="/interviews", tags=["Interviews"])
api_router.include_router(interviewers_router, prefix="/interviewers", tags=["Interviewers"])
api_router.include_router(responses_router, prefix="/responses", tags=["Responses"])
api_router.include_router(public_router, prefix="/public", tags=["Public"])

__all__ = ["api_router"]
