"""Health probes for load balancers and the orchestrator."""

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocalhire.config.settings import settings
from vocalhire.config.database import get_db

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str
    timestamp: str
    database: str
    voice_provider: str
    webhook_signatures: str


def database_status(db: Session) -> tuple[str, Optional[str]]:
    try:
        db.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        return "disconnected", str(e)
    return "connected", None


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse, include_in_schema=False)
async def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """Component status. The voice provider is only checked for credentials, never called."""
    database, _ = database_status(db)
    return HealthResponse(
        status="healthy" if database == "connected" else "unhealthy",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=database,
        voice_provider="configured" if settings.RETELL_API_KEY else "not_configured",
        webhook_signatures="enforced" if settings.verify_webhook_signatures else "skipped",
    )


@router.get("/ready")
async def readiness_check(db: Session = Depends(get_db)) -> dict:
    """Ready once the database answers; a missing provider key does not block traffic."""
    database, error = database_status(db)
    if error:
        return {"ready": False, "reason": f"Database {database}"}
    return {"ready": True}


@router.get("/live")
async def liveness_check() -> dict:
    return {"alive": True}
