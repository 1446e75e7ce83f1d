"""Voice provider webhooks."""

import json
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from vocalhire.config.database import get_db
from vocalhire.config.settings import settings
from vocalhire.integrations.retell import (
    SIGNATURE_HEADER,
    RetellClient,
    get_retell_client,
    verify_signature,
)
from vocalhire.middleware.error_handler import BadRequestError, UnauthorizedError
from vocalhire.schemas.calls import KNOWN_EVENTS, WebhookAck, call_event_adapter
from vocalhire.services.call_reconciler import WebhookReconciler

logger = structlog.get_logger()
router = APIRouter()


@router.post("/response-webhook", response_model=WebhookAck)
async def response_webhook(
    request: Request,
    db: Session = Depends(get_db),
    retell: RetellClient = Depends(get_retell_client),
):
    """
    Receive call lifecycle events from the voice provider.

    Unknown event kinds are acknowledged and ignored so the provider does
    not keep redelivering them.
    """
    raw_body = (await request.body()).decode("utf-8")

    if settings.verify_webhook_signatures and not verify_signature(
        raw_body,
        settings.RETELL_API_KEY,
        request.headers.get(SIGNATURE_HEADER),
        tolerance_seconds=settings.WEBHOOK_SIGNATURE_TOLERANCE_SECONDS,
    ):
        logger.warning("Webhook signature rejected", client=request.client.host if request.client else None)
        raise UnauthorizedError("Invalid webhook signature")

    try:
        body = json.loads(raw_body)
    except ValueError:
        raise BadRequestError("Invalid JSON body")

    event_name = body.get("event") if isinstance(body, dict) else None
    if event_name not in KNOWN_EVENTS:
        logger.info("Ignoring unsupported webhook event", event_name=event_name)
        return WebhookAck(event=event_name, handled=False)

    try:
        event = call_event_adapter.validate_python(body)
    except ValidationError as e:
        logger.warning("Malformed call event", event_name=event_name, error=str(e))
        raise BadRequestError("Malformed call event: call.call_id is required", field="call")

    logger.info("Webhook received", event_name=event_name, call_id=event.call.call_id)
    await WebhookReconciler(db, retell).handle_event(event)

    return WebhookAck(event=event_name)


@router.get("/test-webhook")
async def test_webhook_get(request: Request) -> dict:
    """Reachability check for provider webhook configuration."""
    logger.info("Test webhook called", method="GET", url=str(request.url))
    return {
        "success": True,
        "message": "Webhook test endpoint is working properly",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/test-webhook")
async def test_webhook_post(request: Request) -> dict:
    """Echo a posted body back, parsed when it is JSON."""
    raw_body = (await request.body()).decode("utf-8", errors="replace")
    try:
        received = json.loads(raw_body)
    except ValueError:
        received = {"error": "Could not parse JSON body", "raw": raw_body}

    logger.info("Test webhook called", method="POST", url=str(request.url), body=received)
    return {
        "success": True,
        "message": "Webhook POST test endpoint is working properly",
        "receivedData": received,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
