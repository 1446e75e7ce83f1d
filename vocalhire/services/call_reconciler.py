"""Mirror the provider's view of calls into local responses.

Calls reach us two ways: lifecycle webhooks (which may arrive out of order,
twice, or not at all) and backfill runs that list recent calls from the
provider and fill in whatever the webhooks missed. Both paths converge on
one `responses` row per provider call id.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog
from pydantic import ValidationError
from sqlalchemy.orm import Session

from vocalhire.integrations.retell import RetellClient, RetellError
from vocalhire.models import Interview, Response
from vocalhire.schemas.calls import (
    CallAnalyzedEvent,
    CallEndedEvent,
    CallEvent,
    CallStartedEvent,
    ProviderCall,
)

from .call_analysis import CallAnalysisService, build_analytics
from .caller_names import (
    DEFAULT_CALLER_NAME,
    extract_caller_name,
    name_from_answer,
    name_from_introduction,
)
from .phone_number_service import PhoneNumberService
from .response_service import ResponseService

logger = structlog.get_logger()

NameExtractor = Callable[[ProviderCall], str]


def answer_name(call: ProviderCall) -> str:
    return extract_caller_name(call, strategies=(name_from_answer,))


def introduction_name(call: ProviderCall) -> str:
    return extract_caller_name(call, strategies=(name_from_introduction,))


@dataclass
class BackfillResult:
    """Outcome of one backfill run."""

    total_calls: int = 0
    call_ids: list[str] = field(default_factory=list)
    failed_call_ids: list[str] = field(default_factory=list)

    @property
    def new_calls(self) -> int:
        return len(self.call_ids)


class WebhookReconciler:
    """Applies call lifecycle events and backfills to the response store."""

    def __init__(
        self,
        db: Session,
        retell: RetellClient,
        webhook_name_extractor: NameExtractor = answer_name,
        backfill_name_extractor: NameExtractor = introduction_name,
    ):
        self.db = db
        self.retell = retell
        self.responses = ResponseService(db)
        self.phone_numbers = PhoneNumberService(db, retell)
        self.analysis = CallAnalysisService(db, retell)
        self.webhook_name_extractor = webhook_name_extractor
        self.backfill_name_extractor = backfill_name_extractor

    def resolve_interview_id(self, call: ProviderCall) -> Optional[str]:
        """Interview a call belongs to: metadata, then number, then agent."""
        if call.metadata and call.metadata.get("is_practice"):
            logger.info("Practice call not persisted", call_id=call.call_id)
            return None

        if call.metadata_interview_id:
            return call.metadata_interview_id

        by_number = self.phone_numbers.find_by_number(call.number)
        if by_number and by_number.interview_id:
            return by_number.interview_id

        by_agent = self.phone_numbers.find_by_agent(call.agent_id)
        if by_agent and by_agent.interview_id:
            return by_agent.interview_id

        logger.warning(
            "Could not resolve interview for call",
            call_id=call.call_id,
            agent_id=call.agent_id,
            number=call.number,
        )
        return None

    async def handle_event(self, event: CallEvent) -> Optional[Response]:
        if isinstance(event, CallStartedEvent):
            return self.handle_call_started(event.call)
        if isinstance(event, CallEndedEvent):
            return self.handle_call_ended(event.call)
        if isinstance(event, CallAnalyzedEvent):
            return await self.handle_call_analyzed(event.call)
        raise TypeError(f"Unsupported call event: {type(event).__name__}")

    def handle_call_started(self, call: ProviderCall, interview_id: Optional[str] = None) -> Optional[Response]:
        """Record a new call; a repeated start for a known call id is a no-op."""
        interview_id = interview_id or self.resolve_interview_id(call)
        if not interview_id:
            return None

        response, created = self.responses.create_if_absent(
            call.call_id,
            interview_id,
            name=DEFAULT_CALLER_NAME if call.is_phone_call else "",
            details=call.to_details(),
            is_ended=False,
            is_analysed=False,
        )
        if created:
            logger.info(
                "Call started",
                call_id=call.call_id,
                interview_id=interview_id,
                phone_call=call.is_phone_call,
            )
        else:
            logger.info("Duplicate call_started ignored", call_id=call.call_id)
        return response

    def handle_call_ended(self, call: ProviderCall) -> Optional[Response]:
        """Mark a call ended, creating the row if its start was missed."""
        name = None
        if call.is_phone_call and call.turns():
            name = self.webhook_name_extractor(call)

        response = self.responses.get_by_call_id(call.call_id)
        if response is None:
            interview_id = self.resolve_interview_id(call)
            if not interview_id:
                return None
            response, _ = self.responses.create_if_absent(
                call.call_id,
                interview_id,
                name=name or (DEFAULT_CALLER_NAME if call.is_phone_call else ""),
                details=call.to_details(),
                is_ended=True,
                duration=call.duration_seconds(),
            )
            logger.info("Call ended before start was seen", call_id=call.call_id, interview_id=interview_id)
            return response

        response.is_ended = True
        response.details = call.to_details()
        if call.duration_seconds():
            response.duration = call.duration_seconds()
        # Keep a real name over the placeholder.
        if name and (name != DEFAULT_CALLER_NAME or not response.name):
            response.name = name
        self.db.commit()
        self.db.refresh(response)

        logger.info("Call ended", call_id=call.call_id, interview_id=response.interview_id, name=response.name)
        return response

    async def handle_call_analyzed(self, call: ProviderCall) -> Optional[Response]:
        """Store analytics; if the provider fetch fails keep what the event carried."""
        if self.responses.get_by_call_id(call.call_id) is None:
            interview_id = self.resolve_interview_id(call)
            if not interview_id:
                return None
            self.responses.create_if_absent(
                call.call_id,
                interview_id,
                name=DEFAULT_CALLER_NAME if call.is_phone_call else "",
                details=call.to_details(),
                is_ended=True,
            )

        try:
            await self.analysis.analyze(call.call_id)
        except (RetellError, ValidationError) as e:
            logger.error("Call analysis fetch failed, storing event payload", call_id=call.call_id, error=str(e))
            self.responses.update(call.call_id, is_analysed=True, details=call.to_details())

        return self.responses.get_by_call_id(call.call_id)

    async def list_agent_calls(self, agent_id: str, interview_id: str) -> BackfillResult:
        """Store ended calls for an agent that no webhook delivered.

        Raises:
            RetellError: If the provider listing fails
        """
        raw_calls = await self.retell.list_agent_calls(agent_id)
        logger.info("Listed agent calls", agent_id=agent_id, interview_id=interview_id, count=len(raw_calls))
        return await self._backfill(raw_calls, interview_id, lambda call: True)

    async def sync_phone_number_calls(self, interview_id: str, number: str) -> BackfillResult:
        """Store ended calls on a linked number that no webhook delivered.

        Raises:
            RetellError: If the provider listing fails
        """
        raw_calls = await self.retell.list_recent_calls()
        logger.info("Listed recent calls", interview_id=interview_id, number=number, count=len(raw_calls))
        return await self._backfill(raw_calls, interview_id, lambda call: call.number == number)

    async def _backfill(
        self,
        raw_calls: list[dict[str, Any]],
        interview_id: str,
        belongs: Callable[[ProviderCall], bool],
    ) -> BackfillResult:
        calls = []
        for raw in raw_calls:
            try:
                calls.append(ProviderCall.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed provider call", error=str(e))

        calls = [call for call in calls if belongs(call)]
        result = BackfillResult(total_calls=len(calls))

        existing = self.responses.existing_call_ids(call.call_id for call in calls)
        weights = self._metric_weights(interview_id)

        for call in calls:
            if not call.end_timestamp or call.call_id in existing:
                continue
            try:
                self._store_backfilled_call(call, interview_id, weights)
            except Exception as e:
                # Failures are recorded per call; the batch carries on.
                self.db.rollback()
                logger.exception("Failed to store backfilled call", call_id=call.call_id, error=str(e))
                result.failed_call_ids.append(call.call_id)
                continue

            if not call.call_analysis:
                await self._trigger_analysis(call.call_id)
            result.call_ids.append(call.call_id)

        logger.info(
            "Backfill complete",
            interview_id=interview_id,
            total_calls=result.total_calls,
            new_calls=result.new_calls,
            failed=len(result.failed_call_ids),
        )
        return result

    def _store_backfilled_call(
        self,
        call: ProviderCall,
        interview_id: str,
        weights: Optional[dict[str, float]],
    ) -> None:
        details = call.to_details()
        details.setdefault("metadata", {"interview_id": interview_id})

        self.responses.create_if_absent(
            call.call_id,
            interview_id,
            name=self.backfill_name_extractor(call),
            is_ended=True,
            is_analysed=bool(call.call_analysis),
            details=details,
            analytics=build_analytics(call, weights),
            duration=call.duration_seconds(),
        )

    async def _trigger_analysis(self, call_id: str) -> None:
        try:
            await self.retell.trigger_analysis(call_id)
            logger.info("Triggered call analysis", call_id=call_id)
        except RetellError as e:
            logger.error("Failed to trigger call analysis", call_id=call_id, error=str(e))

    def _metric_weights(self, interview_id: str) -> Optional[dict[str, float]]:
        interview = self.db.query(Interview).filter(Interview.id == interview_id).first()
        return interview.metric_weights if interview else None
