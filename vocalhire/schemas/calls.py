"""Schemas for provider call payloads and webhook events.

Provider payloads are snake_case and loosely specified, so `ProviderCall`
keeps unknown fields (they are persisted into `Response.details`) while the
fields the reconciler relies on are typed. Webhook bodies are validated into
a tagged variant keyed by `event`.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .base import CamelModel


class TranscriptTurn(BaseModel):
    """One utterance in a call transcript."""

    model_config = ConfigDict(extra="allow")

    role: str
    content: str = ""


class ProviderCall(BaseModel):
    """A call object as returned by the voice provider."""

    model_config = ConfigDict(extra="allow")

    call_id: str = Field(min_length=1)
    agent_id: Optional[str] = None
    call_type: Optional[str] = None  # web_call, phone_call
    call_status: Optional[str] = None
    direction: Optional[str] = None
    phone_number: Optional[str] = None
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    transcript: Optional[Union[str, list[TranscriptTurn]]] = None
    transcript_object: Optional[list[TranscriptTurn]] = None
    start_timestamp: Optional[int] = None  # epoch ms
    end_timestamp: Optional[int] = None  # epoch ms
    call_analysis: Optional[dict[str, Any]] = None

    @property
    def number(self) -> Optional[str]:
        """Our provisioned number involved in the call, if any."""
        return self.phone_number or self.to_number

    @property
    def is_phone_call(self) -> bool:
        return self.call_type == "phone_call" or bool(self.number)

    @property
    def metadata_interview_id(self) -> Optional[str]:
        if self.metadata:
            return self.metadata.get("interview_id")
        return None

    def turns(self) -> list[TranscriptTurn]:
        """Structured transcript, whichever field the provider filled."""
        if self.transcript_object:
            return self.transcript_object
        if isinstance(self.transcript, list):
            return self.transcript
        return []

    def transcript_text(self) -> str:
        """Flat transcript text for free-text matching."""
        if isinstance(self.transcript, str):
            return self.transcript
        return "\n".join(f"{turn.role}: {turn.content}" for turn in self.turns())

    def duration_seconds(self) -> int:
        if self.start_timestamp and self.end_timestamp:
            return max(0, round((self.end_timestamp - self.start_timestamp) / 1000))
        return 0

    def to_details(self) -> dict[str, Any]:
        """JSON-safe payload for storage, unknown fields included."""
        return self.model_dump(mode="json", exclude_none=True)


class CallStartedEvent(BaseModel):
    event: Literal["call_started"]
    call: ProviderCall


class CallEndedEvent(BaseModel):
    event: Literal["call_ended"]
    call: ProviderCall


class CallAnalyzedEvent(BaseModel):
    event: Literal["call_analyzed"]
    call: ProviderCall


CallEvent = Annotated[
    Union[CallStartedEvent, CallEndedEvent, CallAnalyzedEvent],
    Field(discriminator="event"),
]

KNOWN_EVENTS = ("call_started", "call_ended", "call_analyzed")

call_event_adapter = TypeAdapter(CallEvent)


class WebhookAck(CamelModel):
    """Acknowledgement returned to the provider."""

    success: bool = True
    event: Optional[str] = None
    handled: bool = True


class RegisterCallRequest(CamelModel):
    """Request from the candidate call page to start a web call."""

    interviewer_id: Optional[int] = None
    interview_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    dynamic_data: dict[str, Any] = {}
    is_practice: bool = False


class RegisterCallResponse(CamelModel):
    """Provider web call credentials (call_id, access_token, ...)."""

    register_call_response: dict[str, Any]


class GetCallRequest(CamelModel):
    id: Optional[str] = None


class GetCallResponse(CamelModel):
    call_response: dict[str, Any]
    analytics: Optional[dict[str, Any]] = None
