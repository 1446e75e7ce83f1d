"""Pydantic schemas for API request/response validation.

All schemas use CamelCase for JSON field names (via alias_generator).
"""

from .base import CamelModel, ErrorResponse

# Re-export all schemas
from .calls import (
    TranscriptTurn,
    ProviderCall,
    CallStartedEvent,
    CallEndedEvent,
    CallAnalyzedEvent,
    CallEvent,
    KNOWN_EVENTS,
    call_event_adapter,
    WebhookAck,
    RegisterCallRequest,
    RegisterCallResponse,
    GetCallRequest,
    GetCallResponse,
)
from .interviews import (
    InterviewResponse,
    InterviewEnvelope,
    InterviewAgentUpdate,
    InterviewUpdate,
    PublicInterviewInfo,
    RespondentCheckRequest,
    RespondentCheckResponse,
)
from .interviewers import InterviewerResponse, InterviewerEnvelope
from .responses import (
    ResponseItem,
    ResponseList,
    ResponseEnvelope,
    ResponseUpdate,
    CandidateResponseUpdate,
)
from .phone_numbers import (
    PhoneNumberItem,
    PhoneNumberEnvelope,
    PhoneNumberList,
    AcquirePhoneNumberRequest,
    LinkPhoneNumberRequest,
    UnlinkPhoneNumberRequest,
    ListAgentCallsRequest,
    ListAgentCallsResponse,
    PhoneNumberCallsResponse,
    NumberProviderCalls,
)
from .feedback import FeedbackCreate, FeedbackResponse

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "TranscriptTurn",
    "ProviderCall",
    "CallStartedEvent",
    "CallEndedEvent",
    "CallAnalyzedEvent",
    "CallEvent",
    "KNOWN_EVENTS",
    "call_event_adapter",
    "WebhookAck",
    "RegisterCallRequest",
    "RegisterCallResponse",
    "GetCallRequest",
    "GetCallResponse",
    "InterviewResponse",
    "InterviewEnvelope",
    "InterviewAgentUpdate",
    "InterviewUpdate",
    "PublicInterviewInfo",
    "RespondentCheckRequest",
    "RespondentCheckResponse",
    "InterviewerResponse",
    "InterviewerEnvelope",
    "ResponseItem",
    "ResponseList",
    "ResponseEnvelope",
    "ResponseUpdate",
    "CandidateResponseUpdate",
    "PhoneNumberItem",
    "PhoneNumberEnvelope",
    "PhoneNumberList",
    "AcquirePhoneNumberRequest",
    "LinkPhoneNumberRequest",
    "UnlinkPhoneNumberRequest",
    "ListAgentCallsRequest",
    "ListAgentCallsResponse",
    "PhoneNumberCallsResponse",
    "NumberProviderCalls",
    "FeedbackCreate",
    "FeedbackResponse",
]
