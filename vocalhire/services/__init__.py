"""Domain services used by the API endpoints."""

from .response_service import ResponseService
from .interview_service import InterviewService
from .phone_number_service import PhoneNumberService, parse_area_code
from .call_analysis import CallAnalysisService, build_analytics
from .call_reconciler import WebhookReconciler, BackfillResult
from .caller_names import extract_caller_name, DEFAULT_CALLER_NAME

__all__ = [
    "ResponseService",
    "InterviewService",
    "PhoneNumberService",
    "parse_area_code",
    "CallAnalysisService",
    "build_analytics",
    "WebhookReconciler",
    "BackfillResult",
    "extract_caller_name",
    "DEFAULT_CALLER_NAME",
]
