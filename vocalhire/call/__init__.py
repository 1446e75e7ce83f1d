"""Candidate-side call session."""

from .api_client import VocalHireAPIError, VocalHireClient
from .session import CallSession, SessionState
from .transport import CallTransport, MicrophoneProbe

__all__ = [
    "CallSession",
    "SessionState",
    "CallTransport",
    "MicrophoneProbe",
    "VocalHireClient",
    "VocalHireAPIError",
]
