"""Collaborators a call session drives: the voice transport and the microphone."""

from typing import Any, Awaitable, Callable, Optional, Protocol

# Transport events a session understands.
CALL_STARTED = "call_started"
CALL_ENDED = "call_ended"
AGENT_START_TALKING = "agent_start_talking"
AGENT_STOP_TALKING = "agent_stop_talking"
UPDATE = "update"
ERROR = "error"

TransportListener = Callable[[str, Optional[dict[str, Any]]], Awaitable[None]]


class CallTransport(Protocol):
    """Real-time voice connection to the provider for one call.

    Implementations deliver events by awaiting the subscribed listener with
    the event name and its payload (`update` carries `{"transcript": [...]}`,
    `error` carries `{"message": ...}`).
    """

    async def start_call(self, access_token: str) -> None: ...

    def stop_call(self) -> None: ...

    def mute(self) -> None: ...

    def unmute(self) -> None: ...

    def subscribe(self, listener: TransportListener) -> None: ...

    def unsubscribe(self) -> None: ...


class MicrophoneProbe(Protocol):
    """Access to the local audio input device."""

    async def query_permission(self) -> str:
        """Current permission: "granted", "denied" or "prompt"."""
        ...

    async def acquire(self) -> None:
        """Open and immediately release the device; raises if unusable."""
        ...
