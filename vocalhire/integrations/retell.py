"""Retell voice-agent API client and webhook signature verification."""

import hashlib
import hmac
import time
from typing import Any, Optional

import httpx
import structlog
from fastapi import Request

from vocalhire.config.settings import settings

logger = structlog.get_logger()

SIGNATURE_HEADER = "x-retell-signature"
LIST_CALLS_LIMIT = 50


class RetellError(Exception):
    """Raised when a Retell API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class RetellClient:
    """Async client for the Retell REST API.

    One client is created per application (see `vocalhire.main.lifespan`) and
    shared across requests. Pass `transport` to route requests elsewhere,
    e.g. an `httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.RETELL_API_KEY
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.RETELL_API_BASE_URL,
            timeout=timeout or settings.RETELL_TIMEOUT_SECONDS,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Retell API request failed",
                method=method,
                path=path,
                status_code=e.response.status_code,
                response=e.response.text[:500],
                headers=dict(e.response.headers),
            )
            raise RetellError(
                f"Retell API error {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Retell API request error", method=method, path=path, error=str(e))
            raise RetellError(f"Retell API request error: {str(e)}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "Retell API returned invalid JSON",
                method=method,
                path=path,
                status_code=response.status_code,
                response=response.text[:500],
            )
            raise RetellError(
                "Invalid JSON from Retell API",
                status_code=response.status_code,
                body=response.text,
            ) from e

    # -- Calls ---------------------------------------------------------------

    async def create_web_call(
        self,
        agent_id: str,
        dynamic_variables: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Register a browser call; returns at least `call_id` and `access_token`."""
        payload: dict[str, Any] = {
            "agent_id": agent_id,
            "retell_llm_dynamic_variables": dynamic_variables or {},
        }
        if metadata:
            payload["metadata"] = metadata
        return await self._request("POST", "/v2/create-web-call", json=payload)

    async def get_call(self, call_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v2/get-call/{call_id}")

    async def list_agent_calls(self, agent_id: str, limit: int = LIST_CALLS_LIMIT) -> list[dict[str, Any]]:
        """Most recent calls handled by an agent, newest first."""
        data = await self._request(
            "POST",
            "/v2/list-calls",
            json={
                "sort_order": "descending",
                "limit": limit,
                "filter_criteria": {"agent_id": [agent_id]},
            },
        )
        if isinstance(data, dict):
            return data.get("calls", [])
        return data

    async def list_recent_calls(self, limit: int = LIST_CALLS_LIMIT) -> list[dict[str, Any]]:
        """Most recent calls across the account (legacy listing)."""
        data = await self._request("GET", "/v1/calls", params={"limit": limit})
        if isinstance(data, list):
            return data
        return data.get("calls", [])

    async def trigger_analysis(self, call_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/v1/calls/{call_id}/analyzation")

    # -- Phone numbers -------------------------------------------------------

    async def create_phone_number(self, area_code: int) -> dict[str, Any]:
        """Buy a number in the given area code; returns at least `phone_number`."""
        return await self._request("POST", "/create-phone-number", json={"area_code": area_code})

    async def update_phone_number(
        self,
        phone_number: str,
        inbound_agent_id: Optional[str],
        nickname: Optional[str] = None,
        webhook_url: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Point a number at an agent, or detach it with `inbound_agent_id=None`."""
        payload: dict[str, Any] = {"inbound_agent_id": inbound_agent_id}
        if nickname is not None:
            payload["nickname"] = nickname
        if webhook_url is not None:
            payload["inbound_webhook_url"] = webhook_url
        if metadata is not None:
            payload["metadata"] = metadata
        return await self._request("PATCH", f"/update-phone-number/{phone_number}", json=payload)


def sign_payload(body: str, api_key: str, timestamp_ms: Optional[int] = None) -> str:
    """Build a signature header value for `body` (used by tests and tooling)."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    digest = hmac.new(api_key.encode(), f"{body}{timestamp_ms}".encode(), hashlib.sha256).hexdigest()
    return f"v={timestamp_ms},d={digest}"


def verify_signature(
    body: str,
    api_key: str,
    signature: Optional[str],
    tolerance_seconds: int = 300,
    now_ms: Optional[int] = None,
) -> bool:
    """Check a `v={timestamp},d={hex digest}` webhook signature.

    The digest is HMAC-SHA256 over body + timestamp keyed by the API key.
    Signatures older (or newer) than `tolerance_seconds` are rejected.
    """
    if not signature or not api_key:
        return False

    parts = dict(
        part.split("=", 1) for part in signature.split(",") if "=" in part
    )
    timestamp, digest = parts.get("v"), parts.get("d")
    if not timestamp or not digest or not timestamp.isdigit():
        return False

    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if abs(now_ms - int(timestamp)) > tolerance_seconds * 1000:
        return False

    expected = hmac.new(api_key.encode(), f"{body}{timestamp}".encode(), hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, digest)


def get_retell_client(request: Request) -> RetellClient:
    """Dependency returning the application's shared Retell client."""
    client = getattr(request.app.state, "retell", None)
    if client is None:
        client = RetellClient()
        request.app.state.retell = client
    return client
