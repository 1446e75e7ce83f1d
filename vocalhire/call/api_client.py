"""HTTP client for the public VocalHire endpoints used by a call session."""

from typing import Any, Optional

import httpx
import structlog

logger = structlog.get_logger()


class VocalHireAPIError(Exception):
    """Raised when a VocalHire API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class VocalHireClient:
    """Async client for registration, respondent checks and end-of-call saves."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "VocalHire API request failed",
                method=method,
                path=path,
                status_code=e.response.status_code,
                response=e.response.text[:500],
            )
            raise VocalHireAPIError(
                f"VocalHire API error {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error("VocalHire API request error", method=method, path=path, error=str(e))
            raise VocalHireAPIError(f"VocalHire API request error: {str(e)}") from e

        if not response.content:
            return {}
        return response.json()

    async def get_interview(self, interview_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/public/interviews/{interview_id}")

    async def register_call(
        self,
        interviewer_id: Optional[int],
        dynamic_data: dict[str, Any],
        is_practice: bool,
        interview_id: Optional[str] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> dict[str, Any]:
        """Register a web call; returns the provider credentials (call_id, access_token)."""
        data = await self._request(
            "POST",
            "/api/register-call",
            json={
                "interviewer_id": interviewer_id,
                "interview_id": interview_id,
                "name": name,
                "email": email,
                "dynamic_data": dynamic_data,
                "is_practice": is_practice,
            },
        )
        return data.get("registerCallResponse") or {}

    async def check_respondent(self, interview_id: str, email: str) -> bool:
        """True if `email` may not take this interview again."""
        data = await self._request(
            "POST",
            f"/api/public/interviews/{interview_id}/respondent-check",
            json={"email": email},
        )
        return bool(data.get("isOldUser"))

    async def save_response(self, call_id: str, is_ended: bool, tab_switch_count: int) -> dict[str, Any]:
        return await self._request(
            "PATCH",
            f"/api/public/responses/{call_id}",
            json={"is_ended": is_ended, "tab_switch_count": tab_switch_count},
        )

    async def submit_feedback(
        self,
        interview_id: str,
        email: Optional[str],
        satisfaction: Optional[int],
        feedback: Optional[str],
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/public/feedback",
            json={
                "interview_id": interview_id,
                "email": email,
                "satisfaction": satisfaction,
                "feedback": feedback,
            },
        )
