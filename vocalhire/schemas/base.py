"""Shared schema base: snake_case in Python, camelCase on the wire."""

from typing import Any

from humps import camelize
from pydantic import BaseModel, ConfigDict


class CamelModel(BaseModel):
    """
    Dashboard-facing schema with camelCase JSON keys.

    Responses are serialized by alias (`phone_number_id` -> `phoneNumberId`).
    Request bodies are accepted in either form, so the dashboard can send
    `phoneNumberId` and scripts `phone_number_id`. ORM rows validate directly.
    """

    model_config = ConfigDict(
        alias_generator=camelize,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorDetail(CamelModel):
    code: str
    message: str
    details: dict[str, Any] = {}


class ErrorResponse(CamelModel):
    """Envelope rendered by the global exception handlers."""

    error: ErrorDetail
