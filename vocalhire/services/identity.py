"""Verification of identity provider session tokens."""

from dataclasses import dataclass
from typing import Any, Optional

from jose import jwt, JWTError

from vocalhire.config.settings import settings


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated dashboard user and the organization they act for."""

    user_id: str
    org_id: str


def _verification_key() -> str:
    if settings.AUTH_JWT_ALGORITHM.upper().startswith("HS"):
        return settings.AUTH_JWT_SECRET
    return settings.AUTH_JWT_PUBLIC_KEY or ""


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a session token issued by the identity provider.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        JWTError: If token is invalid or expired
    """
    key = _verification_key()
    if not key:
        raise JWTError("Token verification key is not configured")

    try:
        return jwt.decode(
            token,
            key,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise JWTError("Token has expired")
    except jwt.JWTClaimsError as e:
        raise JWTError(f"Invalid token claims: {e}")
    except JWTError as e:
        raise JWTError(f"Invalid token: {e}")


def organization_from_claims(payload: dict[str, Any]) -> Optional[str]:
    """Active organization id; older tokens nest it under "o"."""
    org_id = payload.get("org_id")
    if org_id:
        return org_id
    nested = payload.get("o")
    if isinstance(nested, dict):
        return nested.get("id")
    return None
