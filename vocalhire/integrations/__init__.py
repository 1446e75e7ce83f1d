"""Clients for external services."""

from .retell import RetellClient, RetellError, get_retell_client, verify_signature

__all__ = ["RetellClient", "RetellError", "get_retell_client", "verify_signature"]
