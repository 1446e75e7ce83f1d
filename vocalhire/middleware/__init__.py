"""Middleware for the VocalHire API."""

from .auth import AuthMiddleware, get_current_org
from .error_handler import setup_exception_handlers
from .logging import LoggingMiddleware

__all__ = ["AuthMiddleware", "get_current_org", "setup_exception_handlers", "LoggingMiddleware"]
