"""structlog setup and per-request access logging."""

import logging
import time
import uuid
from typing import Optional

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from vocalhire.config.settings import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Probes hit these every few seconds; keep them out of INFO.
QUIET_PATH_PREFIXES = ("/health", "/api/health")


def configure_logging(level_name: Optional[str] = None) -> None:
    """JSON logs at LOG_LEVEL, with request context merged into every event."""
    level = logging.getLevelName((level_name or settings.LOG_LEVEL).upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id to every log event and logs each request once it is handled."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        path = request.url.path
        quiet = path.startswith(QUIET_PATH_PREFIXES)
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400:
            log = logger.warning
        else:
            log = logger.debug if quiet else logger.info
        log(
            "Request handled",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=elapsed_ms,
            org_id=getattr(request.state, "org_id", None),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
