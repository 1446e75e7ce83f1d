"""
VocalHire API - FastAPI Application

Run with: uvicorn vocalhire.main:app --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vocalhire.config.settings import settings
from vocalhire.config.database import check_db_connection, init_db
from vocalhire.endpoints import api_router
from vocalhire.integrations.retell import RetellClient
from vocalhire.middleware.auth import AuthMiddleware
from vocalhire.middleware.error_handler import setup_exception_handlers
from vocalhire.middleware.logging import LoggingMiddleware, configure_logging

configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared provider client for the app's lifetime."""
    logger.info(
        "Starting VocalHire API",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        webhook_url=settings.webhook_url,
        verify_webhook_signatures=settings.verify_webhook_signatures,
    )

    if not settings.RETELL_API_KEY:
        if settings.verify_webhook_signatures:
            # Webhooks could never be verified.
            raise RuntimeError("RETELL_API_KEY must be set in production")
        logger.warning("RETELL_API_KEY is not set; provider requests will fail")

    if settings.DEBUG:
        logger.info("Creating database tables (DEBUG mode)")
        init_db()
    elif not check_db_connection():
        logger.error("Database is not reachable at startup")

    app.state.retell = RetellClient()
    try:
        yield
    finally:
        await app.state.retell.close()
        logger.info("VocalHire API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Voice interview backend: call registration, webhooks, phone numbers and responses",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    setup_exception_handlers(app)

    # Last added runs first: logging wraps auth, CORS wraps both.
    app.add_middleware(AuthMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def root_health():
        """Load balancer probe."""
        return {"status": "ok", "version": settings.APP_VERSION}

    @app.get("/")
    async def root():
        return {"name": settings.APP_NAME, "version": settings.APP_VERSION, "webhook": settings.webhook_url}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vocalhire.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
