"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from keeps_auth.api.dependencies import build_link_issuer
from keeps_auth.api.routes import router as verification_router
from keeps_auth.api.v1 import router as v1_router
from keeps_auth.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Verification link issuer - on-demand resend and account-created hook",
    },
    {
        "name": "verification",
        "description": "Browser-facing verification email endpoint",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the shared HTTP client on startup
    - Wires the link issuer from settings
    - Closes the HTTP client on shutdown
    """
    settings = get_settings()

    logger.info("Starting application (environment=%s)...", settings.environment)
    if settings.dev_bypass_active:
        logger.warning("ALLOW_UNVERIFIED_LOGIN is enabled; unverified accounts can log in")

    client = httpx.AsyncClient()
    app.state.http_client = client
    app.state.link_issuer = build_link_issuer(settings, client)

    logger.info(
        "Application startup complete (identity=%s, email=%s)",
        settings.identity_backend,
        settings.email_backend,
    )

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await client.aclose()
    logger.info("HTTP client closed")


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="keeps-auth",
        description="Verification-gated authentication - verification link issuer",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    app.include_router(v1_router, prefix="/v1")
    app.include_router(verification_router)

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint.

        Returns 200 OK once the link issuer has been wired.
        """
        if getattr(request.app.state, "link_issuer", None) is None:
            return {"status": "starting"}
        return {"status": "healthy"}

    return app


app = create_app()
