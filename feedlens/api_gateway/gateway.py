"""
API Gateway for Feedlens.

This module provides the FastAPI application: component setup at startup,
routing, error translation, and the optional digest scheduler.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from feedlens.config import Settings, settings as default_settings, validate_environment
from feedlens.dashboard.views import router as dashboard_router
from feedlens.digest.workflow import DIGEST_WORKFLOW
from feedlens.feedback.api import router as feedback_router
from feedlens.services import FeedlensServices
from feedlens.utils.database import close_db
from feedlens.utils.error_handling import FeedlensError, error_response_body
from feedlens.workflow.scheduler import build_scheduler


logger = logging.getLogger(__name__)

START_TIME = datetime.now()


def create_app(config: Optional[Settings] = None,
               services: Optional[FeedlensServices] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Settings to build components from
        services: Pre-built components (mainly for tests)

    Returns:
        Configured FastAPI app
    """
    config = config or (services.config if services else default_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            validate_environment(config)
            app.state.services = FeedlensServices(config)

        scheduler = None
        if config.enable_scheduler:
            scheduler = build_scheduler(app.state.services.runtime, DIGEST_WORKFLOW, config.digest_cron)
            scheduler.start()
            logger.info(f"Digest scheduler started ({config.digest_cron} UTC)")

        yield

        if scheduler is not None:
            scheduler.shutdown(wait=False)
        await app.state.services.runtime.shutdown()
        close_db()

    app = FastAPI(
        title="Feedlens API",
        description="Feedback triage and digest service",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FeedlensError)
    async def feedlens_error_handler(request: Request, exc: FeedlensError):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_response_body(exc))

    @app.get("/health", tags=["system"])
    async def health():
        """Basic liveness check."""
        return {
            "status": "ok",
            "uptime_seconds": int((datetime.now() - START_TIME).total_seconds()),
            "scheduler_enabled": config.enable_scheduler,
        }

    app.include_router(feedback_router)
    app.include_router(dashboard_router)

    return app


app = create_app()


def run_gateway(host: Optional[str] = None, port: Optional[int] = None):
    """Run the API gateway with Uvicorn."""
    import uvicorn

    uvicorn.run(
        "feedlens.api_gateway.gateway:app",
        host=host or default_settings.api_gateway_host,
        port=port or default_settings.api_gateway_port,
        reload=default_settings.debug,
        log_level=default_settings.log_level.lower(),
    )
