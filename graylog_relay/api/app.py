"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from graylog_relay.core.config import get_settings
from graylog_relay.core.logging import configure_logging, get_logger

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and report enabled collaborators."""
    settings = get_settings()
    configure_logging(json_output=settings.log_json, level=settings.log_level)
    logger.info("api_starting")

    if settings.llm_enabled:
        logger.info("chat_model_enabled", model=settings.llm_model, endpoint=settings.llm_endpoint or "default")
    else:
        logger.warning("chat_model_disabled", msg="Set GLR_LLM_API_KEY to enable AI analysis")

    if settings.graylog_enabled:
        logger.info("graylog_search_enabled", url=settings.graylog_url)
    else:
        logger.warning("graylog_search_disabled", msg="AI analysis will run without log search")

    if settings.teams_enabled:
        logger.info("teams_notification_enabled")
    else:
        logger.warning("teams_notification_disabled")

    yield

    logger.info("api_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Graylog AI Relay",
        description="Receives Graylog alerts, investigates them with an LLM and posts the result to Teams",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register routes
    from graylog_relay.api.routes import alerts, graylog, health, metrics

    app.include_router(health.router, tags=["health"])
    app.include_router(metrics.router, tags=["metrics"])
    app.include_router(graylog.router, prefix="/api/graylog", tags=["graylog"])
    app.include_router(alerts.router, prefix="/api/graylog", tags=["alerts"])

    return app
