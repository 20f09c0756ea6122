"""Health check endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from graylog_relay.api.dependencies import (
    get_alert_analysis_service,
    get_alert_repository,
    get_app_settings,
)
from graylog_relay.api.schemas import HealthResponse
from graylog_relay.core.analysis import AlertAnalysisService
from graylog_relay.core.config import Settings
from graylog_relay.db.repository import InMemoryAlertRepository

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    analysis_service: Optional[AlertAnalysisService] = Depends(get_alert_analysis_service),
    repository: InMemoryAlertRepository = Depends(get_alert_repository),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        chat_model_configured=analysis_service is not None,
        graylog_search_configured=settings.graylog_enabled,
        teams_configured=settings.teams_enabled,
        stored_alerts=await repository.count(),
    )
