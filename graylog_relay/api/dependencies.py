"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Optional

from graylog_relay.core.analysis import AlertAnalysisService, get_analysis_service
from graylog_relay.core.config import Settings, get_settings
from graylog_relay.core.intake import AlertIntakeService, get_intake_service
from graylog_relay.db.repository import InMemoryAlertRepository, get_repository


def get_app_settings() -> Settings:
    return get_settings()


def get_alert_repository() -> InMemoryAlertRepository:
    return get_repository()


def get_alert_analysis_service() -> Optional[AlertAnalysisService]:
    return get_analysis_service()


def get_alert_intake_service() -> AlertIntakeService:
    return get_intake_service()
