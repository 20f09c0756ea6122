"""Request/response schemas for the API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from graylog_relay.core.models import StoredAlertRecord, WebhookResult


# ── Response Schemas ─────────────────────────────────────────────


class WebhookResponse(BaseModel):
    success: bool
    message: str
    received_at: datetime
    event_id: Optional[str] = None
    alert_id: Optional[str] = None

    @classmethod
    def from_result(cls, result: WebhookResult) -> "WebhookResponse":
        return cls(
            success=result.success,
            message=result.message,
            received_at=result.received_at,
            event_id=result.event_id,
            alert_id=result.alert_id,
        )


class WebhookInfoResponse(BaseModel):
    endpoint: str
    method: str
    description: str
    content_type: str
    example_payload: Optional[dict[str, Any]] = None


class AnalysisResponse(BaseModel):
    success: bool
    analysis: Optional[str] = None
    analyzed_at: datetime
    event_title: Optional[str] = None


class AlertListResponse(BaseModel):
    alerts: list[StoredAlertRecord]
    total: int
    min_priority: Optional[int] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    chat_model_configured: bool = False
    graylog_search_configured: bool = False
    teams_configured: bool = False
    stored_alerts: int = 0


class ErrorResponse(BaseModel):
    detail: str = Field(description="Human-readable error message")
