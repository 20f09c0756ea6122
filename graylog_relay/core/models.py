"""Domain models for Graylog alerts and stored alert records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Event priority at or above which an alert is investigated
HIGH_PRIORITY_THRESHOLD = 2


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Inbound webhook payload ─────────────────────────────────────


class AlertEvent(BaseModel):
    """The ``event`` block of a Graylog event-notification webhook."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: Optional[str] = None
    event_definition_id: Optional[str] = None
    event_definition_type: Optional[str] = None
    origin_context: Optional[Any] = None
    timestamp: Optional[datetime] = None
    timerange_start: Optional[datetime] = None
    timerange_end: Optional[datetime] = None
    streams: Optional[list[str]] = None
    source_streams: Optional[list[str]] = None
    message: Optional[str] = None
    source: Optional[str] = None
    key_tuple: Optional[list[str]] = None
    priority: Optional[int] = None
    alert: Optional[bool] = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("fields", mode="before")
    @classmethod
    def _null_fields(cls, value: Any) -> Any:
        return {} if value is None else value


class AlertPayload(BaseModel):
    """Graylog event-notification webhook body.

    Unknown keys are kept so the raw payload can be stored for audit.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    event_definition_id: Optional[str] = None
    event_definition_type: Optional[str] = None
    event_definition_title: Optional[str] = None
    event_definition_description: Optional[str] = None
    job_definition_id: Optional[str] = None
    job_trigger_id: Optional[str] = None
    event: Optional[AlertEvent] = None
    backlog: list[Any] = Field(default_factory=list)

    @field_validator("backlog", mode="before")
    @classmethod
    def _null_backlog(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def title(self) -> str:
        return self.event_definition_title or "Unknown alert"

    @property
    def event_id(self) -> Optional[str]:
        return self.event.id if self.event else None

    @property
    def priority(self) -> int:
        if self.event is None or self.event.priority is None:
            return 0
        return self.event.priority

    @property
    def is_high_priority(self) -> bool:
        return self.priority >= HIGH_PRIORITY_THRESHOLD


# ── Persisted projection ────────────────────────────────────────


class StoredAlertRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    event_id: str = ""
    event_definition_id: str = ""
    title: str = ""
    description: Optional[str] = None
    message: str = ""
    source: Optional[str] = None
    priority: int = 0
    is_alert: bool = False
    occurred_at: datetime
    received_at: datetime = Field(default_factory=utcnow)
    raw_payload: str = ""

    @classmethod
    def from_payload(cls, payload: AlertPayload) -> "StoredAlertRecord":
        """Project a webhook payload that carries an event into a new record."""
        event = payload.event
        if event is None:
            raise ValueError("cannot store an alert without event data")
        return cls(
            event_id=event.id or "",
            event_definition_id=payload.event_definition_id or "",
            title=payload.event_definition_title or "",
            description=payload.event_definition_description,
            message=event.message or "",
            source=event.source,
            priority=event.priority or 0,
            is_alert=bool(event.alert),
            occurred_at=event.timestamp or utcnow(),
            raw_payload=payload.model_dump_json(),
        )


# ── Investigation / intake results ──────────────────────────────


@dataclass
class InvestigationOutcome:
    """Result of one investigation, kept for observability only."""

    analysis_text: str
    tool_call_count: int = 0


@dataclass
class WebhookResult:
    success: bool
    message: str
    received_at: datetime
    event_id: Optional[str] = None
    alert_id: Optional[str] = None
