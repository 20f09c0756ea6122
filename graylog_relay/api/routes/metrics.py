"""Prometheus text-format metrics for stored alerts and enabled collaborators."""

from __future__ import annotations

import time
from collections import Counter
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from graylog_relay.api.dependencies import (
    get_alert_analysis_service,
    get_alert_repository,
    get_app_settings,
)
from graylog_relay.clients.teams import get_priority_label
from graylog_relay.core.analysis import AlertAnalysisService
from graylog_relay.core.config import Settings
from graylog_relay.core.models import HIGH_PRIORITY_THRESHOLD
from graylog_relay.db.repository import InMemoryAlertRepository

router = APIRouter()

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

_start_time = time.time()


def _metric(name: str, kind: str, help_text: str, samples: list[tuple[str, float]]) -> list[str]:
    lines = [f"# HELP {name} {help_text}", f"# TYPE {name} {kind}"]
    lines.extend(f"{name}{labels} {value:g}" for labels, value in samples)
    lines.append("")
    return lines


@router.get("/metrics", response_class=PlainTextResponse)
async def prometheus_metrics(
    repository: InMemoryAlertRepository = Depends(get_alert_repository),
    settings: Settings = Depends(get_app_settings),
    analysis_service: Optional[AlertAnalysisService] = Depends(get_alert_analysis_service),
) -> PlainTextResponse:
    records = await repository.list_all()
    by_label = Counter(get_priority_label(r.priority) for r in records)
    high_priority = sum(1 for r in records if r.priority >= HIGH_PRIORITY_THRESHOLD)

    lines: list[str] = []
    lines += _metric(
        "glr_alerts_stored_total", "counter", "Total number of stored alerts", [("", len(records))]
    )
    lines += _metric(
        "glr_high_priority_alerts_total",
        "counter",
        "Stored alerts that qualified for AI analysis",
        [("", high_priority)],
    )
    lines += _metric(
        "glr_alerts_by_priority",
        "gauge",
        "Stored alerts per priority label",
        [(f'{{priority="{label}"}}', count) for label, count in sorted(by_label.items())],
    )
    lines += _metric(
        "glr_collaborator_enabled",
        "gauge",
        "Whether an optional collaborator is configured",
        [
            ('{collaborator="chat_model"}', int(analysis_service is not None)),
            ('{collaborator="graylog_search"}', int(settings.graylog_enabled)),
            ('{collaborator="teams"}', int(settings.teams_enabled)),
        ],
    )
    lines += _metric(
        "glr_uptime_seconds", "gauge", "API server uptime in seconds", [("", round(time.time() - _start_time, 1))]
    )

    return PlainTextResponse(content="\n".join(lines), media_type=PROMETHEUS_CONTENT_TYPE)
