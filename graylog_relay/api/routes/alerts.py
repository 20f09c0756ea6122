"""Stored alert query endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from graylog_relay.api.dependencies import get_alert_repository
from graylog_relay.api.schemas import AlertListResponse
from graylog_relay.core.models import StoredAlertRecord
from graylog_relay.db.repository import InMemoryAlertRepository

router = APIRouter()


@router.get("/alerts", response_model=AlertListResponse)
async def list_alerts(
    min_priority: Optional[int] = Query(default=None, ge=0),
    repository: InMemoryAlertRepository = Depends(get_alert_repository),
) -> AlertListResponse:
    if min_priority is None:
        records = await repository.list_all()
    else:
        records = await repository.list_by_min_priority(min_priority)
    return AlertListResponse(alerts=records, total=len(records), min_priority=min_priority)


@router.get("/alerts/{alert_id}", response_model=StoredAlertRecord)
async def get_alert(
    alert_id: str,
    repository: InMemoryAlertRepository = Depends(get_alert_repository),
) -> StoredAlertRecord:
    record = await repository.get(alert_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return record
