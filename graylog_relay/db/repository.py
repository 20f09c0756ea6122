"""In-memory data access layer for stored alert records.

Records are append-only for the life of the process. An ``asyncio.Lock``
guards every append and read so concurrent webhook requests never race.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from graylog_relay.core.logging import get_logger
from graylog_relay.core.models import StoredAlertRecord

logger = get_logger("repository")


class InMemoryAlertRepository:
    def __init__(self) -> None:
        self._records: list[StoredAlertRecord] = []
        self._lock = asyncio.Lock()

    async def add(self, record: StoredAlertRecord) -> StoredAlertRecord:
        async with self._lock:
            self._records.append(record)
        logger.info("alert_stored", alert_id=record.id, event_id=record.event_id)
        return record

    async def get(self, alert_id: str) -> Optional[StoredAlertRecord]:
        async with self._lock:
            return next((r for r in self._records if r.id == alert_id), None)

    async def list_all(self) -> list[StoredAlertRecord]:
        async with self._lock:
            return list(self._records)

    async def list_by_min_priority(self, min_priority: int) -> list[StoredAlertRecord]:
        async with self._lock:
            return [r for r in self._records if r.priority >= min_priority]

    async def count(self) -> int:
        async with self._lock:
            return len(self._records)


# Module-level singleton
_repository: InMemoryAlertRepository | None = None


def get_repository() -> InMemoryAlertRepository:
    global _repository
    if _repository is None:
        _repository = InMemoryAlertRepository()
    return _repository
