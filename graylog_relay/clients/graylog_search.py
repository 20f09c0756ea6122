"""Graylog search client.

Runs a single relative-time query against Graylog's synchronous views
search API and returns the matching messages as plain dicts. Every failure
degrades to an empty result so an investigation can continue with search
unavailable.
"""

from __future__ import annotations

from typing import Any

import httpx

from graylog_relay.core.config import Settings, get_settings
from graylog_relay.core.logging import get_logger

logger = get_logger("clients.graylog_search")

SEARCH_PATH = "/api/views/search/sync"
QUERY_ID = "query_id"
MESSAGES_ID = "messages_id"

LogRecord = dict[str, Any]


def build_search_request(query_string: str, time_range_seconds: int, limit: int) -> dict:
    return {
        "queries": [
            {
                "id": QUERY_ID,
                "timerange": {"type": "relative", "range": time_range_seconds},
                "query": {"type": "elasticsearch", "query_string": query_string},
                "search_types": [
                    {
                        "id": MESSAGES_ID,
                        "type": "messages",
                        "offset": 0,
                        "limit": limit,
                        "sort": [{"field": "timestamp", "order": "DESC"}],
                    }
                ],
            }
        ]
    }


def extract_messages(body: Any) -> list[LogRecord]:
    """Pull ``results.query_id.search_types.messages_id.messages[*].message``.

    Any shape mismatch along the way yields an empty list.
    """
    node = body
    for key in ("results", QUERY_ID, "search_types", MESSAGES_ID, "messages"):
        if not isinstance(node, dict):
            return []
        node = node.get(key)
    if not isinstance(node, list):
        return []

    records: list[LogRecord] = []
    for item in node:
        if isinstance(item, dict) and isinstance(item.get("message"), dict):
            records.append(dict(item["message"]))
    return records


class GraylogSearchClient:
    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
    ) -> None:
        if not base_url:
            raise ValueError("Graylog base URL must not be empty")
        self._search_url = base_url.rstrip("/") + SEARCH_PATH
        self._auth = httpx.BasicAuth(username, password)
        self._timeout = timeout

    @property
    def search_url(self) -> str:
        return self._search_url

    async def search(
        self,
        query_string: str,
        time_range_seconds: int = 60,
        limit: int = 20,
    ) -> list[LogRecord]:
        time_range_seconds = max(1, int(time_range_seconds))
        limit = max(1, int(limit))

        logger.info(
            "graylog_search",
            query=query_string,
            time_range_seconds=time_range_seconds,
            limit=limit,
        )

        payload = build_search_request(query_string, time_range_seconds, limit)
        # Graylog rejects API writes without X-Requested-By
        headers = {"X-Requested-By": self._search_url}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, auth=self._auth) as client:
                response = await client.post(self._search_url, json=payload, headers=headers)

            if not response.is_success:
                logger.warning(
                    "graylog_search_failed",
                    status_code=response.status_code,
                    body=response.text[:500],
                )
                return []

            records = extract_messages(response.json())

        except (httpx.HTTPError, ValueError) as e:
            logger.error("graylog_search_error", error=str(e))
            return []

        logger.info("graylog_search_completed", query=query_string, count=len(records))
        return records


def build_search_client(settings: Settings | None = None) -> GraylogSearchClient | None:
    """Create a client when Graylog is configured, otherwise ``None``."""
    settings = settings or get_settings()
    if not settings.graylog_enabled:
        return None
    return GraylogSearchClient(
        settings.graylog_url,
        settings.graylog_username,
        settings.graylog_password,
        timeout=settings.graylog_timeout_seconds,
    )
