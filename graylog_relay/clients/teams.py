"""Microsoft Teams notification: post analysis results as an Adaptive Card.

Sends a ``message`` with a single Adaptive Card attachment to an incoming
webhook (Teams connector or Power Automate flow). Delivery is attempted once;
failures are logged and reported as ``False``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import httpx

from graylog_relay.core.config import Settings, get_settings
from graylog_relay.core.logging import get_logger

logger = get_logger("clients.teams")

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"
ADAPTIVE_CARD_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"

_PRIORITY_LABELS = {
    0: "information",
    1: "low",
    2: "normal",
    3: "high",
}


def get_priority_label(priority: Optional[int]) -> str:
    if priority is None:
        return "unknown"
    return _PRIORITY_LABELS.get(priority, "unknown")


def build_card_message(
    title: str,
    analysis_text: str,
    event_id: Optional[str] = None,
    priority: Optional[int] = None,
    analyzed_at: Optional[datetime] = None,
) -> dict:
    analyzed_at = analyzed_at or datetime.now(timezone.utc)
    return {
        "type": "message",
        "attachments": [
            {
                "contentType": ADAPTIVE_CARD_CONTENT_TYPE,
                "content": {
                    "$schema": ADAPTIVE_CARD_SCHEMA,
                    "type": "AdaptiveCard",
                    "version": "1.4",
                    "body": [
                        {
                            "type": "TextBlock",
                            "text": "Graylog Alert AI Analysis",
                            "weight": "Bolder",
                            "size": "Large",
                            "color": "Attention",
                        },
                        {
                            "type": "TextBlock",
                            "text": "A **high priority alert** was detected and the AI investigation has finished:",
                            "wrap": True,
                        },
                        {
                            "type": "FactSet",
                            "facts": [
                                {"title": "Alert", "value": title},
                                {"title": "Event ID", "value": event_id or "N/A"},
                                {"title": "Priority", "value": get_priority_label(priority)},
                                {
                                    "title": "Analyzed at",
                                    "value": analyzed_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
                                },
                            ],
                        },
                        {
                            "type": "TextBlock",
                            "text": "AI analysis",
                            "weight": "Bolder",
                            "size": "Medium",
                            "separator": True,
                        },
                        {
                            "type": "TextBlock",
                            "text": analysis_text,
                            "wrap": True,
                        },
                    ],
                },
            }
        ],
    }


class TeamsNotifier:
    def __init__(self, webhook_url: str, timeout: float = 30.0) -> None:
        if not webhook_url:
            raise ValueError("Teams webhook URL is not configured")
        self._webhook_url = webhook_url
        self._timeout = timeout

    async def notify(
        self,
        title: str,
        analysis_text: str,
        event_id: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> bool:
        """Post the analysis card. Returns True when Teams accepted it."""
        message = build_card_message(title, analysis_text, event_id=event_id, priority=priority)

        logger.info("sending_teams_notification", title=title, event_id=event_id)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._webhook_url, json=message)

            if response.is_success:
                logger.info("teams_notification_sent", event_id=event_id)
                return True

            logger.warning(
                "teams_notification_failed",
                status_code=response.status_code,
                body=response.text[:500],
            )
            return False

        except httpx.HTTPError as e:
            logger.error("teams_notification_error", error=str(e))
            return False


def build_notifier(settings: Settings | None = None) -> TeamsNotifier | None:
    """Create a notifier when a webhook URL is configured, otherwise ``None``."""
    settings = settings or get_settings()
    if not settings.teams_enabled:
        return None
    return TeamsNotifier(settings.teams_webhook_url, timeout=settings.teams_timeout_seconds)
