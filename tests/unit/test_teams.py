"""Unit tests for graylog_relay/clients/teams.py."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from graylog_relay.clients.teams import TeamsNotifier, build_card_message, get_priority_label

WEBHOOK_URL = "https://example.webhook.office.com/webhookb2/abc"


def _mock_client(mock_client_cls, *, response=None, error=None):
    mock_client = AsyncMock()
    if error is not None:
        mock_client.post = AsyncMock(side_effect=error)
    else:
        mock_client.post = AsyncMock(return_value=response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client_cls.return_value = mock_client
    return mock_client


class TestPriorityLabel:
    @pytest.mark.parametrize(
        "priority, label",
        [
            (0, "information"),
            (1, "low"),
            (2, "normal"),
            (3, "high"),
            (None, "unknown"),
            (99, "unknown"),
        ],
    )
    def test_labels(self, priority, label):
        assert get_priority_label(priority) == label


class TestCardMessage:
    def test_card_structure(self):
        message = build_card_message(
            "Login failures",
            "root cause found",
            event_id="evt-1",
            priority=3,
            analyzed_at=datetime(2025, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
        )
        assert message["type"] == "message"
        attachment = message["attachments"][0]
        assert attachment["contentType"] == "application/vnd.microsoft.card.adaptive"
        card = attachment["content"]
        assert card["type"] == "AdaptiveCard"
        assert card["version"] == "1.4"

        facts = {f["title"]: f["value"] for f in card["body"][2]["facts"]}
        assert facts == {
            "Alert": "Login failures",
            "Event ID": "evt-1",
            "Priority": "high",
            "Analyzed at": "2025-01-15 10:30:00 UTC",
        }
        assert card["body"][-1]["text"] == "root cause found"
        assert card["body"][-1]["wrap"] is True

    def test_missing_event_id(self):
        message = build_card_message("t", "a")
        facts = message["attachments"][0]["content"]["body"][2]["facts"]
        assert facts[1]["value"] == "N/A"
        assert facts[2]["value"] == "unknown"


class TestTeamsNotifier:
    def test_empty_url_fails_fast(self):
        with pytest.raises(ValueError):
            TeamsNotifier("")

    @pytest.mark.asyncio
    async def test_successful_notification(self):
        notifier = TeamsNotifier(WEBHOOK_URL)
        response = MagicMock(status_code=202, is_success=True)

        with patch("httpx.AsyncClient") as mock_client_cls:
            mock_client = _mock_client(mock_client_cls, response=response)
            sent = await notifier.notify("Login failures", "analysis", event_id="evt-1", priority=2)

        assert sent is True
        args, kwargs = mock_client.post.call_args
        assert args[0] == WEBHOOK_URL
        assert kwargs["json"]["attachments"][0]["content"]["body"][-1]["text"] == "analysis"
        assert mock_client_cls.call_args.kwargs["timeout"] == 30.0

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        notifier = TeamsNotifier(WEBHOOK_URL)
        response = MagicMock(status_code=400, is_success=False, text="Bad payload")

        with patch("httpx.AsyncClient") as mock_client_cls:
            _mock_client(mock_client_cls, response=response)
            sent = await notifier.notify("t", "a")

        assert sent is False

    @pytest.mark.asyncio
    async def test_http_error(self):
        notifier = TeamsNotifier(WEBHOOK_URL)

        with patch("httpx.AsyncClient") as mock_client_cls:
            _mock_client(mock_client_cls, error=httpx.ReadTimeout("timed out"))
            sent = await notifier.notify("t", "a")

        assert sent is False
