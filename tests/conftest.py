"""Shared test fixtures for the Graylog relay test suite."""

from __future__ import annotations

import json
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessageChunk, BaseMessage

from graylog_relay.core.models import AlertPayload
from graylog_relay.db.repository import InMemoryAlertRepository


# ── Scripted chat model ─────────────────────────────────────────


class ScriptedChatModel:
    """Stands in for a LangChain chat model.

    Each call to ``astream`` plays the next scripted turn (a list of chunks).
    Once the script runs out the model streams nothing.
    """

    def __init__(self, turns: Optional[list[list[AIMessageChunk]]] = None, error: Exception | None = None):
        self.turns = list(turns or [])
        self.error = error
        self.bound_tools: list | None = None
        self.calls: list[list[BaseMessage]] = []

    def bind_tools(self, tools):
        self.bound_tools = list(tools)
        return self

    async def astream(self, messages, config=None, **kwargs):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        chunks = self.turns.pop(0) if self.turns else []
        for chunk in chunks:
            yield chunk

    @staticmethod
    def text(content: str) -> AIMessageChunk:
        return AIMessageChunk(content=content)

    @staticmethod
    def tool_call(
        args: dict[str, Any],
        call_id: str = "call_1",
        name: str = "search_graylog_logs",
        index: int = 0,
    ) -> AIMessageChunk:
        return AIMessageChunk(
            content="",
            tool_call_chunks=[
                {"name": name, "args": json.dumps(args), "id": call_id, "index": index}
            ],
        )


@pytest.fixture
def chat_model_factory():
    return ScriptedChatModel


@pytest.fixture
def mock_searcher():
    """A log searcher whose ``search`` returns one record."""
    searcher = MagicMock()
    searcher.search = AsyncMock(
        return_value=[
            {
                "timestamp": "2025-01-15T10:30:00.000Z",
                "message": "Login failed for account demo",
                "Code": "904002",
                "Layer": "BackendApi",
                "Class": "AuthController",
                "Method": "Login",
            }
        ]
    )
    return searcher


@pytest.fixture
def repository() -> InMemoryAlertRepository:
    return InMemoryAlertRepository()


# ── Sample payloads ─────────────────────────────────────────────


def _payload(priority: Optional[int], **event_overrides) -> dict:
    event = {
        "id": "01JH0000000000000000000000",
        "event_definition_id": "def-001",
        "timestamp": "2025-01-15T10:30:00.000Z",
        "message": "Login failures above threshold",
        "source": "graylog-node-1",
        "priority": priority,
        "alert": True,
        "fields": {"RequestId": "ABC123"},
    }
    event.update(event_overrides)
    return {
        "event_definition_id": "def-001",
        "event_definition_type": "aggregation-v1",
        "event_definition_title": "Login failures",
        "event_definition_description": "Too many failed logins",
        "event": event,
        "backlog": [{"RequestId": "ABC123", "Code": "904002", "message": "Login failed"}],
    }


@pytest.fixture
def high_priority_payload() -> AlertPayload:
    return AlertPayload.model_validate(_payload(3))


@pytest.fixture
def low_priority_payload() -> AlertPayload:
    return AlertPayload.model_validate(_payload(1))


@pytest.fixture
def payload_without_event() -> AlertPayload:
    return AlertPayload.model_validate({"event_definition_title": "Orphan alert"})


@pytest.fixture
def raw_high_priority_payload() -> dict:
    return _payload(3)


@pytest.fixture
def raw_low_priority_payload() -> dict:
    return _payload(1)
