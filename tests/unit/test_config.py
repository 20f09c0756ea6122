"""Unit tests for graylog_relay/core/config.py."""

from __future__ import annotations

import os
from unittest.mock import patch

from graylog_relay.core.config import Settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults without any env vars."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.llm_model == "llama-3.3-70b-versatile"
        assert settings.llm_temperature == 0.1
        assert settings.llm_max_tokens == 4096
        assert settings.max_tool_rounds == 8
        assert settings.max_investigation_duration_seconds == 300
        assert settings.teams_timeout_seconds == 30.0
        assert settings.api_port == 8000

    def test_collaborators_disabled_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.llm_enabled is False
        assert settings.graylog_enabled is False
        assert settings.teams_enabled is False

    def test_env_override(self):
        """Settings should be overridden by GLR_ prefixed env vars."""
        env = {
            "GLR_LLM_API_KEY": "test-key-123",
            "GLR_LLM_MODEL": "llama-3.1-8b-instant",
            "GLR_LLM_ENDPOINT": "https://llm.internal/openai/v1",
            "GLR_MAX_TOOL_ROUNDS": "3",
            "GLR_TEAMS_WEBHOOK_URL": "https://example.webhook.office.com/hook",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
        assert settings.llm_api_key == "test-key-123"
        assert settings.llm_model == "llama-3.1-8b-instant"
        assert settings.llm_endpoint == "https://llm.internal/openai/v1"
        assert settings.max_tool_rounds == 3
        assert settings.llm_enabled is True
        assert settings.teams_enabled is True

    def test_graylog_requires_url_and_username(self):
        env = {"GLR_GRAYLOG_URL": "http://graylog:9000"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
        assert settings.graylog_enabled is False

        env["GLR_GRAYLOG_USERNAME"] = "admin"
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
        assert settings.graylog_enabled is True
