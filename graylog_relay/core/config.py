from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GLR_",
        case_sensitive=False,
    )

    # ── Graylog search ──────────────────────────────────────────
    graylog_url: str = ""
    graylog_username: str = ""
    graylog_password: str = ""
    graylog_timeout_seconds: float = 30.0

    # ── Teams notification ──────────────────────────────────────
    teams_webhook_url: str = ""
    teams_timeout_seconds: float = 30.0

    # ── Chat model ──────────────────────────────────────────────
    # Leave the endpoint empty to use the provider's default base URL
    llm_api_key: str = ""
    llm_endpoint: str = ""
    llm_model: str = "llama-3.3-70b-versatile"
    llm_temperature: float = 0.1
    llm_max_tokens: int = 4096

    # ── Investigation behaviour ─────────────────────────────────
    max_tool_rounds: int = 8
    max_investigation_duration_seconds: int = 300

    # ── API ─────────────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ── Logging ─────────────────────────────────────────────────
    log_json: bool = False
    log_level: str = "INFO"

    @property
    def graylog_enabled(self) -> bool:
        return bool(self.graylog_url and self.graylog_username)

    @property
    def teams_enabled(self) -> bool:
        return bool(self.teams_webhook_url)

    @property
    def llm_enabled(self) -> bool:
        return bool(self.llm_api_key)


# Singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
