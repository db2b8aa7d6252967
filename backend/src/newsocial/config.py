"""Company News Social — Application Configuration."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "company-news-social"
    app_env: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"
    json_logs: bool = False

    # ── AI providers ─────────────────────────────────────────
    openai_api_key: str = ""
    claude_api_key: str = ""
    ai_model: str = ""
    ai_max_tokens: int = Field(1000, ge=100, le=4000)
    ai_temperature: float = Field(0.3, ge=0.0, le=2.0)
    ai_timeout_ms: int = Field(30_000, ge=5_000, le=120_000)

    # ── Health monitoring / routing ──────────────────────────
    health_check_interval_ms: int = Field(300_000, gt=0)
    ai_provider_preference: str = "openai,claude"
    ai_route_unhealthy_providers: bool = True

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    @property
    def provider_api_keys(self) -> dict[str, str]:
        """Configured provider keys, keyed by provider name (empty keys omitted)."""
        keys = {"openai": self.openai_api_key, "claude": self.claude_api_key}
        return {name: key.strip() for name, key in keys.items() if key and key.strip()}

    @property
    def preference_order(self) -> tuple[str, ...]:
        return tuple(
            name.strip().lower()
            for name in self.ai_provider_preference.split(",")
            if name.strip()
        )

    @property
    def probe_timeout_s(self) -> float:
        return self.ai_timeout_ms / 1000

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def _guard_production_keys(self) -> Settings:
        """Production must have at least one provider key configured."""
        if self.is_production and not self.provider_api_keys:
            raise ValueError(
                "At least one AI provider key (OPENAI_API_KEY or CLAUDE_API_KEY) "
                "must be set in production"
            )
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
