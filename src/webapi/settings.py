from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Language-model vendors
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    gemini_api_key: str = Field(default="", alias="GEMINI_API_KEY")
    grok_api_key: str = Field(default="", alias="GROK_API_KEY")
    llm_timeout_seconds: float = Field(default=120.0, alias="LLM_TIMEOUT_SECONDS")
    site_fetch_timeout_seconds: float = Field(default=15.0, alias="SITE_FETCH_TIMEOUT_SECONDS")

    # Damage assessment
    assessment_provider: str = Field(default="Claude", alias="ASSESSMENT_PROVIDER")
    assessment_model: str = Field(default="claude-sonnet-4-20250514", alias="ASSESSMENT_MODEL")
    assessment_max_tokens: int = Field(default=4096, alias="ASSESSMENT_MAX_TOKENS")

    # Payments; an empty secret key runs checkout in demo mode
    stripe_secret_key: str = Field(default="", alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: str = Field(default="", alias="STRIPE_WEBHOOK_SECRET")
    public_base_url: str = Field(default="http://localhost:3000", alias="PUBLIC_BASE_URL")

    # Persistence; empty DSN keeps records in process memory
    postgres_dsn: str = Field(default="", alias="POSTGRES_DSN")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    def provider_keys(self) -> dict[str, str]:
        return {
            "Claude": self.anthropic_api_key,
            "GPT-4": self.openai_api_key,
            "Gemini": self.gemini_api_key,
            "Grok": self.grok_api_key,
        }
