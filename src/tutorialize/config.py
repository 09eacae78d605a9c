"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_text_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    openai_image_model: str = "gpt-image-1"
    openai_image_size: str = "1024x1024"
    openai_tts_model: str = "gpt-4o-mini-tts"
    openai_tts_voice: str = "alloy"
    supabase_url: str
    supabase_service_key: str
    supabase_bucket: str = "tutorials"
    brightdata_api_key: str | None = None
    max_source_chars: int = 10_000
    prompt_char_budget: int = 8_000
    min_content_chars: int = 50
    retry_attempts: int = 3
    retry_delay_seconds: float = 2.0
    step_delay_seconds: float = 3.0
    call_timeout_seconds: float | None = 120.0
    http_timeout_seconds: float = 30.0
    frame_text_policy: str = "resync"
    session_ttl_seconds: int | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_optional_seconds(raw: float | None) -> float | None:
    """Treat zero or negative durations from env as disabled."""
    if raw is None or raw <= 0:
        return None
    return float(raw)
