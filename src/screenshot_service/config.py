"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_BROWSER_ARGS = (
    "--disable-gpu,--single-process,--no-sandbox,--disable-dev-shm-usage"
)
DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = _ENVIRONMENT
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    log_level: str = "INFO"

    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 30
    trust_forwarded_for: bool = False

    max_concurrent_sessions: int = 4
    request_timeout_ms: int = 60000

    browser_headless: bool = True
    browser_args: str = DEFAULT_BROWSER_ARGS
    user_agent: str = DESKTOP_USER_AGENT
    navigation_wait_until: str = "networkidle"
    navigation_timeout_ms: int = 20000
    settle_delay_ms: int = 1000
    jpeg_quality: int = 90

    cache_max_age_seconds: int = 86400
    cache_shared_max_age_seconds: int = 3600

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_browser_args(raw: str | None) -> list[str]:
    """Parse the comma-separated Chromium flag list from env."""
    if raw is None:
        return []
    return [chunk.strip() for chunk in raw.split(",") if chunk.strip()]


def build_cache_control(max_age: int, shared_max_age: int) -> str:
    """Build the Cache-Control directive for successful captures."""
    parts = ["public", f"max-age={max_age}"]
    if shared_max_age > 0:
        parts.append(f"s-maxage={shared_max_age}")
    return ", ".join(parts)
