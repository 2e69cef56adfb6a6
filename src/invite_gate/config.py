"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    telegram_bot_username: str | None = None
    supabase_url: str
    supabase_service_key: str
    audit_supabase_url: str | None = None
    audit_supabase_service_key: str | None = None
    supabase_timeout_seconds: int = 10
    admin_token: str
    telegram_admin_usernames: str | None = None
    invite_ttl_hours: int = 48
    invite_max_usage: int = 1
    log_retention_days: int = 90
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_admin_usernames(raw: str | None) -> frozenset[str]:
    """Parse admin Telegram usernames from env.

    Usernames are compared case-insensitively and without the leading ``@``.
    """
    if raw is None:
        return frozenset()
    names: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip().lstrip("@").lower()
        if value:
            names.add(value)
    return frozenset(names)
