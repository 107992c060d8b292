"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_in_seconds: int = 3600
    bcrypt_rounds: int = 12
    upload_dir: Path = Path("storage/uploads")
    temp_dir: Path = Path("temp")
    max_upload_bytes: int = 5 * 1024 * 1024
    max_image_pixels: int = 36_000_000
    login_max_attempts: int = 5
    login_lockout_seconds: int = 5 * 60
    rate_limits_enabled: bool = True
    log_level: str = "INFO"
    cors_allow_origins: str = "*"
    forwarded_allow_ips: str = "127.0.0.1"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_comma_list(raw: str | None) -> list[str]:
    """Parse a comma separated list (CORS origins, proxy addresses) from env."""
    if raw is None:
        return []
    cleaned = raw.strip()
    if cleaned == "*":
        return ["*"]
    return [chunk.strip() for chunk in cleaned.split(",") if chunk.strip()]
