"""
Centralized configuration for the HygieneQuest dashboard.

All settings are loaded from environment variables (prefixed with HQ_)
or a local .env file, with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_BASE_URL = "https://hygienequestemdpoints.onrender.com"


class Settings(BaseSettings):
    """Dashboard settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HQ_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "HygieneQuest Dashboard"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Remote API
    api_base_url: str = DEFAULT_API_BASE_URL
    data_timeout_seconds: float = 10.0
    otp_timeout_seconds: float = 30.0

    # Session / export token lifetimes
    session_lifetime_minutes: int = 20
    session_warning_minutes: int = 5
    export_token_lifetime_minutes: int = 30
    otp_resend_cooldown_seconds: int = 120

    # Export request polling (None disables auto-refresh)
    approver_poll_interval_seconds: Optional[float] = 30.0
    requester_poll_interval_seconds: Optional[float] = None

    # Substitute sample records when the attendance API is unreachable
    degraded_mode: bool = False

    # Local storage
    credential_store_path: Path = Path.home() / ".hygienequest" / "credentials.json"
    export_dir: Path = Path("exports")

    @property
    def session_lifetime_ms(self) -> int:
        return self.session_lifetime_minutes * 60 * 1000

    @property
    def session_warning_ms(self) -> int:
        return self.session_warning_minutes * 60 * 1000

    @property
    def export_token_lifetime_ms(self) -> int:
        return self.export_token_lifetime_minutes * 60 * 1000


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
