"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "MusicJam Check-In"
    debug: bool = False
    log_dir: Path = Path.home() / ".logs" / "jam-checkin"

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./jam_checkin.db"

    # Check-in monitoring
    monitor_interval_seconds: int = 60
    grace_period_minutes: int = 15
    reminder_lead_minutes: int = 60


settings = Settings()
