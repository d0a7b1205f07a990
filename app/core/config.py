"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "DripMap Events"
    debug: bool = False
    log_dir: str = "~/.logs/dripmap-events"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./dripmap_events.db"

    # Naive event times are wall-clock times in this zone
    local_timezone: str = "America/Los_Angeles"

    # Calendar export
    product_name: str = "DripMap"
    product_domain: str = "dripmap.com"
    default_event_duration_minutes: int = 60

    # Attendance
    recent_attendee_limit: int = 3

    # Notifications kept for GET /notifications
    notification_history: int = 50


settings = Settings()
