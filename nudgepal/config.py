"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Key-value storage backing bills and spending records
    database_url: str = "sqlite:///./nudgepal.db"

    # Notification collaborator
    reminder_webhook_url: str = "http://localhost:8002/reminders"

    # Service
    service_name: str = "nudgepal-core"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds

    # Bills
    upcoming_window_days: int = 7


settings = Settings()
