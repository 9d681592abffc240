"""Application configuration using Pydantic Settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Storage
    storage_backend: str = "file"  # memory, file or mongodb
    storage_path: str = "data/agile-canvas.json"
    storage_key: str = "agile-canvas-projects"

    # MongoDB (storage_backend=mongodb)
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "agile_canvas"

    # Currency
    default_currency: str = "BRL"
    currency_api_url: str = "https://api.exchangerate-api.com/v4/latest/BRL"
    currency_refresh_minutes: int = 60
    currency_request_timeout: float = 10.0

    # Alerts
    overdue_alert_cooldown_minutes: int = 60

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8080"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
