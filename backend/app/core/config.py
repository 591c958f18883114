from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    database_url: str = Field(default="sqlite:///./pricing.db", alias="DATABASE_URL")
    database_sslmode: str = Field(default="require", alias="DATABASE_SSLMODE")
    database_connect_timeout: int = 15  # seconds
    database_statement_timeout_ms: int = 30000

    # Pricing
    history_window_days: int = 90  # days of history loaded per recommendation
    competitor_alert_days: int = 7  # default look-back for competitor alerts
    persist_predictions: bool = True

    # App Configuration
    app_version: str = "1.0.0"
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
