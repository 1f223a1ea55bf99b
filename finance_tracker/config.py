"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage
    storage_backend: str = "json"  # json | sql
    data_file: str = "data.json"
    database_url: str = "sqlite:///./finance_tracker.db"

    # Remote ledger API (used by LedgerApiClient)
    api_base: str = "http://localhost:8000/v1"

    # Service
    service_name: str = "finance-tracker"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0


settings = Settings()
