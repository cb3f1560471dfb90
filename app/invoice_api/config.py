"""
Application configuration using Pydantic Settings.

Automatically loads environment variables from .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: str | None = None
    ai_model: str = "gpt-4.1"

    # Database
    database_url: str = "sqlite:///./invoices.db"

    # Auth
    jwt_secret: str = "dev-secret-change-me-before-deploying"
    jwt_algorithm: str = "HS256"
    jwt_expiry_days: int = 30

    # Outgoing mail (reminder dispatch)
    email_user: str | None = None
    email_pass: str | None = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    # Comma-separated list of allowed frontend origins
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"

    # Debug flags
    sql_debug: bool = False
    debug: bool = False

    model_config = SettingsConfigDict(
        # Load from .env file in the package directory
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        # Case insensitive environment variable names
        case_sensitive=False,
    )

    @property
    def allowed_origins(self) -> list[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()
