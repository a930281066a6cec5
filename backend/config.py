"""
Configuration settings for the triage backend.
Uses pydantic-settings for environment variable management.

DATABASE_URL priority:
  1. DATABASE_URL env var (PostgreSQL in deployment)
  2. Fallback: SQLite for local development
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Sales Triage Platform"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./sales_triage.db"

    @property
    def is_postgres(self) -> bool:
        return self.DATABASE_URL.startswith("postgresql")

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Triage
    TRIAGE_SESSION_TTL_MINUTES: int = 120  # drafts older than this are discarded
    REQUIRE_TRIAGE_FOR_CONSULTATION: bool = False

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
