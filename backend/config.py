"""
Backend Configuration Module
============================
Centralized configuration using Pydantic Settings.
All settings are loaded from environment variables with sensible defaults.

Usage:
    from config import settings
    print(settings.database_url)
    print(settings.OCR_LANGUAGE)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses Pydantic Settings for validation and type coercion.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===== APPLICATION =====
    APP_NAME: str = "Clinical Report Summarizer"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===== SERVER =====
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 5000
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"
    API_PREFIX: str = ""

    # ===== DATABASE =====
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "clinical_reports"
    DATABASE_URL: str | None = None  # Can override full URL
    AUTO_CREATE_TABLES: bool = True

    # ===== GEMINI AI =====
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash-lite"
    SUMMARY_MAX_RETRIES: int = 2
    SUMMARY_MAX_OUTPUT_TOKENS: int = 1024

    # ===== AUTH =====
    JWT_ACCESS_SECRET: str = "dev-only-insecure-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_COOKIE_NAME: str = "npl_access"

    # ===== FILE LIMITS =====
    MAX_UPLOAD_SIZE_MB: int = 20

    # ===== OCR SETTINGS =====
    OCR_LANGUAGE: str = "eng"
    OCR_PAGE_SEG_MODE: int = 3  # Tesseract: fully automatic page segmentation
    OCR_MAX_IMAGE_DIMENSION: int = 2000
    OCR_FALLBACK_ENABLED: bool = True
    TESSERACT_CMD: str | None = None

    # ===== PDF SETTINGS =====
    PDF_READ_RETRIES: int = 3
    PDF_READ_BACKOFF_MS: int = 120

    # ===== COMPUTED PROPERTIES =====

    @computed_field
    @property
    def database_url(self) -> str:
        """Construct database URL from components or use override"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def async_database_url(self) -> str:
        """Async database URL for SQLAlchemy async engine"""
        base_url = self.database_url
        if base_url.startswith("sqlite://"):
            return base_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return base_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    @computed_field
    @property
    def allowed_origins_list(self) -> List[str]:
        """List of allowed CORS origins"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @computed_field
    @property
    def max_upload_bytes(self) -> int:
        """Max upload size in bytes"""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @computed_field
    @property
    def pdf_read_backoff_seconds(self) -> float:
        return self.PDF_READ_BACKOFF_MS / 1000

    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.APP_ENV == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to access settings throughout the application.

    Example:
        from config import get_settings
        settings = get_settings()
    """
    return Settings()


# Convenience: Direct access to settings singleton
settings = get_settings()
