"""Application configuration loaded from environment variables."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    APP_NAME: str = "LECRM Notifications"
    ENV: str = "development"

    DATABASE_URL: str = "postgresql+psycopg://postgres@localhost:5432/lecrm"

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # remote data endpoints (used by the API-backed notification source)
    CRM_API_BASE_URL: str = ""
    CRM_API_TOKEN: str = ""
    CRM_API_TIMEOUT_SECONDS: float = 25.0
    CRM_API_MAX_RETRIES: int = 3

    # staleness windows, one per independently cached fetch
    NOTIFICATION_CACHE_SECONDS: int = 60
    SNOOZE_CACHE_SECONDS: int = 120
    TASK_CACHE_SECONDS: int = 120
    NOTIFICATION_LIST_LIMIT: int = 100

    UNIVERSAL_SNOOZE_MATCHES_ALL: bool = False
    # 0 means "use the calendar year"
    EFFECTIVE_YEAR: int = 0

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def crm_api_ready(self) -> bool:
        return bool(self.CRM_API_BASE_URL.strip())

    def effective_year(self, now: dt.datetime | None = None) -> int:
        if self.EFFECTIVE_YEAR > 0:
            return self.EFFECTIVE_YEAR
        return (now or dt.datetime.now(dt.timezone.utc)).year


settings = Settings()
