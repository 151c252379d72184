from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = "gemini-2.5-flash"
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT_SECONDS: float = 60.0
    GOOGLE_API_KEY: str | None = None
    GEMINI_API_KEY: str | None = None
    LLM_GATEWAY_URL: str | None = None
    LLM_GATEWAY_API_KEY: str | None = None

    ACCOUNTS_SERVICE_URL: str = "http://accounts-service:8006"
    WORKOUTS_SERVICE_URL: str = "http://workouts-service:8004"
    SERVICE_TIMEOUT_SECONDS: float = 10.0

    WORKOUT_AI_DATABASE_URL: str | None = None

    RESEND_API_KEY: str | None = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Fitness Dashboard <onboarding@resend.dev>"
    APP_URL: str = "http://localhost:5173"
    UPGRADE_REQUEST_RECIPIENT: str | None = None
    NOTIFICATIONS_ADMIN_TOKEN: str | None = None

    ADAPTIVE_HISTORY_LIMIT: int = Field(default=3, ge=1)
    DAILY_HISTORY_LIMIT: int = Field(default=5, ge=1)
    DAILY_BATCH_CONCURRENCY: int = Field(default=1, ge=1)
    DAILY_BATCH_TIMEOUT_SECONDS: float = Field(default=1800.0, gt=0)
    DAILY_NOTIFICATION_HOUR_UTC: int = Field(default=7, ge=0, le=23)

    CELERY_BROKER_URL: str = "redis://redis:6379/5"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/6"
    CELERY_NOTIFICATIONS_QUEUE: str = "workout_ai.notifications"
    CELERY_TASK_TIME_LIMIT: int = 3600
    CELERY_RESULT_EXPIRES: int = 86400

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def google_api_key(self) -> str | None:
        return self.GOOGLE_API_KEY or self.GEMINI_API_KEY


@lru_cache()
def get_settings() -> Settings:
    return Settings()
