"""Celery application for workout-ai-service."""

from __future__ import annotations

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from .config import get_settings
from .logging_config import configure_logging

settings = get_settings()

NOTIFICATIONS_QUEUE = settings.CELERY_NOTIFICATIONS_QUEUE
DAILY_WORKOUT_TASK = "workout_ai.send_daily_workouts"

celery_app = Celery(
    "workout_ai_service",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_default_queue=NOTIFICATIONS_QUEUE,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    result_expires=settings.CELERY_RESULT_EXPIRES,
    beat_schedule={
        "daily-workout-emails": {
            "task": DAILY_WORKOUT_TASK,
            "schedule": crontab(hour=settings.DAILY_NOTIFICATION_HOUR_UTC, minute=0),
            "options": {"queue": NOTIFICATIONS_QUEUE},
        },
    },
)


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging(worker=True)


celery_app.autodiscover_tasks(["workout_ai_service"])
