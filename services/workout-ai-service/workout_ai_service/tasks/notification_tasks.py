"""Celery task that runs the production daily workout email batch."""

from __future__ import annotations

import asyncio
from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger

from ..celery_app import DAILY_WORKOUT_TASK, NOTIFICATIONS_QUEUE
from ..config import get_settings
from ..database import open_task_database
from ..dependencies import build_daily_notifier
from ..schemas.notifications import DailyBatchSummary
from ..services.daily_notifications import PRODUCTION
from ..services.notification_log import NotificationLogRepository

logger = get_task_logger(__name__)


def _run_async(coro):
    return asyncio.run(coro)


async def _run_production_batch() -> DailyBatchSummary:
    settings = get_settings()
    engine, session_factory = open_task_database(settings)
    try:
        notifier = build_daily_notifier(settings, log_repository=NotificationLogRepository(session_factory))
        return await notifier.run(PRODUCTION)
    finally:
        await engine.dispose()


# A failed recipient waits for the next scheduled run, so the task never retries.
@shared_task(bind=True, name=DAILY_WORKOUT_TASK, queue=NOTIFICATIONS_QUEUE, max_retries=0)
def send_daily_workouts_task(self) -> dict[str, Any]:
    """Send today's workout to every subscribed user."""
    try:
        summary = _run_async(_run_production_batch())
    except Exception as exc:
        logger.exception("send_daily_workouts_task_failed", exc_info=exc)
        raise
    logger.info(
        "send_daily_workouts_task_finished processed=%s skipped=%s failed=%s",
        summary.processed,
        summary.skipped,
        summary.failed,
    )
    return summary.model_dump(mode="json")
