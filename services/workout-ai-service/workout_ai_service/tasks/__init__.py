"""Celery tasks package for workout-ai-service.

Imported by ``celery_app.autodiscover_tasks(["workout_ai_service"])`` so the
module-level ``@shared_task`` decorators below register their tasks.
"""

from . import notification_tasks as _notification_tasks  # noqa: F401
