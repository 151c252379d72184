from __future__ import annotations

from typing import Any, TypeVar

from celery import Celery
from celery.result import AsyncResult

TStatusModel = TypeVar("TStatusModel")


def enqueue_task(
    task_fn,
    *,
    logger,
    log_event: str,
    task_kwargs: dict[str, Any] | None = None,
    queue: str | None = None,
    **log_context: Any,
) -> dict[str, str]:
    """Send ``task_fn`` to the broker and return ``{task_id, status}`` for the caller to poll."""
    options = {"queue": queue} if queue else {}
    async_result = task_fn.apply_async(kwargs=task_kwargs or {}, **options)
    logger.info(
        log_event,
        task_id=async_result.id,
        task_name=getattr(task_fn, "name", None),
        queue=queue,
        **log_context,
    )
    return {"task_id": async_result.id, "status": async_result.status}


def task_status_payload(task_id: str, celery_app: Celery) -> dict[str, Any]:
    result = AsyncResult(task_id, app=celery_app)
    payload: dict[str, Any] = {"task_id": task_id, "status": result.status}
    if result.successful():
        payload["result"] = result.result
    elif result.failed():
        payload["error"] = f"{type(result.result).__name__}: {result.result}"
    elif isinstance(result.info, dict):
        # progress metadata from update_state()
        payload["meta"] = result.info
    return payload


def build_task_status_response(
    *,
    task_id: str,
    celery_app: Celery,
    response_model: type[TStatusModel],
) -> TStatusModel:
    return response_model(**task_status_payload(task_id, celery_app))
