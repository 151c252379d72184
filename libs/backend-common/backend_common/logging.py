import logging
import os
import sys
from collections.abc import Iterable

import sentry_sdk
import structlog
from asgi_correlation_id.context import correlation_id
from celery import current_task
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog.contextvars import merge_contextvars


def _service_tags(service_name: str):
    app_env = os.getenv("APP_ENV", "local")

    def processor(logger, method_name, event_dict):
        event_dict["service"] = service_name
        event_dict["env"] = app_env
        return event_dict

    return processor


def _request_and_task_ids(logger, method_name, event_dict):
    """Correlation id inside a request, Celery task id inside a worker."""
    cid = correlation_id.get(None)
    if cid is not None:
        event_dict["correlation_id"] = cid
        try:
            sentry_sdk.set_tag("correlation_id", cid)
        except Exception:
            pass

    request = getattr(current_task, "request", None) if current_task else None
    task_id = getattr(request, "id", None)
    if task_id:
        event_dict.setdefault("task_id", task_id)
        event_dict.setdefault("task_name", current_task.name)
    return event_dict


def _renderer(app_env: str):
    log_format = os.getenv("LOG_FORMAT", "").lower()
    if log_format == "console" or (not log_format and app_env in {"local", "dev", "test"}):
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def _init_sentry(service_name: str, app_env: str, extra_integrations: Iterable[object] | None) -> None:
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    sentry_sdk.init(
        dsn=dsn,
        environment=app_env,
        integrations=[
            FastApiIntegration(),
            *(extra_integrations or ()),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        send_default_pii=False,
    )
    sentry_sdk.set_tag("service", service_name)


def configure_logging(default_service_name: str, extra_sentry_integrations: Iterable[object] | None = None) -> None:
    """Configure structlog on top of stdlib logging, plus Sentry when ``SENTRY_DSN`` is set.

    Called by the ASGI app and by the Celery worker; the worker passes
    ``CeleryIntegration()`` through ``extra_sentry_integrations``. Output is
    JSON unless ``LOG_FORMAT=console`` or ``APP_ENV`` is local/dev/test.
    """
    service_name = os.getenv("SERVICE_NAME", default_service_name)
    app_env = os.getenv("APP_ENV", "local")
    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    _init_sentry(service_name, app_env, extra_sentry_integrations)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level, force=True)

    structlog.configure(
        processors=[
            merge_contextvars,
            _service_tags(service_name),
            _request_and_task_ids,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _renderer(app_env),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
