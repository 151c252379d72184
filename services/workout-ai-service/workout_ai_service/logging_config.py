from backend_common.logging import configure_logging as _configure_logging
from sentry_sdk.integrations.celery import CeleryIntegration

SERVICE_NAME = "workout-ai-service"


def configure_logging(*, worker: bool = False) -> None:
    _configure_logging(SERVICE_NAME, extra_sentry_integrations=[CeleryIntegration()] if worker else None)
