import os
import uuid
from typing import Any

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

_TRUTHY = {"1", "true", "yes", "on"}


def _cors_settings() -> dict[str, Any]:
    """CORS options from ``CORS_ORIGINS`` (comma separated) and ``CORS_ALLOW_CREDENTIALS``."""
    raw = os.getenv("CORS_ORIGINS", "*").strip()
    origins = ["*"] if raw == "*" else [o.strip() for o in raw.split(",") if o.strip()]
    # browsers refuse credentials with a wildcard origin
    credentials = origins != ["*"] and os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() in _TRUTHY
    return {
        "allow_origins": origins,
        "allow_credentials": credentials,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
    }


def create_service_app(
    *,
    title: str,
    version: str = "0.1.0",
    description: str = "",
    metrics_endpoint: str | None = "/metrics",
    enable_cors: bool = True,
    correlation_header_name: str | None = "X-Request-ID",
    health_path: str | None = "/health",
    **fastapi_kwargs: Any,
) -> FastAPI:
    """FastAPI app with Prometheus metrics, CORS, a correlation id and a health check.

    Pass ``None`` for ``metrics_endpoint``, ``correlation_header_name`` or
    ``health_path`` to leave that piece out.
    """
    app = FastAPI(title=title, version=version, description=description, **fastapi_kwargs)

    if metrics_endpoint:
        Instrumentator().instrument(app).expose(app, endpoint=metrics_endpoint, include_in_schema=False)

    if enable_cors:
        app.add_middleware(CORSMiddleware, **_cors_settings())

    if correlation_header_name:
        app.add_middleware(
            CorrelationIdMiddleware,
            header_name=correlation_header_name,
            generator=lambda: str(uuid.uuid4()),
            update_request_header=True,
        )

    if health_path:

        @app.get(health_path, include_in_schema=False)
        async def health() -> dict[str, str]:
            return {"status": "ok"}

    return app
