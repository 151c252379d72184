import structlog
from backend_common.fastapi_app import create_service_app
from fastapi import Request
from fastapi.responses import JSONResponse

from .exceptions import WorkoutAIError
from .logging_config import configure_logging
from .routers.notifications import router as notifications_router
from .routers.workouts import router as workouts_router

configure_logging()
logger = structlog.get_logger(__name__)

app = create_service_app(
    title="workout-ai-service",
    version="0.1.0",
    description="AI workout generation, calorie estimates and the daily workout email",
)


@app.exception_handler(WorkoutAIError)
async def workout_ai_exception_handler(request: Request, exc: WorkoutAIError):
    logger.warning(
        "request_failed",
        path=request.url.path,
        kind=exc.kind,
        status_code=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


app.include_router(workouts_router)
app.include_router(notifications_router)
