import structlog
from backend_common.celery_utils import build_task_status_response, enqueue_task
from fastapi import APIRouter, Depends, Query

from ..celery_app import NOTIFICATIONS_QUEUE, celery_app
from ..config import Settings, get_settings
from ..dependencies import (
    get_current_user_id,
    get_email_sender,
    get_notification_log_repository,
    get_test_notifier,
    require_notifications_operator,
)
from ..exceptions import ConfigurationError
from ..metrics import UPGRADE_REQUESTS_SENT_TOTAL
from ..schemas.notifications import (
    DailyBatchSummary,
    DailyBatchTaskStatus,
    DailyBatchTaskSubmission,
    DailyTestRequest,
    NotificationLogEntry,
    UpgradeRequest,
    UpgradeRequestResponse,
)
from ..services.daily_notifications import BatchMode, DailyWorkoutNotifier
from ..services.email_renderer import render_upgrade_request_email
from ..services.email_sender import ResendEmailSender
from ..services.notification_log import NotificationLogRepository
from ..tasks.notification_tasks import send_daily_workouts_task

router = APIRouter(prefix="/notifications")

logger = structlog.get_logger(__name__)


@router.post(
    "/daily",
    response_model=DailyBatchTaskSubmission,
    status_code=202,
    dependencies=[Depends(require_notifications_operator)],
)
async def run_daily_batch(user_id: str = Depends(get_current_user_id)) -> DailyBatchTaskSubmission:
    """Queue the production batch, which emails every subscriber."""
    payload = enqueue_task(
        send_daily_workouts_task,
        logger=logger,
        log_event="daily_workout_batch_enqueued",
        requested_by=user_id,
        queue=NOTIFICATIONS_QUEUE,
    )
    return DailyBatchTaskSubmission(**payload)


@router.get(
    "/daily/tasks/{task_id}",
    response_model=DailyBatchTaskStatus,
    dependencies=[Depends(require_notifications_operator)],
)
async def get_daily_batch_status(task_id: str) -> DailyBatchTaskStatus:
    return build_task_status_response(
        task_id=task_id,
        celery_app=celery_app,
        response_model=DailyBatchTaskStatus,
    )


@router.post("/daily/test", response_model=DailyBatchSummary)
async def run_daily_test(
    request: DailyTestRequest,
    user_id: str = Depends(get_current_user_id),
    notifier: DailyWorkoutNotifier = Depends(get_test_notifier),
) -> DailyBatchSummary:
    """Send the caller's daily workout to ``test_email`` right now; nothing is logged."""
    return await notifier.run(BatchMode.test(user_id, request.test_email))


@router.get("/logs", response_model=list[NotificationLogEntry])
async def list_notification_logs(
    limit: int = Query(default=30, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    repository: NotificationLogRepository = Depends(get_notification_log_repository),
) -> list[NotificationLogEntry]:
    return await repository.list_for_user(user_id, limit=limit)


@router.post("/upgrade-request", response_model=UpgradeRequestResponse)
async def send_upgrade_request(
    request: UpgradeRequest,
    user_id: str = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
    sender: ResendEmailSender = Depends(get_email_sender),
) -> UpgradeRequestResponse:
    if not settings.UPGRADE_REQUEST_RECIPIENT:
        raise ConfigurationError("UPGRADE_REQUEST_RECIPIENT is not configured")

    email = render_upgrade_request_email(request, user_id=user_id)
    await sender.send(to=settings.UPGRADE_REQUEST_RECIPIENT, subject=email.subject, html=email.html)
    UPGRADE_REQUESTS_SENT_TOTAL.inc()
    logger.info(
        "upgrade_request_sent",
        user_id=user_id,
        features=len(request.interested_features),
    )
    return UpgradeRequestResponse(success=True)
