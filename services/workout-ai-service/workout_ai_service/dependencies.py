import secrets

from backend_common.dependencies import make_get_current_user_id_header
from fastapi import Depends, Header, HTTPException, status

from .config import Settings, get_settings
from .database import get_session_factory
from .services.accounts_client import AccountsServiceClient
from .services.daily_notifications import DailyWorkoutNotifier
from .services.email_sender import ResendEmailSender
from .services.llm_client import build_llm_client
from .services.notification_log import NotificationLogRepository
from .services.workout_generation import WorkoutGenerationService
from .services.workout_history_client import WorkoutHistoryClient

get_current_user_id = make_get_current_user_id_header("workout-ai-service")


def get_accounts_client(settings: Settings = Depends(get_settings)) -> AccountsServiceClient:
    return AccountsServiceClient(settings.ACCOUNTS_SERVICE_URL, timeout=settings.SERVICE_TIMEOUT_SECONDS)


def get_history_client(settings: Settings = Depends(get_settings)) -> WorkoutHistoryClient:
    return WorkoutHistoryClient(settings.WORKOUTS_SERVICE_URL, timeout=settings.SERVICE_TIMEOUT_SECONDS)


def get_generation_service(
    settings: Settings = Depends(get_settings),
    accounts: AccountsServiceClient = Depends(get_accounts_client),
    history: WorkoutHistoryClient = Depends(get_history_client),
) -> WorkoutGenerationService:
    return WorkoutGenerationService(
        build_llm_client(settings),
        accounts=accounts,
        history=history,
        history_limit=settings.ADAPTIVE_HISTORY_LIMIT,
    )


def get_email_sender(settings: Settings = Depends(get_settings)) -> ResendEmailSender:
    return ResendEmailSender(settings)


def get_notification_log_repository() -> NotificationLogRepository:
    return NotificationLogRepository(get_session_factory())


def build_daily_notifier(
    settings: Settings,
    *,
    log_repository: NotificationLogRepository | None = None,
) -> DailyWorkoutNotifier:
    """Wire the batch job from settings; every credential is checked before any recipient runs."""
    accounts = get_accounts_client(settings)
    history = get_history_client(settings)
    return DailyWorkoutNotifier(
        accounts=accounts,
        history=history,
        generator=WorkoutGenerationService(build_llm_client(settings)),
        sender=ResendEmailSender(settings),
        log_repository=log_repository,
        app_url=settings.APP_URL,
        history_limit=settings.DAILY_HISTORY_LIMIT,
        concurrency=settings.DAILY_BATCH_CONCURRENCY,
        timeout_seconds=settings.DAILY_BATCH_TIMEOUT_SECONDS,
    )


def get_test_notifier(settings: Settings = Depends(get_settings)) -> DailyWorkoutNotifier:
    return build_daily_notifier(settings)


def require_notifications_operator(
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Gate for the production batch; closed while ``NOTIFICATIONS_ADMIN_TOKEN`` is unset."""
    expected = settings.NOTIFICATIONS_ADMIN_TOKEN
    if not expected or not x_admin_token or not secrets.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Operator token required")
