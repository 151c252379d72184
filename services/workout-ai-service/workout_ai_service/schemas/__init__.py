from .generation import AdaptiveContext, CalorieEstimateResponse, OnDemandWorkoutRequest, WorkoutResponse
from .notifications import (
    DailyBatchSummary,
    DailyBatchTaskStatus,
    DailyBatchTaskSubmission,
    DailyTestRequest,
    NotificationLogEntry,
    Recipient,
    RecipientOutcome,
    UpgradeRequest,
    UpgradeRequestResponse,
)
from .profile import DEFAULT_GOAL, BodyProfile, UserProfile, WorkoutHistoryEntry
from .workout import Exercise, Workout, WorkoutSection

__all__ = [
    "AdaptiveContext",
    "BodyProfile",
    "CalorieEstimateResponse",
    "DailyBatchSummary",
    "DailyBatchTaskStatus",
    "DailyBatchTaskSubmission",
    "DailyTestRequest",
    "DEFAULT_GOAL",
    "Exercise",
    "NotificationLogEntry",
    "OnDemandWorkoutRequest",
    "Recipient",
    "RecipientOutcome",
    "UpgradeRequest",
    "UpgradeRequestResponse",
    "UserProfile",
    "Workout",
    "WorkoutHistoryEntry",
    "WorkoutResponse",
    "WorkoutSection",
]
