from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .profile import DEFAULT_GOAL, BodyProfile
from .workout import Workout


class Recipient(BaseModel):
    """One user's context for a single daily batch run; never persisted."""

    user_id: str
    target_email: str
    goal: str = DEFAULT_GOAL
    profile: BodyProfile = Field(default_factory=BodyProfile)
    equipment: list[str] = Field(default_factory=list)
    recent_workout_types: list[str] = Field(default_factory=list)


class RecipientOutcome(BaseModel):
    user_id: str
    target: str | None = None
    success: bool
    error: str | None = None
    error_kind: str | None = None


class DailyBatchSummary(BaseModel):
    processed: int
    skipped: int = 0
    results: list[RecipientOutcome] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


class DailyTestRequest(BaseModel):
    test_email: str = Field(..., min_length=3)


class NotificationLogEntry(BaseModel):
    id: int | None = None
    user_id: str
    email_sent_to: str
    workout_data: Workout
    sent_at: datetime | None = None

    class Config:
        from_attributes = True


class UpgradeRequest(BaseModel):
    user_name: str | None = None
    user_email: str = Field(..., min_length=3)
    message: str | None = None
    interested_features: list[str] = Field(default_factory=list)


class UpgradeRequestResponse(BaseModel):
    success: bool = True


class DailyBatchTaskSubmission(BaseModel):
    task_id: str
    status: str = "PENDING"


class DailyBatchTaskStatus(BaseModel):
    task_id: str
    status: str
    result: DailyBatchSummary | None = None
    error: str | None = None
    meta: dict[str, Any] | None = None
