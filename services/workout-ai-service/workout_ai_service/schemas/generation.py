from pydantic import BaseModel, Field, field_validator

from .profile import DEFAULT_GOAL, BodyProfile, WorkoutHistoryEntry
from .workout import Workout


class OnDemandWorkoutRequest(BaseModel):
    target_muscles: list[str] = Field(..., min_length=1)
    workout_type: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., gt=0)
    user_goal: str | None = None
    equipment: list[str] | None = None
    user_profile: BodyProfile | None = None

    @field_validator("target_muscles")
    @classmethod
    def _strip_blank_muscles(cls, value: list[str]) -> list[str]:
        cleaned = [m.strip() for m in value if m and m.strip()]
        if not cleaned:
            raise ValueError("at least one target muscle group is required")
        return cleaned


class AdaptiveContext(BaseModel):
    """Everything the adaptive prompt is built from, already read from the stores."""

    goal: str = DEFAULT_GOAL
    equipment: list[str] = Field(default_factory=list)
    recent_workouts: list[WorkoutHistoryEntry] = Field(default_factory=list)
    profile: BodyProfile = Field(default_factory=BodyProfile)


class WorkoutResponse(BaseModel):
    workout: Workout


class CalorieEstimateResponse(BaseModel):
    workout_type: str
    duration_minutes: int
    estimated_calories: int
