from pydantic import BaseModel, Field

DEFAULT_GOAL = "general fitness"


class BodyProfile(BaseModel):
    weight_kg: float | None = Field(default=None, gt=0)
    height_cm: float | None = Field(default=None, gt=0)
    birth_year: int | None = None
    gender: str | None = None


class UserProfile(BaseModel):
    """Profile record as returned by accounts-service."""

    id: str
    primary_goal: str | None = None
    custom_goal: str | None = None
    weight_kg: float | None = None
    height_cm: float | None = None
    birth_year: int | None = None
    gender: str | None = None
    email_notifications: bool | None = False
    notification_email: str | None = None

    @property
    def goal(self) -> str:
        return self.custom_goal or self.primary_goal or DEFAULT_GOAL

    def body_profile(self) -> BodyProfile:
        return BodyProfile(
            weight_kg=self.weight_kg if self.weight_kg and self.weight_kg > 0 else None,
            height_cm=self.height_cm if self.height_cm and self.height_cm > 0 else None,
            birth_year=self.birth_year,
            gender=self.gender,
        )


class WorkoutHistoryEntry(BaseModel):
    """One logged workout as returned by workouts-service history."""

    type: str | None = None
    title: str | None = None
    duration_minutes: int | None = None
    feedback: str | None = None
    difficulty: int | None = None
    created_at: str | None = None

    def prompt_summary(self) -> dict:
        return self.model_dump(
            include={"type", "duration_minutes", "feedback", "difficulty"},
            exclude_none=True,
        )
