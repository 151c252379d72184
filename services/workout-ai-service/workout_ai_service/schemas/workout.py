from pydantic import BaseModel


class Exercise(BaseModel):
    name: str
    details: str
    category: str | None = None
    muscle_group: str | None = None


class WorkoutSection(BaseModel):
    title: str
    exercises: list[Exercise]


class Workout(BaseModel):
    title: str
    type: str | None = None
    duration_minutes: int | None = None
    sections: list[WorkoutSection]
    rationale: str | None = None
    estimated_calories: int | None = None

    @property
    def exercise_count(self) -> int:
        return sum(len(section.exercises) for section in self.sections)

    def to_log_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
