from .workout import (
    NO_HISTORY_MARKER,
    WorkoutPrompt,
    build_adaptive_prompt,
    build_on_demand_prompt,
    equipment_constraint,
)

__all__ = [
    "NO_HISTORY_MARKER",
    "WorkoutPrompt",
    "build_adaptive_prompt",
    "build_on_demand_prompt",
    "equipment_constraint",
]
