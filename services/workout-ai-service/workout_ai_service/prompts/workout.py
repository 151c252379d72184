from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from textwrap import dedent

from ..schemas.generation import AdaptiveContext, OnDemandWorkoutRequest
from ..schemas.profile import DEFAULT_GOAL

NO_HISTORY_MARKER = "No previous workouts"
ADAPTIVE_DURATION_HINT = "30-45 minutes"


@dataclass(frozen=True)
class WorkoutPrompt:
    system: str
    user: str


_EXERCISE_SHAPE = """\
        {
          "name": "string - exercise name",
          "details": "string - sets x reps, duration or instructions",
          "category": "string - one of: strength, cardio, flexibility, plyometric, core, balance",
          "muscle_group": "string - primary muscle targeted (e.g., chest, back, legs, shoulders, arms, core)"
        }"""


def _workout_shape(*, with_rationale: bool) -> str:
    rationale = (
        '\n  "rationale": "string - why this workout is right for the user today (2-3 sentences)",'
        if with_rationale
        else ""
    )
    return (
        "{\n"
        '  "title": "string - short, engaging workout name",\n'
        '  "type": "string - workout type (e.g., Strength Training, Cardio, HIIT, Yoga)",\n'
        f'  "duration_minutes": "integer - total minutes",{rationale}\n'
        '  "sections": [\n'
        "    {\n"
        '      "title": "Warm-up" | "Main Workout" | "Cool-down",\n'
        '      "exercises": [\n'
        f"{_EXERCISE_SHAPE}\n"
        "      ]\n"
        "    }\n"
        "  ]\n"
        "}"
    )


def equipment_constraint(equipment: Sequence[str] | None) -> str:
    items = [item.strip() for item in equipment or () if item and item.strip()]
    if not items:
        return ""
    return (
        f"IMPORTANT: Only use exercises that can be performed with this available equipment: {', '.join(items)}. "
        "Do NOT include exercises requiring equipment not listed."
    )


def _system_prompt(role: str, *, with_rationale: bool, equipment: Sequence[str] | None) -> str:
    parts = [
        dedent(
            f"""
            {role}
            Always return a single valid JSON object with exactly this structure:
            """
        ).strip(),
        _workout_shape(with_rationale=with_rationale),
        "Include category and muscle_group for EVERY exercise. "
        "Include a warm-up and a cool-down section. Return ONLY the JSON object, no markdown or commentary.",
    ]
    constraint = equipment_constraint(equipment)
    if constraint:
        parts.append(constraint)
    return "\n\n".join(parts)


def build_on_demand_prompt(request: OnDemandWorkoutRequest) -> WorkoutPrompt:
    """Prompt for a workout shaped entirely by what the caller asked for."""
    system = _system_prompt(
        "You are a professional fitness trainer creating structured workout plans. "
        "Make the workout challenging but achievable.",
        with_rationale=False,
        equipment=request.equipment,
    )
    user = dedent(
        f"""
        Create a {request.duration_minutes}-minute {request.workout_type} workout targeting {", ".join(request.target_muscles)}.
        User's fitness goal: {request.user_goal or DEFAULT_GOAL}.
        Use current fitness trends and proven exercise science. Make it engaging and effective.
        """
    ).strip()
    return WorkoutPrompt(system=system, user=user)


def format_history(context: AdaptiveContext) -> str:
    summaries = [entry.prompt_summary() for entry in context.recent_workouts]
    summaries = [s for s in summaries if s]
    if not summaries:
        return NO_HISTORY_MARKER
    return json.dumps(summaries, ensure_ascii=False)


def build_adaptive_prompt(context: AdaptiveContext) -> WorkoutPrompt:
    """Prompt for a suggestion that reacts to the user's recent history."""
    system = _system_prompt(
        "You are a professional fitness coach creating a personalized workout suggestion for today. "
        "Vary it from recent workouts to prevent plateaus and keep it achievable and motivating.",
        with_rationale=True,
        equipment=context.equipment,
    )
    user = dedent(
        f"""
        Create a personalized workout suggestion based on:
        - User's goal: {context.goal or DEFAULT_GOAL}
        - Target duration: {ADAPTIVE_DURATION_HINT}
        - Recent workout history (most recent first): {format_history(context)}

        Choose the workout type and target muscle groups that best complement the recent history.
        Consider feedback and difficulty ratings to adjust intensity, and avoid repeating the same session.
        """
    ).strip()
    return WorkoutPrompt(system=system, user=user)
