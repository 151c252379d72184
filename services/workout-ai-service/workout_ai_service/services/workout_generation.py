from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from ..calories import age_from_birth_year, estimate_calories
from ..exceptions import WorkoutAIError
from ..metrics import WORKOUT_GENERATION_FAILURES_TOTAL, WORKOUTS_GENERATED_TOTAL
from ..prompts import WorkoutPrompt, build_adaptive_prompt, build_on_demand_prompt
from ..schemas.generation import AdaptiveContext, OnDemandWorkoutRequest
from ..schemas.profile import BodyProfile
from ..schemas.workout import Workout
from .validation import parse_model_output, validate_workout

logger = structlog.get_logger(__name__)

ADAPTIVE_FALLBACK_TYPE = "General"
ADAPTIVE_FALLBACK_DURATION = 30


def _utcnow() -> datetime:
    return datetime.now(UTC)


class WorkoutGenerationService:
    """Prompt -> model -> parse -> validate -> calories.

    ``llm`` is anything with ``async complete(*, system_prompt, user_prompt) -> str``.
    ``accounts`` and ``history`` are only needed for ``suggest_for_user``.
    """

    def __init__(
        self,
        llm,
        *,
        accounts=None,
        history=None,
        history_limit: int = 3,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.llm = llm
        self.accounts = accounts
        self.history = history
        self.history_limit = history_limit
        self._clock = clock

    def _age(self, profile: BodyProfile | None) -> int | None:
        if profile is None:
            return None
        return age_from_birth_year(profile.birth_year, self._clock().year)

    def _calories(self, workout_type: str, duration: int, profile: BodyProfile | None) -> int:
        return estimate_calories(
            workout_type,
            duration,
            weight_kg=profile.weight_kg if profile else None,
            age=self._age(profile),
            gender=profile.gender if profile else None,
        )

    async def _complete_and_validate(
        self,
        prompt: WorkoutPrompt,
        *,
        mode: str,
        require_rationale: bool,
        **log_context,
    ) -> Workout:
        try:
            text = await self.llm.complete(system_prompt=prompt.system, user_prompt=prompt.user)
            candidate = parse_model_output(text)
            return validate_workout(candidate, require_rationale=require_rationale)
        except WorkoutAIError as exc:
            WORKOUT_GENERATION_FAILURES_TOTAL.labels(mode=mode, kind=exc.kind).inc()
            logger.warning("workout_generation_failed", mode=mode, kind=exc.kind, error=exc.message, **log_context)
            raise

    async def generate_on_demand(self, request: OnDemandWorkoutRequest) -> Workout:
        logger.info(
            "workout_generation_started",
            mode="on_demand",
            workout_type=request.workout_type,
            duration_minutes=request.duration_minutes,
            target_muscles=request.target_muscles,
            equipment_count=len(request.equipment or []),
        )
        workout = await self._complete_and_validate(
            build_on_demand_prompt(request),
            mode="on_demand",
            require_rationale=False,
        )
        if workout.duration_minutes is None:
            workout.duration_minutes = request.duration_minutes
        # calories follow what was asked for, not what the model labelled it
        workout.estimated_calories = self._calories(
            request.workout_type,
            request.duration_minutes,
            request.user_profile,
        )
        WORKOUTS_GENERATED_TOTAL.labels(mode="on_demand").inc()
        logger.info(
            "workout_generated",
            mode="on_demand",
            title=workout.title,
            exercises=workout.exercise_count,
            estimated_calories=workout.estimated_calories,
        )
        return workout

    async def generate_adaptive(self, context: AdaptiveContext, **log_context) -> Workout:
        workout = await self._complete_and_validate(
            build_adaptive_prompt(context),
            mode="adaptive",
            require_rationale=True,
            **log_context,
        )
        if workout.duration_minutes is None:
            workout.duration_minutes = ADAPTIVE_FALLBACK_DURATION
        workout.estimated_calories = self._calories(
            workout.type or ADAPTIVE_FALLBACK_TYPE,
            workout.duration_minutes,
            context.profile,
        )
        WORKOUTS_GENERATED_TOTAL.labels(mode="adaptive").inc()
        logger.info(
            "workout_generated",
            mode="adaptive",
            title=workout.title,
            exercises=workout.exercise_count,
            estimated_calories=workout.estimated_calories,
            history_entries=len(context.recent_workouts),
            **log_context,
        )
        return workout

    async def build_adaptive_context(self, user_id: str) -> AdaptiveContext:
        if self.accounts is None or self.history is None:
            raise RuntimeError("adaptive suggestions need the accounts and history clients")

        profile, equipment, recent = await asyncio.gather(
            self.accounts.get_profile(user_id),
            self.accounts.get_equipment(user_id),
            self.history.recent_workouts(user_id, limit=self.history_limit, with_feedback=True),
        )
        context = AdaptiveContext(equipment=equipment, recent_workouts=recent)
        if profile is not None:
            context.goal = profile.goal
            context.profile = profile.body_profile()
        return context

    async def suggest_for_user(self, user_id: str) -> Workout:
        """Adaptive workout for one user from their stored goal and recent feedback."""
        context = await self.build_adaptive_context(user_id)
        logger.info(
            "workout_generation_started",
            mode="adaptive",
            user_id=user_id,
            history_entries=len(context.recent_workouts),
            equipment_count=len(context.equipment),
        )
        return await self.generate_adaptive(context, user_id=user_id)
