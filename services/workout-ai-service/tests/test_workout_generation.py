from datetime import UTC, datetime

import pytest
from conftest import FakeAccounts, FakeHistory, FakeLLM, profile, workout_payload
from workout_ai_service.exceptions import (
    UnparsableOutputError,
    UpstreamError,
    WorkoutValidationError,
)
from workout_ai_service.schemas.generation import AdaptiveContext, OnDemandWorkoutRequest
from workout_ai_service.schemas.profile import BodyProfile
from workout_ai_service.services.workout_generation import WorkoutGenerationService


def _clock():
    return datetime(2025, 6, 1, tzinfo=UTC)


def _request(**overrides) -> OnDemandWorkoutRequest:
    fields = {"target_muscles": ["Full body"], "workout_type": "HIIT", "duration_minutes": 60}
    fields.update(overrides)
    return OnDemandWorkoutRequest(**fields)


@pytest.mark.asyncio
async def test_on_demand_attaches_calories_from_request():
    llm = FakeLLM(workout_payload(type="Yoga", duration_minutes=20))
    service = WorkoutGenerationService(llm, clock=_clock)

    workout = await service.generate_on_demand(_request())

    assert workout.title == "Leg Day"
    assert workout.estimated_calories == 560
    assert len(llm.calls) == 1


@pytest.mark.asyncio
async def test_on_demand_uses_body_profile_for_calories():
    llm = FakeLLM(workout_payload())
    service = WorkoutGenerationService(llm, clock=_clock)

    request = _request(user_profile=BodyProfile(weight_kg=70, birth_year=1960, gender="female"))
    workout = await service.generate_on_demand(request)

    assert workout.estimated_calories == round(560 * 0.95 * 0.90 * 0.85 * 0.9)


@pytest.mark.asyncio
async def test_on_demand_fills_missing_duration_from_request():
    payload = workout_payload()
    payload.pop("duration_minutes")
    service = WorkoutGenerationService(FakeLLM(payload), clock=_clock)

    workout = await service.generate_on_demand(_request(duration_minutes=25))

    assert workout.duration_minutes == 25


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "error"),
    [
        (UpstreamError("AI API error: 503", status=503), UpstreamError),
        ("", UnparsableOutputError),
        ("Sorry, I can't help with that.", UnparsableOutputError),
        ({"title": "x", "sections": []}, WorkoutValidationError),
    ],
)
async def test_on_demand_failures_propagate_without_workout(response, error):
    service = WorkoutGenerationService(FakeLLM(response), clock=_clock)

    with pytest.raises(error):
        await service.generate_on_demand(_request())


@pytest.mark.asyncio
async def test_adaptive_requires_rationale():
    service = WorkoutGenerationService(FakeLLM(workout_payload()), clock=_clock)

    with pytest.raises(WorkoutValidationError):
        await service.generate_adaptive(AdaptiveContext())


@pytest.mark.asyncio
async def test_adaptive_falls_back_to_general_type_and_default_duration():
    payload = workout_payload(rationale="Mix it up today.")
    payload.pop("type")
    payload.pop("duration_minutes")
    service = WorkoutGenerationService(FakeLLM(payload), clock=_clock)

    workout = await service.generate_adaptive(AdaptiveContext())

    assert workout.duration_minutes == 30
    assert workout.estimated_calories == round(5.0 * 70 * 0.5)
    assert workout.rationale == "Mix it up today."


@pytest.mark.asyncio
async def test_suggest_reads_goal_equipment_and_feedback_history():
    llm = FakeLLM(workout_payload(type="Cardio", duration_minutes=30, rationale="Lighter day after HIIT."))
    accounts = FakeAccounts(
        profiles=[profile("u1", primary_goal="lose weight", custom_goal="run a 5k", weight_kg=60)],
        equipment={"u1": ["Jump rope"]},
    )
    history = FakeHistory(
        {
            "u1": [
                {"type": "HIIT", "duration_minutes": 30, "feedback": "exhausting", "difficulty": 9},
                {"type": "Yoga", "duration_minutes": 30, "feedback": None},
                {"type": "Strength", "duration_minutes": 45, "feedback": "good", "difficulty": 6},
                {"type": "Cardio", "duration_minutes": 20, "feedback": "easy", "difficulty": 3},
                {"type": "HIIT", "duration_minutes": 25, "feedback": "ok", "difficulty": 7},
            ]
        }
    )
    service = WorkoutGenerationService(llm, accounts=accounts, history=history, history_limit=3, clock=_clock)

    workout = await service.suggest_for_user("u1")

    assert workout.estimated_calories == round(7.0 * 60 * 0.5)
    assert history.calls == [{"user_id": "u1", "limit": 3, "with_feedback": True}]
    user_prompt = llm.calls[0]["user"]
    assert "run a 5k" in user_prompt
    assert "exhausting" in user_prompt and "easy" in user_prompt
    assert '"ok"' not in user_prompt
    assert "Jump rope" in llm.calls[0]["system"]


@pytest.mark.asyncio
async def test_suggest_without_profile_uses_defaults():
    llm = FakeLLM(workout_payload(rationale="Start simple."))
    service = WorkoutGenerationService(llm, accounts=FakeAccounts(), history=FakeHistory(), clock=_clock)

    workout = await service.suggest_for_user("nobody")

    assert workout.rationale == "Start simple."
    assert "general fitness" in llm.calls[0]["user"]
    assert "No previous workouts" in llm.calls[0]["user"]
