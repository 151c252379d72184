from fastapi import APIRouter, Depends, Query

from ..calories import estimate_calories
from ..dependencies import get_current_user_id, get_generation_service
from ..schemas.generation import CalorieEstimateResponse, OnDemandWorkoutRequest, WorkoutResponse
from ..services.workout_generation import WorkoutGenerationService

router = APIRouter()


@router.post("/workouts/generate", response_model=WorkoutResponse, response_model_exclude_none=True)
async def generate_workout(
    request: OnDemandWorkoutRequest,
    user_id: str = Depends(get_current_user_id),
    service: WorkoutGenerationService = Depends(get_generation_service),
) -> WorkoutResponse:
    workout = await service.generate_on_demand(request)
    return WorkoutResponse(workout=workout)


@router.post("/workouts/suggest", response_model=WorkoutResponse, response_model_exclude_none=True)
async def suggest_workout(
    user_id: str = Depends(get_current_user_id),
    service: WorkoutGenerationService = Depends(get_generation_service),
) -> WorkoutResponse:
    workout = await service.suggest_for_user(user_id)
    return WorkoutResponse(workout=workout)


@router.get("/calories/estimate", response_model=CalorieEstimateResponse)
async def estimate_workout_calories(
    workout_type: str = Query(..., min_length=1),
    duration_minutes: int = Query(..., ge=0),
    weight_kg: float | None = Query(default=None, gt=0),
    age: int | None = Query(default=None, ge=0),
    gender: str | None = None,
) -> CalorieEstimateResponse:
    calories = estimate_calories(workout_type, duration_minutes, weight_kg=weight_kg, age=age, gender=gender)
    return CalorieEstimateResponse(
        workout_type=workout_type,
        duration_minutes=duration_minutes,
        estimated_calories=calories,
    )
