"""Calorie estimation from Metabolic Equivalent of Task (MET) coefficients.

calories = MET * weight_kg * hours, discounted for age and gender. The MET
lookup walks ``MET_TABLE`` in order and takes the first key contained in the
workout type (case-insensitive), so "Upper Body Strength Training" resolves
to "Strength Training" rather than "Upper Body".
"""

from __future__ import annotations

import math

MET_TABLE: tuple[tuple[str, float], ...] = (
    ("Strength Training", 5.0),
    ("Strength", 5.0),
    ("Cardio", 7.0),
    ("HIIT", 8.0),
    ("Yoga", 3.0),
    ("Calisthenics", 5.5),
    ("Circuit Training", 6.5),
    ("Full Body", 5.5),
    ("Upper Body", 5.0),
    ("Lower Body", 5.5),
)
DEFAULT_MET = 5.0
DEFAULT_WEIGHT_KG = 70.0

# (age strictly above, multiplier); applied cumulatively in this order
AGE_ADJUSTMENTS: tuple[tuple[int, float], ...] = (
    (40, 0.95),
    (50, 0.90),
    (60, 0.85),
)
FEMALE_ADJUSTMENT = 0.9


def lookup_met(workout_type: str | None) -> float:
    if not workout_type:
        return DEFAULT_MET
    needle = workout_type.upper()
    for key, met in MET_TABLE:
        if key.upper() in needle:
            return met
    return DEFAULT_MET


def estimate_calories(
    workout_type: str | None,
    duration_minutes: float | None,
    weight_kg: float | None = None,
    age: int | None = None,
    gender: str | None = None,
) -> int:
    """Estimated kilocalories burned; total, never raises, never negative."""
    met = lookup_met(workout_type)
    weight = weight_kg if weight_kg and weight_kg > 0 else DEFAULT_WEIGHT_KG
    minutes = duration_minutes if duration_minutes and duration_minutes > 0 else 0

    calories = met * weight * (minutes / 60)

    if age:
        for threshold, multiplier in AGE_ADJUSTMENTS:
            if age > threshold:
                calories *= multiplier

    if gender and gender.strip().lower() == "female":
        calories *= FEMALE_ADJUSTMENT

    # half-up, not banker's rounding
    return max(0, math.floor(calories + 0.5))


def age_from_birth_year(birth_year: int | None, current_year: int) -> int | None:
    if not birth_year:
        return None
    return current_year - birth_year
