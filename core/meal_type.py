"""
Default meal-type suggestion from the time of day.

Canonical bands (local hour, half-open):

    breakfast  [5, 11)
    lunch      [11, 16)
    dinner     [16, 22)
    snack      everything else
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

MealType = Literal["breakfast", "lunch", "dinner", "snack"]

MEAL_TYPES: tuple[MealType, ...] = ("breakfast", "lunch", "dinner", "snack")

_BANDS: tuple[tuple[int, int, MealType], ...] = (
    (5, 11, "breakfast"),
    (11, 16, "lunch"),
    (16, 22, "dinner"),
)


def meal_type_for_hour(hour: int) -> MealType:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be 0-23, got {hour}")
    for start, end, label in _BANDS:
        if start <= hour < end:
            return label
    return "snack"


def meal_type_for_time(at: datetime) -> MealType:
    return meal_type_for_hour(at.hour)


def extract_meal_type(text: str) -> MealType | None:
    """First meal word mentioned in free text, if any."""
    lower = text.lower()
    for label in MEAL_TYPES:
        if label in lower:
            return label
    return None
