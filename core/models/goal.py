from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict


class GoalType(str, Enum):
    weight_loss = "weight_loss"
    weight_gain = "weight_gain"
    body_fat_reduction = "body_fat_reduction"
    muscle_gain = "muscle_gain"
    maintenance = "maintenance"


class Goal(BaseModel):
    # plain str so that a bad value reaches the recommender and fails there
    goal_type: str
    target_weight_kg: float | None = None
    target_body_fat_percentage: float | None = None
    target_date: date | None = None
    daily_calorie_target: int | None = None
    daily_protein_target: int | None = None
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)
