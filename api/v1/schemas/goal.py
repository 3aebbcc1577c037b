from __future__ import annotations
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from core.models.goal import GoalType


class GoalUpdate(BaseModel):
    target_weight_kg: float | None = Field(None, gt=0)
    target_body_fat_percentage: float | None = Field(None, ge=2, le=75)
    target_date: date | None = None
    daily_calorie_target: int | None = Field(None, gt=0)
    daily_protein_target: int | None = Field(None, gt=0)


class GoalIn(GoalUpdate):
    goal_type: GoalType


class GoalOut(GoalIn):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
