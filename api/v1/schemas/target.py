from __future__ import annotations
import datetime as dt
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.models.recommendation import CalorieRecommendation
from core.models.user import ActivityLevel, Sex


class ProposeRequest(BaseModel):
    """Optional per-request overrides of the stored profile."""

    date: dt.date | None = None
    age: int | None = Field(None, ge=15, le=100)
    sex: Sex | None = None
    activity_level: ActivityLevel | None = None
    activity_multiplier: float | None = Field(None, ge=1.2, le=1.9)


class DailyTargetOut(BaseModel):
    id: int
    goal_id: int | None
    date: dt.date
    calories_target: int
    protein_target: int
    carbs_target: int | None
    fat_target: int | None
    reasoning: str | None
    is_accepted: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProposalOut(BaseModel):
    target: DailyTargetOut
    recommendation: CalorieRecommendation
