from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Sex(str, Enum):
    male = "male"
    female = "female"


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    lightly_active = "lightly_active"
    moderately_active = "moderately_active"
    very_active = "very_active"
    extremely_active = "extremely_active"


class Profile(BaseModel):
    """Inputs the estimator needs that are not part of a biometric reading."""

    age: int | None = Field(None, ge=15, le=100)
    sex: Sex | None = None
    activity_level: ActivityLevel | None = None
    # explicit override of the table lookup
    activity_multiplier: float | None = Field(None, ge=1.2, le=1.9)


class Biometric(BaseModel):
    weight_kg: float | None = None
    height_cm: float | None = None
    body_fat_percentage: float | None = None
    recorded_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)
