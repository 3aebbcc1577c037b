from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BiometricIn(BaseModel):
    weight_kg: float | None = Field(None, ge=20, le=400)
    height_cm: float | None = Field(None, ge=100, le=250)
    body_fat_percentage: float | None = Field(None, ge=2, le=75)
    recorded_at: datetime | None = None


class BiometricOut(BiometricIn):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
