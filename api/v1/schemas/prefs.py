from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PreferenceIn(BaseModel):
    type: str = Field(..., examples=["allergy", "dislike", "dietary_restriction"])
    food_name: str
    notes: str | None = None


class PreferenceOut(PreferenceIn):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
