from __future__ import annotations

from pydantic import BaseModel, model_validator


class CalorieRecommendation(BaseModel):
    daily_calories: int
    daily_protein: int
    daily_carbs: int | None = None
    daily_fat: int | None = None
    reasoning: str
    bmr: int
    tdee: int
    deficit: int | None = None
    surplus: int | None = None

    @model_validator(mode="after")
    def _one_direction(self) -> "CalorieRecommendation":
        if self.deficit is not None and self.surplus is not None:
            raise ValueError("deficit and surplus are mutually exclusive")
        return self
