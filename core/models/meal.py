from __future__ import annotations

from pydantic import BaseModel, Field


class NutritionData(BaseModel):
    kcal: float | None = Field(None, ge=0)
    g_protein: float | None = Field(None, ge=0)
    g_carb: float | None = Field(None, ge=0)
    g_fat: float | None = Field(None, ge=0)


class FoodItem(BaseModel):
    name: str
    quantity_grams: float | None = None
    quantity_ml: float | None = None
    nutrition: NutritionData = NutritionData()
    source: str | None = None   # manual / ai / quick_add
