from __future__ import annotations
import datetime as dt
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.meal_type import MealType
from core.models.meal import FoodItem


class MealIn(BaseModel):
    meal_name: str | None = None
    meal_type: MealType | None = None
    date: dt.date | None = None
    logged_at: datetime | None = None
    kcal_total: float | None = Field(None, ge=0)
    g_protein: float | None = Field(None, ge=0)
    g_carb: float | None = Field(None, ge=0)
    g_fat: float | None = Field(None, ge=0)
    image_url: str | None = None
    status: Literal["logged", "planned"] = "logged"
    items: list[FoodItem] = []


class MealUpdate(BaseModel):
    meal_name: str | None = None
    meal_type: MealType | None = None
    date: dt.date | None = None
    kcal_total: float | None = Field(None, ge=0)
    g_protein: float | None = Field(None, ge=0)
    g_carb: float | None = Field(None, ge=0)
    g_fat: float | None = Field(None, ge=0)
    image_url: str | None = None
    status: Literal["logged", "planned"] | None = None


class MealItemOut(BaseModel):
    id: int
    food_name: str
    quantity_grams: float | None
    quantity_ml: float | None
    kcal: float | None
    g_protein: float | None
    g_carb: float | None
    g_fat: float | None
    source: str | None

    model_config = ConfigDict(from_attributes=True)


class MealOut(BaseModel):
    id: int
    date: dt.date
    meal_name: str | None
    meal_type: str | None
    kcal_total: float | None
    g_protein: float | None
    g_carb: float | None
    g_fat: float | None
    logged_at: datetime
    image_url: str | None
    status: str
    items: list[MealItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class MacroProgressOut(BaseModel):
    consumed: float
    target: float | None
    percent: float | None
    over: bool

    model_config = ConfigDict(from_attributes=True)


class ProgressOut(BaseModel):
    date: dt.date
    target_id: int | None
    calories: MacroProgressOut
    protein: MacroProgressOut
    carbs: MacroProgressOut
    fat: MacroProgressOut
    summary: str
    context: str


class MovedOut(BaseModel):
    moved_meals: int
    moved_messages: int
    to_date: dt.date
