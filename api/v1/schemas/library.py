from __future__ import annotations
import datetime as dt
from datetime import datetime, time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.meal_type import MealType

BrandType = Literal["restaurant", "supplement_brand", "food_brand", "other"]
ItemCategory = Literal["meal", "snack", "supplement", "drink", "ingredient"]
Frequency = Literal["daily", "weekly", "as_needed"]


# ───────── brands ─────────
class BrandIn(BaseModel):
    name: str = Field(..., min_length=1)
    type: BrandType = "other"
    description: str | None = None
    website: str | None = None


class BrandOut(BrandIn):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ───────── brand menus ─────────
class MenuItemUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    price_cents: int | None = Field(None, ge=0)
    currency: str | None = None
    serving_size: str | None = None
    kcal_per_serving: int | None = Field(None, ge=0)
    g_protein_per_serving: float | None = Field(None, ge=0)
    g_carb_per_serving: float | None = Field(None, ge=0)
    g_fat_per_serving: float | None = Field(None, ge=0)
    g_fiber_per_serving: float | None = Field(None, ge=0)
    g_sugar_per_serving: float | None = Field(None, ge=0)
    mg_sodium_per_serving: float | None = Field(None, ge=0)
    ingredients: list[str] | None = None
    allergens: list[str] | None = None
    dietary_tags: list[str] | None = None
    is_available: bool | None = None
    is_seasonal: bool | None = None


class MenuItemIn(MenuItemUpdate):
    name: str = Field(..., min_length=1)
    currency: str = "USD"
    import_source: Literal["csv", "image", "manual"] = "manual"
    is_available: bool = True
    is_seasonal: bool = False


class MenuItemOut(MenuItemIn):
    id: int
    brand_id: int
    imported_by: int | None

    model_config = ConfigDict(from_attributes=True)


# ───────── saved items ─────────
class SavedItemUpdate(BaseModel):
    brand_id: int | None = None
    name: str | None = None
    category: ItemCategory | None = None
    serving_size: str | None = None
    kcal_per_serving: int | None = Field(None, ge=0)
    g_protein_per_serving: float | None = Field(None, ge=0)
    g_carb_per_serving: float | None = Field(None, ge=0)
    g_fat_per_serving: float | None = Field(None, ge=0)
    ingredients: list[str] | None = None
    allergens: list[str] | None = None
    notes: str | None = None
    image_url: str | None = None


class SavedItemIn(SavedItemUpdate):
    name: str = Field(..., min_length=1)
    category: ItemCategory = "meal"


class SavedItemOut(SavedItemIn):
    id: int
    brand: BrandOut | None = None
    times_used: int
    last_used_at: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuickLogIn(BaseModel):
    servings: float = Field(1.0, gt=0, le=20)
    meal_type: MealType | None = None
    date: dt.date | None = None
    logged_at: datetime | None = None


# ───────── supplement schedules ─────────
class ScheduleUpdate(BaseModel):
    frequency: Frequency | None = None
    times_per_day: int | None = Field(None, ge=1, le=12)
    preferred_times: list[str] | None = Field(None, examples=[["08:00", "20:00"]])
    is_active: bool | None = None

    @field_validator("preferred_times")
    @classmethod
    def _clock_times(cls, v: list[str] | None) -> list[str] | None:
        for t in v or []:
            time.fromisoformat(t)
        return v


class ScheduleIn(ScheduleUpdate):
    saved_item_id: int
    frequency: Frequency = "daily"
    times_per_day: int = Field(1, ge=1, le=12)
    is_active: bool = True


class ScheduleOut(ScheduleIn):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
