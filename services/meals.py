"""
services/meals.py
────────────────────────────────────────────────────────────────────────
Meal logging. A meal without an explicit type gets the time-of-day
suggestion from `core.meal_type`; a meal without explicit totals gets the
sum of its items.

`move_to_yesterday` re-dates a whole day (meals and chat thread) for users
who logged after midnight.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import NotFound
from core.meal_type import meal_type_for_time
from core.models.meal import FoodItem
from core.nutrition_summary import sum_items
from services import store
from services.db import ChatMessage, Meal, MealItem

_LOG = logging.getLogger(__name__)

EDITABLE = {"meal_name", "meal_type", "kcal_total", "g_protein", "g_carb", "g_fat", "date", "status", "image_url"}
_TOTALS = ("kcal_total", "g_protein", "g_carb", "g_fat")


def _local(at: datetime) -> datetime:
    tz = ZoneInfo(settings.timezone)
    return at.astimezone(tz) if at.tzinfo else at.replace(tzinfo=tz)


def meal_fields(data: dict[str, Any], items: list[FoodItem]) -> dict[str, Any]:
    """Resolve defaults: local `logged_at`, day, time-of-day type and item totals."""
    fields = dict(data)
    logged_at = _local(fields.pop("logged_at", None) or datetime.now(ZoneInfo(settings.timezone)))
    fields["logged_at"] = logged_at
    fields["date"] = fields.get("date") or logged_at.date()
    fields["meal_type"] = fields.get("meal_type") or meal_type_for_time(logged_at)

    summed = sum_items(items)
    for col in _TOTALS:
        if fields.get(col) is None:
            fields[col] = summed[col] if items else None
    return fields


def build_meal(user_id: int, fields: dict[str, Any], items: list[FoodItem]) -> Meal:
    meal = Meal(user_id=user_id, **fields)
    meal.items = [
        MealItem(
            food_name=it.name,
            quantity_grams=it.quantity_grams,
            quantity_ml=it.quantity_ml,
            kcal=it.nutrition.kcal,
            g_protein=it.nutrition.g_protein,
            g_carb=it.nutrition.g_carb,
            g_fat=it.nutrition.g_fat,
            source=it.source,
        )
        for it in items
    ]
    return meal


async def log_meal(
    db: AsyncSession,
    user_id: int,
    data: dict[str, Any],
    items: list[FoodItem],
) -> Meal:
    fields = meal_fields(data, items)

    async def op(s: AsyncSession) -> Meal:
        meal = build_meal(user_id, fields, items)
        s.add(meal)
        await s.flush()
        return meal

    meal = await store.run(db, op, label="log_meal")
    _LOG.info("user %s: logged %s %r (%s kcal)", user_id, meal.meal_type, meal.meal_name, meal.kcal_total)
    return meal


async def list_meals(db: AsyncSession, user_id: int, day: date) -> list[Meal]:
    async def op(s: AsyncSession) -> list[Meal]:
        res = await s.execute(
            select(Meal)
            .where(Meal.user_id == user_id, Meal.date == day)
            .order_by(Meal.logged_at, Meal.id)
        )
        return list(res.scalars().all())

    return await store.run(db, op, label="list_meals", write=False)


async def _owned(s: AsyncSession, user_id: int, meal_id: int) -> Meal:
    meal = await s.get(Meal, meal_id)
    if meal is None or meal.user_id != user_id:
        raise NotFound(f"meal {meal_id} not found")
    return meal


async def update_meal(db: AsyncSession, user_id: int, meal_id: int, changes: dict[str, Any]) -> Meal:
    values = {k: v for k, v in changes.items() if k in EDITABLE}

    async def op(s: AsyncSession) -> Meal:
        meal = await _owned(s, user_id, meal_id)
        for k, v in values.items():
            setattr(meal, k, v)
        await s.flush()
        return meal

    return await store.run(db, op, label="update_meal")


async def delete_meal(db: AsyncSession, user_id: int, meal_id: int) -> None:
    async def op(s: AsyncSession) -> None:
        meal = await _owned(s, user_id, meal_id)
        await s.delete(meal)

    await store.run(db, op, label="delete_meal")
    _LOG.info("user %s: deleted meal %s", user_id, meal_id)


@dataclass
class Moved:
    meals: int
    messages: int


async def move_to_yesterday(db: AsyncSession, user_id: int, day: date) -> Moved:
    """Re-date every meal and chat message of `day` to the day before, in one unit."""
    prev = day - timedelta(days=1)

    async def op(s: AsyncSession) -> Moved:
        meals = await s.execute(
            update(Meal).where(Meal.user_id == user_id, Meal.date == day).values(date=prev)
        )
        msgs = await s.execute(
            update(ChatMessage)
            .where(ChatMessage.user_id == user_id, ChatMessage.date == day)
            .values(date=prev)
        )
        return Moved(meals=meals.rowcount, messages=msgs.rowcount)

    moved = await store.run(db, op, label="move_to_yesterday")
    _LOG.info(
        "user %s: moved %d meal(s) and %d message(s) from %s to %s",
        user_id, moved.meals, moved.messages, day, prev,
    )
    return moved
