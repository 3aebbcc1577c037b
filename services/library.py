"""
services/library.py
────────────────────────────────────────────────────────────────────────
Quick-add library:

* brands          – shared restaurants / product brands (unique name)
* menu items      – a brand's public menu; only the importer may edit a row
* saved items     – a user's own meals, snacks, supplements
* supplements     – recurring schedules over saved items

`find_matches` ranks saved items whose "name brand" text contains the query,
most used first. `log_saved_item` turns one saved item into a logged meal and
bumps its usage counter in the same transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AlreadyExists, NotFound
from core.models.meal import FoodItem, NutritionData
from services import store
from services.db import Brand, BrandMenuItem, Meal, SavedItem, SupplementSchedule
from services.meals import build_meal, meal_fields

_LOG = logging.getLogger(__name__)

MATCH_LIMIT = 5

ITEM_EDITABLE = {
    "brand_id",
    "name",
    "category",
    "serving_size",
    "kcal_per_serving",
    "g_protein_per_serving",
    "g_carb_per_serving",
    "g_fat_per_serving",
    "ingredients",
    "allergens",
    "notes",
    "image_url",
}
SCHEDULE_EDITABLE = {"frequency", "times_per_day", "preferred_times", "is_active"}


# ───────────────────────── brands ───────────────────────────
async def list_brands(db: AsyncSession) -> list[Brand]:
    async def op(s: AsyncSession) -> list[Brand]:
        return list((await s.execute(select(Brand).order_by(Brand.name))).scalars().all())

    return await store.run(db, op, label="list_brands", write=False)


async def create_brand(db: AsyncSession, data: dict[str, Any]) -> Brand:
    async def op(s: AsyncSession) -> Brand:
        taken = (
            await s.execute(select(Brand.id).where(func.lower(Brand.name) == data["name"].lower()))
        ).scalar_one_or_none()
        if taken is not None:
            raise AlreadyExists(f"brand {data['name']!r} already exists")
        brand = Brand(**data)
        s.add(brand)
        await s.flush()
        return brand

    return await store.run(db, op, label="create_brand")


async def _brand(s: AsyncSession, brand_id: int) -> Brand:
    brand = await s.get(Brand, brand_id)
    if brand is None:
        raise NotFound(f"brand {brand_id} not found")
    return brand


# ───────────────────────── brand menus ──────────────────────
async def list_menu_items(db: AsyncSession, brand_id: int, available_only: bool = True) -> list[BrandMenuItem]:
    async def op(s: AsyncSession) -> list[BrandMenuItem]:
        await _brand(s, brand_id)
        q = select(BrandMenuItem).where(BrandMenuItem.brand_id == brand_id)
        if available_only:
            q = q.where(BrandMenuItem.is_available.is_(True))
        return list((await s.execute(q.order_by(BrandMenuItem.name))).scalars().all())

    return await store.run(db, op, label="list_menu_items", write=False)


async def add_menu_item(db: AsyncSession, user_id: int, brand_id: int, data: dict[str, Any]) -> BrandMenuItem:
    async def op(s: AsyncSession) -> BrandMenuItem:
        await _brand(s, brand_id)
        row = BrandMenuItem(brand_id=brand_id, imported_by=user_id, **data)
        s.add(row)
        await s.flush()
        return row

    return await store.run(db, op, label="add_menu_item")


async def _imported(s: AsyncSession, user_id: int, item_id: int) -> BrandMenuItem:
    row = await s.get(BrandMenuItem, item_id)
    if row is None or row.imported_by != user_id:
        raise NotFound(f"menu item {item_id} not found")
    return row


async def update_menu_item(db: AsyncSession, user_id: int, item_id: int, changes: dict[str, Any]) -> BrandMenuItem:
    async def op(s: AsyncSession) -> BrandMenuItem:
        row = await _imported(s, user_id, item_id)
        for k, v in changes.items():
            setattr(row, k, v)
        await s.flush()
        return row

    return await store.run(db, op, label="update_menu_item")


async def delete_menu_item(db: AsyncSession, user_id: int, item_id: int) -> None:
    async def op(s: AsyncSession) -> None:
        await s.delete(await _imported(s, user_id, item_id))

    await store.run(db, op, label="delete_menu_item")


# ───────────────────────── saved items ──────────────────────
async def list_saved_items(db: AsyncSession, user_id: int) -> list[SavedItem]:
    """Most used first."""

    async def op(s: AsyncSession) -> list[SavedItem]:
        res = await s.execute(
            select(SavedItem)
            .where(SavedItem.user_id == user_id)
            .order_by(SavedItem.times_used.desc(), SavedItem.name)
        )
        return list(res.scalars().all())

    return await store.run(db, op, label="list_saved_items", write=False)


async def _owned_item(s: AsyncSession, user_id: int, item_id: int) -> SavedItem:
    item = await s.get(SavedItem, item_id)
    if item is None or item.user_id != user_id:
        raise NotFound(f"saved item {item_id} not found")
    return item


async def create_saved_item(db: AsyncSession, user_id: int, data: dict[str, Any]) -> SavedItem:
    async def op(s: AsyncSession) -> SavedItem:
        if data.get("brand_id") is not None:
            await _brand(s, data["brand_id"])
        item = SavedItem(user_id=user_id, times_used=0, **data)
        s.add(item)
        await s.flush()
        await s.refresh(item, ["brand"])
        return item

    item = await store.run(db, op, label="create_saved_item")
    _LOG.info("user %s: saved %s %r", user_id, item.category, item.name)
    return item


async def update_saved_item(db: AsyncSession, user_id: int, item_id: int, changes: dict[str, Any]) -> SavedItem:
    values = {k: v for k, v in changes.items() if k in ITEM_EDITABLE}

    async def op(s: AsyncSession) -> SavedItem:
        item = await _owned_item(s, user_id, item_id)
        if values.get("brand_id") is not None:
            await _brand(s, values["brand_id"])
        for k, v in values.items():
            setattr(item, k, v)
        await s.flush()
        await s.refresh(item, ["brand"])
        return item

    return await store.run(db, op, label="update_saved_item")


async def delete_saved_item(db: AsyncSession, user_id: int, item_id: int) -> None:
    async def op(s: AsyncSession) -> None:
        await s.delete(await _owned_item(s, user_id, item_id))

    await store.run(db, op, label="delete_saved_item")


async def find_matches(db: AsyncSession, user_id: int, query: str, limit: int = MATCH_LIMIT) -> list[SavedItem]:
    needle = query.strip().lower()
    if not needle:
        return []
    pattern = func.lower(SavedItem.name + " " + func.coalesce(Brand.name, ""), type_=String)

    async def op(s: AsyncSession) -> list[SavedItem]:
        res = await s.execute(
            select(SavedItem)
            .outerjoin(Brand, SavedItem.brand_id == Brand.id)
            .where(SavedItem.user_id == user_id, pattern.contains(needle, autoescape=True))
            .order_by(SavedItem.times_used.desc(), SavedItem.last_used_at.desc(), SavedItem.id)
            .limit(limit)
        )
        return list(res.scalars().all())

    return await store.run(db, op, label="find_quick_add_matches", write=False)


async def _bump_usage(s: AsyncSession, user_id: int, item_id: int) -> None:
    await s.execute(
        update(SavedItem)
        .where(SavedItem.id == item_id, SavedItem.user_id == user_id)
        .values(times_used=SavedItem.times_used + 1, last_used_at=datetime.now(timezone.utc))
    )


async def record_usage(db: AsyncSession, user_id: int, item_id: int) -> SavedItem:
    async def op(s: AsyncSession) -> SavedItem:
        item = await _owned_item(s, user_id, item_id)
        await _bump_usage(s, user_id, item_id)
        await s.refresh(item, ["times_used", "last_used_at", "brand"])
        return item

    return await store.run(db, op, label="record_item_usage")


async def log_saved_item(
    db: AsyncSession,
    user_id: int,
    item_id: int,
    servings: float = 1.0,
    data: dict[str, Any] | None = None,
) -> Meal:
    """Log `servings` of a saved item as one meal and count the use."""

    async def op(s: AsyncSession) -> Meal:
        item = await _owned_item(s, user_id, item_id)
        food = FoodItem(
            name=item.name,
            nutrition=NutritionData(
                kcal=_scaled(item.kcal_per_serving, servings),
                g_protein=_scaled(item.g_protein_per_serving, servings),
                g_carb=_scaled(item.g_carb_per_serving, servings),
                g_fat=_scaled(item.g_fat_per_serving, servings),
            ),
            source="quick_add",
        )
        name = f"{item.name} ({item.brand.name})" if item.brand else item.name
        fields = meal_fields({"meal_name": name, **(data or {})}, [food])
        meal = build_meal(user_id, fields, [food])
        s.add(meal)
        await _bump_usage(s, user_id, item_id)
        await s.flush()
        return meal

    meal = await store.run(db, op, label="log_saved_item")
    _LOG.info("user %s: quick-added item %s as meal %s", user_id, item_id, meal.id)
    return meal


def _scaled(value: float | None, servings: float) -> float | None:
    return round(value * servings, 1) if value is not None else None


# ───────────────────────── supplement schedules ─────────────
async def list_schedules(db: AsyncSession, user_id: int, active_only: bool = True) -> list[SupplementSchedule]:
    async def op(s: AsyncSession) -> list[SupplementSchedule]:
        q = select(SupplementSchedule).where(SupplementSchedule.user_id == user_id)
        if active_only:
            q = q.where(SupplementSchedule.is_active.is_(True))
        return list((await s.execute(q.order_by(SupplementSchedule.id.desc()))).scalars().all())

    return await store.run(db, op, label="list_schedules", write=False)


async def create_schedule(db: AsyncSession, user_id: int, data: dict[str, Any]) -> SupplementSchedule:
    async def op(s: AsyncSession) -> SupplementSchedule:
        await _owned_item(s, user_id, data["saved_item_id"])
        row = SupplementSchedule(user_id=user_id, **data)
        s.add(row)
        await s.flush()
        return row

    return await store.run(db, op, label="create_schedule")


async def _owned_schedule(s: AsyncSession, user_id: int, schedule_id: int) -> SupplementSchedule:
    row = await s.get(SupplementSchedule, schedule_id)
    if row is None or row.user_id != user_id:
        raise NotFound(f"schedule {schedule_id} not found")
    return row


async def update_schedule(db: AsyncSession, user_id: int, schedule_id: int, changes: dict[str, Any]) -> SupplementSchedule:
    values = {k: v for k, v in changes.items() if k in SCHEDULE_EDITABLE}

    async def op(s: AsyncSession) -> SupplementSchedule:
        row = await _owned_schedule(s, user_id, schedule_id)
        for k, v in values.items():
            setattr(row, k, v)
        await s.flush()
        return row

    return await store.run(db, op, label="update_schedule")


async def delete_schedule(db: AsyncSession, user_id: int, schedule_id: int) -> None:
    async def op(s: AsyncSession) -> None:
        await s.delete(await _owned_schedule(s, user_id, schedule_id))

    await store.run(db, op, label="delete_schedule")
