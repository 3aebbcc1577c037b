"""
Quick-add library, chat history and day moves against a throwaway SQLite
database.
"""
from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import select

from core.errors import AlreadyExists, NotFound
from services import chat as chat_svc
from services import library as lib_svc
from services import meals as meal_svc
from services.db import SavedItem

DAY = date(2026, 3, 2)


async def _fresh(s, item_id):
    res = await s.execute(
        select(SavedItem).where(SavedItem.id == item_id).execution_options(populate_existing=True)
    )
    return res.scalar_one()


def test_brand_names_are_unique_ignoring_case(run_db):
    async def go(s):
        await lib_svc.create_brand(s, {"name": "Thorne", "type": "supplement_brand"})
        await lib_svc.create_brand(s, {"name": "thorne", "type": "other"})

    with pytest.raises(AlreadyExists):
        run_db(go)


def test_quick_add_match_by_name_or_brand(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        other = await new_user(s, email="other@example.com")
        thorne = await lib_svc.create_brand(s, {"name": "Thorne", "type": "supplement_brand"})
        collagen = await lib_svc.create_saved_item(
            s, u.id, {"name": "Collagen powder", "category": "supplement", "brand_id": thorne.id}
        )
        await lib_svc.create_saved_item(s, u.id, {"name": "Salmon avocado toast", "category": "meal"})
        await lib_svc.create_saved_item(s, other.id, {"name": "Collagen bar", "category": "snack"})

        by_name = await lib_svc.find_matches(s, u.id, "  COLLAGEN ")
        by_brand = await lib_svc.find_matches(s, u.id, "thorne")
        nothing = await lib_svc.find_matches(s, u.id, "")
        return collagen.id, by_name, by_brand, nothing

    collagen_id, by_name, by_brand, nothing = run_db(go)
    assert [i.id for i in by_name] == [collagen_id]
    assert [i.id for i in by_brand] == [collagen_id]
    assert by_brand[0].brand.name == "Thorne"
    assert nothing == []


def test_logging_saved_item_counts_use(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        item = await lib_svc.create_saved_item(
            s,
            u.id,
            {
                "name": "Flat white",
                "category": "drink",
                "kcal_per_serving": 120,
                "g_protein_per_serving": 6.5,
                "g_carb_per_serving": 9,
                "g_fat_per_serving": 6,
            },
        )
        item_id = item.id
        meal = await lib_svc.log_saved_item(
            s, u.id, item_id, servings=2, data={"logged_at": datetime(2026, 3, 2, 8, 15)}
        )
        await lib_svc.log_saved_item(s, u.id, item_id)
        return meal, await _fresh(s, item_id)

    meal, item = run_db(go)
    assert meal.meal_name == "Flat white"
    assert meal.meal_type == "breakfast"
    assert meal.date == DAY
    assert meal.kcal_total == 240
    assert meal.g_protein == 13
    assert meal.items[0].source == "quick_add"
    assert item.times_used == 2
    assert item.last_used_at is not None


def test_most_used_items_rank_first(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        a = await lib_svc.create_saved_item(s, u.id, {"name": "Oat latte", "category": "drink"})
        b = await lib_svc.create_saved_item(s, u.id, {"name": "Oat cookie", "category": "snack"})
        await lib_svc.record_usage(s, u.id, b.id)
        return b.id, await lib_svc.find_matches(s, u.id, "oat"), await lib_svc.list_saved_items(s, u.id)

    b_id, matches, listed = run_db(go)
    assert matches[0].id == b_id
    assert listed[0].id == b_id


def test_saved_items_are_private(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        other = await new_user(s, email="other@example.com")
        item = await lib_svc.create_saved_item(s, u.id, {"name": "Granola", "category": "meal"})
        await lib_svc.log_saved_item(s, other.id, item.id)

    with pytest.raises(NotFound):
        run_db(go)


def test_menu_item_editable_only_by_importer(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        other = await new_user(s, email="other@example.com")
        brand = await lib_svc.create_brand(s, {"name": "Sweetgreen", "type": "restaurant"})
        row = await lib_svc.add_menu_item(
            s, u.id, brand.id, {"name": "Harvest bowl", "kcal_per_serving": 705, "is_available": True}
        )
        row_id = row.id
        brand_id = brand.id
        with pytest.raises(NotFound):
            await lib_svc.delete_menu_item(s, other.id, row_id)
        await lib_svc.update_menu_item(s, u.id, row_id, {"is_available": False})
        visible = await lib_svc.list_menu_items(s, brand_id)
        everything = await lib_svc.list_menu_items(s, brand_id, available_only=False)
        return visible, everything

    visible, everything = run_db(go)
    assert visible == []
    assert [r.name for r in everything] == ["Harvest bowl"]


def test_supplement_schedule_needs_own_item(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        other = await new_user(s, email="other@example.com")
        item = await lib_svc.create_saved_item(s, u.id, {"name": "Magnesium", "category": "supplement"})
        sched = await lib_svc.create_schedule(
            s, u.id, {"saved_item_id": item.id, "frequency": "daily", "preferred_times": ["21:00"]}
        )
        await lib_svc.update_schedule(s, u.id, sched.id, {"is_active": False})
        active = await lib_svc.list_schedules(s, u.id)
        with pytest.raises(NotFound):
            await lib_svc.create_schedule(s, other.id, {"saved_item_id": item.id, "frequency": "daily"})
        return active, await lib_svc.list_schedules(s, u.id, active_only=False)

    active, every = run_db(go)
    assert active == []
    assert [r.preferred_times for r in every] == [["21:00"]]


def test_chat_thread_per_day(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        await chat_svc.add_message(s, u.id, "user", "had oats", DAY)
        await chat_svc.add_message(s, u.id, "assistant", "logged breakfast", DAY)
        await chat_svc.add_message(s, u.id, "user", "new day", date(2026, 3, 3))
        return (
            await chat_svc.list_messages(s, u.id, DAY),
            await chat_svc.list_messages(s, u.id, DAY, limit=1),
        )

    thread, last = run_db(go)
    assert [m.content for m in thread] == ["had oats", "logged breakfast"]
    assert [m.content for m in last] == ["logged breakfast"]


def test_move_day_to_yesterday(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        other = await new_user(s, email="other@example.com")
        await meal_svc.log_meal(s, u.id, {"meal_name": "Late pasta", "date": DAY, "kcal_total": 800}, [])
        await meal_svc.log_meal(s, other.id, {"meal_name": "Toast", "date": DAY}, [])
        await chat_svc.add_message(s, u.id, "user", "pasta at 1am", DAY)

        moved = await meal_svc.move_to_yesterday(s, u.id, DAY)
        prev = date(2026, 3, 1)
        return (
            moved,
            await meal_svc.list_meals(s, u.id, prev),
            await meal_svc.list_meals(s, u.id, DAY),
            await meal_svc.list_meals(s, other.id, DAY),
            await chat_svc.list_messages(s, u.id, prev),
        )

    moved, prev_meals, day_meals, others, prev_chat = run_db(go)
    assert (moved.meals, moved.messages) == (1, 1)
    assert [m.meal_name for m in prev_meals] == ["Late pasta"]
    assert day_meals == []
    assert [m.meal_name for m in others] == ["Toast"]
    assert [m.content for m in prev_chat] == ["pasta at 1am"]
