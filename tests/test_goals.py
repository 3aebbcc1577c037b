from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select

from core.errors import InvalidGoal, NotFound
from services import goals as goal_svc
from services.db import Goal


async def _active(s, user_id):
    res = await s.execute(
        select(Goal)
        .where(Goal.user_id == user_id, Goal.is_active.is_(True))
        .execution_options(populate_existing=True)
    )
    return list(res.scalars().all())


def test_new_goal_replaces_active_one(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        a = await goal_svc.replace_active_goal(s, u.id, {"goal_type": "weight_loss"})
        b = await goal_svc.replace_active_goal(s, u.id, {"goal_type": "muscle_gain"})
        return a.id, b.id, await _active(s, u.id), await goal_svc.list_goals(s, u.id)

    a_id, b_id, active, all_goals = run_db(go)
    assert [g.id for g in active] == [b_id]
    assert {g.id for g in all_goals} == {a_id, b_id}


def test_reactivating_old_goal_keeps_exactly_one(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        a = await goal_svc.replace_active_goal(s, u.id, {"goal_type": "weight_loss"})
        a_id = a.id
        await goal_svc.replace_active_goal(s, u.id, {"goal_type": "maintenance"})
        await goal_svc.activate_goal(s, u.id, a_id)
        return a_id, await _active(s, u.id)

    a_id, active = run_db(go)
    assert [g.id for g in active] == [a_id]


def test_goals_are_scoped_per_user(run_db, new_user):
    async def go(s):
        u1 = await new_user(s, email="one@example.com")
        u2 = await new_user(s, email="two@example.com")
        await goal_svc.replace_active_goal(s, u1.id, {"goal_type": "weight_loss"})
        g2 = await goal_svc.replace_active_goal(s, u2.id, {"goal_type": "weight_gain"})
        return await _active(s, u1.id), await _active(s, u2.id), g2.id

    active1, active2, g2_id = run_db(go)
    assert [g.goal_type for g in active1] == ["weight_loss"]
    assert [g.id for g in active2] == [g2_id]


def test_cannot_activate_someone_elses_goal(run_db, new_user):
    async def go(s):
        u1 = await new_user(s, email="one@example.com")
        u2 = await new_user(s, email="two@example.com")
        g = await goal_svc.replace_active_goal(s, u2.id, {"goal_type": "weight_gain"})
        await goal_svc.activate_goal(s, u1.id, g.id)

    with pytest.raises(NotFound):
        run_db(go)


def test_invalid_goal_type_rejected_before_write(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        await goal_svc.replace_active_goal(s, u.id, {"goal_type": "weight_loss"})
        with pytest.raises(InvalidGoal):
            await goal_svc.replace_active_goal(s, u.id, {"goal_type": "get_swole"})
        return await _active(s, u.id)

    active = run_db(go)
    assert len(active) == 1 and active[0].goal_type == "weight_loss"


def test_update_goal_ignores_activation_flag(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        g = await goal_svc.replace_active_goal(s, u.id, {"goal_type": "weight_loss"})
        g = await goal_svc.update_goal(
            s, u.id, g.id, {"target_weight_kg": 72.5, "target_date": date(2026, 6, 1), "is_active": False}
        )
        return g

    g = run_db(go)
    assert g.is_active is True
    assert g.target_weight_kg == 72.5


def test_latest_biometric_is_most_recent(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        await goal_svc.add_biometric(s, u.id, {"weight_kg": 90})
        await goal_svc.add_biometric(s, u.id, {"weight_kg": 85, "height_cm": None})
        return await goal_svc.latest_biometric(s, u.id), await goal_svc.list_biometrics(s, u.id)

    latest, history = run_db(go)
    assert latest.weight_kg == 85
    assert [b.weight_kg for b in history] == [85, 90]
