"""
services/goals.py
────────────────────────────────────────────────────────────────────────
Goal and biometric access.

Switching the active goal is a single unit: the old goal is deactivated and
the new one activated in the same transaction, and the partial unique index
`uq_goals_one_active` rejects a concurrent second activation.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFound
from core.models.user import Biometric as BiometricIn
from core.target_recommender import parse_goal_type
from services import store
from services.db import Biometric, Goal

_LOG = logging.getLogger(__name__)

# columns a plain PATCH may touch; activation goes through `activate_goal`
EDITABLE = {
    "target_weight_kg",
    "target_body_fat_percentage",
    "target_date",
    "daily_calorie_target",
    "daily_protein_target",
}

MEASUREMENTS = ("weight_kg", "height_cm", "body_fat_percentage")


# ───────────────────────── goals ────────────────────────────
async def _deactivate_all(db: AsyncSession, user_id: int) -> None:
    await db.execute(
        update(Goal)
        .where(Goal.user_id == user_id, Goal.is_active.is_(True))
        .values(is_active=False)
    )
    # push the deactivation before the activation hits the unique index
    await db.flush()


async def replace_active_goal(db: AsyncSession, user_id: int, data: dict[str, Any]) -> Goal:
    """Insert `data` as the user's only active goal."""
    fields = {k: v for k, v in data.items() if k != "is_active"}
    fields["goal_type"] = parse_goal_type(data["goal_type"]).value

    async def op(s: AsyncSession) -> Goal:
        await _deactivate_all(s, user_id)
        goal = Goal(user_id=user_id, is_active=True, **fields)
        s.add(goal)
        await s.flush()
        return goal

    goal = await store.run(db, op, label="replace_active_goal")
    _LOG.info("user %s: goal %s (%s) is now active", user_id, goal.id, goal.goal_type)
    return goal


async def activate_goal(db: AsyncSession, user_id: int, goal_id: int) -> Goal:
    async def op(s: AsyncSession) -> Goal:
        goal = await s.get(Goal, goal_id)
        if goal is None or goal.user_id != user_id:
            raise NotFound(f"goal {goal_id} not found")
        if goal.is_active:
            return goal
        await _deactivate_all(s, user_id)
        res = await s.execute(
            update(Goal)
            .where(Goal.id == goal_id, Goal.user_id == user_id)
            .values(is_active=True)
            .returning(Goal)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one()

    goal = await store.run(db, op, label="activate_goal")
    _LOG.info("user %s: goal %s re-activated", user_id, goal_id)
    return goal


async def update_goal(db: AsyncSession, user_id: int, goal_id: int, changes: dict[str, Any]) -> Goal:
    values = {k: v for k, v in changes.items() if k in EDITABLE}

    async def op(s: AsyncSession) -> Goal:
        goal = await s.get(Goal, goal_id)
        if goal is None or goal.user_id != user_id:
            raise NotFound(f"goal {goal_id} not found")
        for k, v in values.items():
            setattr(goal, k, v)
        await s.flush()
        return goal

    return await store.run(db, op, label="update_goal")


async def get_active_goal(db: AsyncSession, user_id: int) -> Goal | None:
    async def op(s: AsyncSession) -> Goal | None:
        res = await s.execute(
            select(Goal)
            .where(Goal.user_id == user_id, Goal.is_active.is_(True))
            .order_by(Goal.id.desc())
            .limit(1)
        )
        return res.scalar_one_or_none()

    return await store.run(db, op, label="get_active_goal", write=False)


async def list_goals(db: AsyncSession, user_id: int) -> list[Goal]:
    async def op(s: AsyncSession) -> list[Goal]:
        res = await s.execute(
            select(Goal).where(Goal.user_id == user_id).order_by(Goal.id.desc())
        )
        return list(res.scalars().all())

    return await store.run(db, op, label="list_goals", write=False)


# ───────────────────────── biometrics ───────────────────────
async def add_biometric(db: AsyncSession, user_id: int, data: dict[str, Any]) -> Biometric:
    fields = {k: v for k, v in data.items() if v is not None}

    async def op(s: AsyncSession) -> Biometric:
        row = Biometric(user_id=user_id, **fields)
        s.add(row)
        await s.flush()
        return row

    return await store.run(db, op, label="add_biometric")


async def list_biometrics(db: AsyncSession, user_id: int, limit: int | None = None) -> list[Biometric]:
    """Most recent first."""

    async def op(s: AsyncSession) -> list[Biometric]:
        q = (
            select(Biometric)
            .where(Biometric.user_id == user_id)
            .order_by(Biometric.recorded_at.desc(), Biometric.id.desc())
        )
        if limit:
            q = q.limit(limit)
        return list((await s.execute(q)).scalars().all())

    return await store.run(db, op, label="list_biometrics", write=False)


async def latest_biometric(db: AsyncSession, user_id: int) -> Biometric | None:
    rows = await list_biometrics(db, user_id, limit=1)
    return rows[0] if rows else None


async def current_biometric(db: AsyncSession, user_id: int) -> BiometricIn | None:
    """
    Newest non-null value of each measurement across the history, so a
    body-fat-only check-in does not hide an earlier weight or height.
    """
    rows = await list_biometrics(db, user_id)
    if not rows:
        return None
    merged: dict[str, Any] = {"recorded_at": rows[0].recorded_at}
    for col in MEASUREMENTS:
        merged[col] = next((getattr(r, col) for r in rows if getattr(r, col) is not None), None)
    return BiometricIn.model_validate(merged)
