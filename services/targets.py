"""
services/targets.py
────────────────────────────────────────────────────────────────────────
Daily target workflow per (user, date):

    propose ──► Proposed ──accept──► Accepted
                  ▲                     │
                  └──── new proposal ───┘   (accepting it supersedes the old row)

* `propose_target`   overwrites the one live proposal, or inserts it
* `accept_target`    revokes the current accepted row and accepts the
                     live proposal in one transaction; the acceptance is a
                     conditional write on (version, state)
* `get_target`       the accepted row for a day, or None

A failed propose / accept rolls back completely, so the previously accepted
target is always left intact.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import NotFound
from core.models.goal import Goal as GoalIn
from core.models.recommendation import CalorieRecommendation
from core.models.user import Profile
from core.nutrition_calc import NutritionalCalculator
from core.target_recommender import TargetRecommender
from services import store
from services.db import DailyTarget, User
from services.goals import current_biometric, get_active_goal

_LOG = logging.getLogger(__name__)

_calc = NutritionalCalculator()


def today() -> date:
    return datetime.now(ZoneInfo(settings.timezone)).date()


def _pending(user_id: int, day: date):
    return (
        DailyTarget.user_id == user_id,
        DailyTarget.date == day,
        DailyTarget.is_accepted.is_(False),
        DailyTarget.superseded_at.is_(None),
    )


# ───────────────────────── propose ──────────────────────────
async def propose_target(
    db: AsyncSession,
    user_id: int,
    day: date,
    rec: CalorieRecommendation,
    goal_id: int | None = None,
) -> DailyTarget:
    values = {
        "goal_id": goal_id,
        "calories_target": rec.daily_calories,
        "protein_target": rec.daily_protein,
        "carbs_target": rec.daily_carbs,
        "fat_target": rec.daily_fat,
        "reasoning": rec.reasoning,
    }

    async def op(s: AsyncSession) -> DailyTarget:
        res = await s.execute(
            update(DailyTarget)
            .where(*_pending(user_id, day))
            .values(**values, version=DailyTarget.version + 1)
            .returning(DailyTarget)
            .execution_options(populate_existing=True)
        )
        row = res.scalar_one_or_none()
        if row is None:
            row = DailyTarget(user_id=user_id, date=day, is_accepted=False, **values)
            s.add(row)
            await s.flush()
        return row

    row = await store.run(db, op, label="propose_target")
    _LOG.info("user %s: proposed target %s for %s (%d kcal)", user_id, row.id, day, row.calories_target)
    return row


# ───────────────────────── accept ───────────────────────────
async def accept_target(db: AsyncSession, user_id: int, day: date) -> DailyTarget:
    async def op(s: AsyncSession) -> DailyTarget:
        proposal = (
            await s.execute(
                select(DailyTarget)
                .where(*_pending(user_id, day))
                .order_by(DailyTarget.id.desc())
                .limit(1)
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()

        if proposal is None:
            current = await _accepted(s, user_id, day)
            if current is None:
                raise NotFound(f"no proposed target for {day.isoformat()}")
            return current

        seen_version = proposal.version
        await s.execute(
            update(DailyTarget)
            .where(
                DailyTarget.user_id == user_id,
                DailyTarget.date == day,
                DailyTarget.is_accepted.is_(True),
            )
            .values(
                is_accepted=False,
                superseded_at=datetime.now(timezone.utc),
                version=DailyTarget.version + 1,
            )
        )
        res = await s.execute(
            update(DailyTarget)
            .where(
                DailyTarget.id == proposal.id,
                DailyTarget.version == seen_version,
                *_pending(user_id, day),
            )
            .values(is_accepted=True, version=DailyTarget.version + 1)
            .returning(DailyTarget)
            .execution_options(populate_existing=True)
        )
        accepted = res.scalar_one_or_none()
        if accepted is None:
            raise store.WriteConflict(f"target {proposal.id} changed while accepting")
        return accepted

    row = await store.run(db, op, label="accept_target")
    _LOG.info("user %s: accepted target %s for %s", user_id, row.id, day)
    return row


# ───────────────────────── read ─────────────────────────────
async def _accepted(s: AsyncSession, user_id: int, day: date) -> DailyTarget | None:
    res = await s.execute(
        select(DailyTarget)
        .where(
            DailyTarget.user_id == user_id,
            DailyTarget.date == day,
            DailyTarget.is_accepted.is_(True),
        )
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def get_target(db: AsyncSession, user_id: int, day: date) -> DailyTarget | None:
    return await store.run(db, lambda s: _accepted(s, user_id, day), label="get_target", write=False)


async def get_todays_target(db: AsyncSession, user_id: int) -> DailyTarget | None:
    return await get_target(db, user_id, today())


async def get_pending(db: AsyncSession, user_id: int, day: date) -> DailyTarget | None:
    async def op(s: AsyncSession) -> DailyTarget | None:
        res = await s.execute(select(DailyTarget).where(*_pending(user_id, day)))
        return res.scalar_one_or_none()

    return await store.run(db, op, label="get_pending", write=False)


# ───────────────────────── recommend + propose ──────────────
@dataclass
class Proposal:
    target: DailyTarget
    recommendation: CalorieRecommendation


async def recommend(
    db: AsyncSession,
    user_id: int,
    day: date | None = None,
    profile: Profile | None = None,
) -> tuple[CalorieRecommendation, int | None]:
    """Build a recommendation from the merged biometric history and active goal."""
    day = day or today()
    user = await store.run(db, lambda s: s.get(User, user_id), label="load_user", write=False)
    if user is None:
        raise NotFound(f"user {user_id} not found")

    bio = await current_biometric(db, user_id)
    goal_row = await get_active_goal(db, user_id)

    base = Profile.model_validate(
        {"age": user.age, "sex": user.sex, "activity_level": user.activity_level}
    )
    if profile is not None:
        base = base.model_copy(update=profile.model_dump(exclude_none=True))

    est = _calc.estimate(bio, base)
    goal = GoalIn.model_validate(goal_row) if goal_row else None
    rec = TargetRecommender().recommend(est, goal, today=day)
    return rec, goal_row.id if goal_row else None


async def recommend_and_propose(
    db: AsyncSession,
    user_id: int,
    day: date | None = None,
    profile: Profile | None = None,
) -> Proposal:
    day = day or today()
    rec, goal_id = await recommend(db, user_id, day, profile)
    row = await propose_target(db, user_id, day, rec, goal_id=goal_id)
    return Proposal(target=row, recommendation=rec)
