"""
scripts/propose_targets.py
────────────────────────────────────────────────────────────────────────
Propose – or refresh – the pending daily target for users.

Every user, today:

    python -m scripts.propose_targets

One user, a specific day (cron / scheduler):

    python -m scripts.propose_targets --user 123 --date 2026-01-31

Proposals stay pending until the user accepts them in the app.
"""
from __future__ import annotations

import asyncio
import logging
from argparse import ArgumentParser
from datetime import date

from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import InsufficientData, InvalidGoal, NotFound
from services import targets as target_svc
from services.db import User, dispose, init_models, session_scope

async def _propose_one(db: AsyncSession, user_id: int, day: date) -> bool:
    try:
        p = await target_svc.recommend_and_propose(db, user_id, day)
    except (InsufficientData, InvalidGoal, NotFound) as exc:
        print(f"· skip {user_id} – {exc.detail}")
        return False
    print(f"✓ user {user_id}: {p.target.calories_target} kcal / {p.target.protein_target} g protein")
    return True


async def run(user_id: int | None, day: date) -> int:
    done = 0
    try:
        if settings.create_tables:
            await init_models()
        async with session_scope() as db:
            if user_id is not None:
                ids = [user_id]
            else:
                ids = list((await db.execute(select(User.id))).scalars().all())
                await db.rollback()
            for uid in ids:
                done += await _propose_one(db, uid, day)
    finally:
        await dispose()
    return done


# ───────────────────────────────
# CLI entrypoint
# ───────────────────────────────
def main(argv: list[str] | None = None) -> None:
    ap = ArgumentParser()
    ap.add_argument("--user", type=int, help="propose only for this user-id")
    ap.add_argument("--date", type=date.fromisoformat, help="day to propose for (default: today)")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    n = asyncio.run(run(args.user, args.date or target_svc.today()))
    print(f"proposed {n} target(s)")


if __name__ == "__main__":  # pragma: no cover
    main()
