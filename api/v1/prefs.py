from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services import store
from services.auth import current_user_id
from services.db import Preference, get_session
from api.v1.schemas import PreferenceIn, PreferenceOut

router = APIRouter()


async def load_preferences(db: AsyncSession, user_id: int) -> list[Preference]:
    async def op(s: AsyncSession) -> list[Preference]:
        res = await s.execute(
            select(Preference)
            .where(Preference.user_id == user_id)
            .order_by(Preference.id.desc())
        )
        return list(res.scalars().all())

    return await store.run(db, op, label="list_preferences", write=False)


# ───────────────────────── read ─────────────────────────────
@router.get(
    "/me/preferences",
    response_model=list[PreferenceOut],
    status_code=status.HTTP_200_OK,
)
async def get_preferences(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[PreferenceOut]:
    rows = await load_preferences(db, user_id)
    return [PreferenceOut.model_validate(p, from_attributes=True) for p in rows]


# ───────────────────────── add ──────────────────────────────
@router.post(
    "/me/preferences",
    response_model=PreferenceOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_preference(
    body: PreferenceIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> PreferenceOut:
    async def op(s: AsyncSession) -> Preference:
        pref = Preference(user_id=user_id, **body.model_dump())
        s.add(pref)
        await s.flush()
        return pref

    pref = await store.run(db, op, label="add_preference")
    return PreferenceOut.model_validate(pref, from_attributes=True)
