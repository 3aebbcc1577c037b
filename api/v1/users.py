from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AlreadyExists, NotFound
from services import store
from services.auth import create_token, current_user_id
from services.db import User, get_session
from api.v1.schemas import UserCreate, UserOut, UserToken, UserUpdate

router = APIRouter()


# ───────────────────────── register ────────────────────────
@router.post(
    "",
    response_model=UserToken,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_session),
) -> UserToken:
    async def op(s: AsyncSession) -> User | None:
        taken = (
            await s.execute(select(User.id).where(User.email == body.email))
        ).scalar_one_or_none()
        if taken is not None:
            return None
        user = User(**body.model_dump(mode="json"))
        s.add(user)
        await s.flush()
        return user

    user = await store.run(db, op, label="create_user")
    if user is None:
        raise AlreadyExists(f"user {body.email} already exists")
    return UserToken(
        user=UserOut.model_validate(user, from_attributes=True),
        access_token=create_token(user.id),
    )


# ───────────────────────── fetch / edit self ───────────────
async def _me(db: AsyncSession, user_id: int) -> User:
    usr = await store.run(db, lambda s: s.get(User, user_id), label="fetch_user", write=False)
    if usr is None:
        raise NotFound("user not found")
    return usr


@router.get("/me", response_model=UserOut)
async def fetch_me(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> UserOut:
    return UserOut.model_validate(await _me(db, user_id), from_attributes=True)


@router.patch("/me", response_model=UserOut)
async def update_me(
    body: UserUpdate,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> UserOut:
    changes = body.model_dump(mode="json", exclude_unset=True)

    async def op(s: AsyncSession) -> User | None:
        usr = await s.get(User, user_id)
        if usr is None:
            return None
        for k, v in changes.items():
            setattr(usr, k, v)
        await s.flush()
        return usr

    usr = await store.run(db, op, label="update_user")
    if usr is None:
        raise NotFound("user not found")
    return UserOut.model_validate(usr, from_attributes=True)
