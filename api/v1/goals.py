from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFound
from services import goals as goal_svc
from services.auth import current_user_id
from services.db import get_session
from api.v1.schemas import GoalIn, GoalOut, GoalUpdate

router = APIRouter()


@router.get("", response_model=list[GoalOut])
async def list_goals(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[GoalOut]:
    rows = await goal_svc.list_goals(db, user_id)
    return [GoalOut.model_validate(g, from_attributes=True) for g in rows]


@router.get("/active", response_model=GoalOut)
async def active_goal(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> GoalOut:
    goal = await goal_svc.get_active_goal(db, user_id)
    if goal is None:
        raise NotFound("no active goal")
    return GoalOut.model_validate(goal, from_attributes=True)


@router.post(
    "",
    response_model=GoalOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a goal and make it the only active one",
)
async def create_goal(
    body: GoalIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> GoalOut:
    goal = await goal_svc.replace_active_goal(db, user_id, body.model_dump(mode="python"))
    return GoalOut.model_validate(goal, from_attributes=True)


@router.post("/{goal_id}/activate", response_model=GoalOut)
async def activate_goal(
    goal_id: int,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> GoalOut:
    goal = await goal_svc.activate_goal(db, user_id, goal_id)
    return GoalOut.model_validate(goal, from_attributes=True)


@router.patch("/{goal_id}", response_model=GoalOut)
async def update_goal(
    goal_id: int,
    body: GoalUpdate,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> GoalOut:
    goal = await goal_svc.update_goal(db, user_id, goal_id, body.model_dump(exclude_unset=True))
    return GoalOut.model_validate(goal, from_attributes=True)
