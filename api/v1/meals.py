# api/v1/meals.py
from __future__ import annotations

from dataclasses import asdict
from datetime import date, timedelta

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core import nutrition_summary
from services import meals as meal_svc
from services import targets as target_svc
from services.auth import current_user_id
from services.db import get_session
from api.v1.prefs import load_preferences
from api.v1.schemas import MealIn, MealOut, MealUpdate, MovedOut, ProgressOut

router = APIRouter()


@router.post(
    "",
    response_model=MealOut,
    status_code=status.HTTP_201_CREATED,
    summary="Log a meal (type defaults from the time of day)",
)
async def log_meal(
    body: MealIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MealOut:
    meal = await meal_svc.log_meal(db, user_id, body.model_dump(exclude={"items"}), body.items)
    return MealOut.model_validate(meal, from_attributes=True)


@router.get("", response_model=list[MealOut], summary="Meals for one day")
async def list_meals(
    day: date | None = None,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[MealOut]:
    rows = await meal_svc.list_meals(db, user_id, day or target_svc.today())
    return [MealOut.model_validate(m, from_attributes=True) for m in rows]


@router.get("/progress", response_model=ProgressOut)
async def daily_progress(
    day: date | None = None,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProgressOut:
    day = day or target_svc.today()
    meals = await meal_svc.list_meals(db, user_id, day)
    target = await target_svc.get_target(db, user_id, day)
    prefs = await load_preferences(db, user_id)

    prog = nutrition_summary.progress(meals, target)
    return ProgressOut(
        date=day,
        target_id=target.id if target else None,
        **{k: asdict(v) for k, v in prog.items()},
        summary=nutrition_summary.progress_line(prog),
        context=nutrition_summary.build_context_summary(prefs, meals),
    )


@router.patch("/{meal_id}", response_model=MealOut)
async def update_meal(
    meal_id: int,
    body: MealUpdate,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MealOut:
    meal = await meal_svc.update_meal(db, user_id, meal_id, body.model_dump(exclude_unset=True))
    return MealOut.model_validate(meal, from_attributes=True)


@router.delete(
    "/{meal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a logged meal",
)
async def delete_meal(
    meal_id: int,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    await meal_svc.delete_meal(db, user_id, meal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/convert-to-yesterday",
    response_model=MovedOut,
    summary="Move today's meals and chat thread to yesterday",
)
async def convert_to_yesterday(
    day: date | None = None,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MovedOut:
    day = day or target_svc.today()
    moved = await meal_svc.move_to_yesterday(db, user_id, day)
    return MovedOut(moved_meals=moved.meals, moved_messages=moved.messages, to_date=day - timedelta(days=1))
