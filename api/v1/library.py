# api/v1/library.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from services import library as lib_svc
from services.auth import current_user_id
from services.db import get_session
from api.v1.schemas import (
    BrandIn,
    BrandOut,
    MealOut,
    MenuItemIn,
    MenuItemOut,
    MenuItemUpdate,
    QuickLogIn,
    SavedItemIn,
    SavedItemOut,
    SavedItemUpdate,
    ScheduleIn,
    ScheduleOut,
    ScheduleUpdate,
)

router = APIRouter()


# ───────────────────────── brands ───────────────────────────
@router.get("/brands", response_model=list[BrandOut])
async def list_brands(
    _: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[BrandOut]:
    return [BrandOut.model_validate(b, from_attributes=True) for b in await lib_svc.list_brands(db)]


@router.post("/brands", response_model=BrandOut, status_code=status.HTTP_201_CREATED)
async def create_brand(
    body: BrandIn,
    _: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> BrandOut:
    brand = await lib_svc.create_brand(db, body.model_dump())
    return BrandOut.model_validate(brand, from_attributes=True)


@router.get("/brands/{brand_id}/menu", response_model=list[MenuItemOut])
async def brand_menu(
    brand_id: int,
    include_unavailable: bool = False,
    _: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[MenuItemOut]:
    rows = await lib_svc.list_menu_items(db, brand_id, available_only=not include_unavailable)
    return [MenuItemOut.model_validate(r, from_attributes=True) for r in rows]


@router.post(
    "/brands/{brand_id}/menu",
    response_model=MenuItemOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_menu_item(
    brand_id: int,
    body: MenuItemIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MenuItemOut:
    row = await lib_svc.add_menu_item(db, user_id, brand_id, body.model_dump())
    return MenuItemOut.model_validate(row, from_attributes=True)


@router.patch("/menu/{item_id}", response_model=MenuItemOut, summary="Edit a menu item you imported")
async def update_menu_item(
    item_id: int,
    body: MenuItemUpdate,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MenuItemOut:
    row = await lib_svc.update_menu_item(db, user_id, item_id, body.model_dump(exclude_unset=True))
    return MenuItemOut.model_validate(row, from_attributes=True)


@router.delete("/menu/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: int,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    await lib_svc.delete_menu_item(db, user_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ───────────────────────── saved items ──────────────────────
@router.get("/items", response_model=list[SavedItemOut], summary="Saved items, most used first")
async def list_items(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[SavedItemOut]:
    rows = await lib_svc.list_saved_items(db, user_id)
    return [SavedItemOut.model_validate(r, from_attributes=True) for r in rows]


@router.get("/items/match", response_model=list[SavedItemOut], summary="Quick-add lookup by name or brand")
async def match_items(
    q: str = Query(..., min_length=1),
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[SavedItemOut]:
    rows = await lib_svc.find_matches(db, user_id, q)
    return [SavedItemOut.model_validate(r, from_attributes=True) for r in rows]


@router.post("/items", response_model=SavedItemOut, status_code=status.HTTP_201_CREATED)
async def create_item(
    body: SavedItemIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> SavedItemOut:
    item = await lib_svc.create_saved_item(db, user_id, body.model_dump())
    return SavedItemOut.model_validate(item, from_attributes=True)


@router.patch("/items/{item_id}", response_model=SavedItemOut)
async def update_item(
    item_id: int,
    body: SavedItemUpdate,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> SavedItemOut:
    item = await lib_svc.update_saved_item(db, user_id, item_id, body.model_dump(exclude_unset=True))
    return SavedItemOut.model_validate(item, from_attributes=True)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    await lib_svc.delete_saved_item(db, user_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/items/{item_id}/log",
    response_model=MealOut,
    status_code=status.HTTP_201_CREATED,
    summary="Log a saved item as a meal and count the use",
)
async def quick_log(
    item_id: int,
    body: QuickLogIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> MealOut:
    meal = await lib_svc.log_saved_item(
        db, user_id, item_id, body.servings, body.model_dump(exclude={"servings"}, exclude_none=True)
    )
    return MealOut.model_validate(meal, from_attributes=True)


@router.post("/items/{item_id}/use", response_model=SavedItemOut, summary="Count a use without logging a meal")
async def use_item(
    item_id: int,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> SavedItemOut:
    item = await lib_svc.record_usage(db, user_id, item_id)
    return SavedItemOut.model_validate(item, from_attributes=True)


# ───────────────────────── supplement schedules ─────────────
@router.get("/supplements", response_model=list[ScheduleOut])
async def list_schedules(
    include_inactive: bool = False,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[ScheduleOut]:
    rows = await lib_svc.list_schedules(db, user_id, active_only=not include_inactive)
    return [ScheduleOut.model_validate(r, from_attributes=True) for r in rows]


@router.post("/supplements", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    body: ScheduleIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ScheduleOut:
    row = await lib_svc.create_schedule(db, user_id, body.model_dump())
    return ScheduleOut.model_validate(row, from_attributes=True)


@router.patch("/supplements/{schedule_id}", response_model=ScheduleOut)
async def update_schedule(
    schedule_id: int,
    body: ScheduleUpdate,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ScheduleOut:
    row = await lib_svc.update_schedule(db, user_id, schedule_id, body.model_dump(exclude_unset=True))
    return ScheduleOut.model_validate(row, from_attributes=True)


@router.delete("/supplements/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: int,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Response:
    await lib_svc.delete_schedule(db, user_id, schedule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
