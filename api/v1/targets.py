# api/v1/targets.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.recommendation import CalorieRecommendation
from core.models.user import Profile
from services import targets as target_svc
from services.auth import current_user_id
from services.db import get_session
from api.v1.schemas import DailyTargetOut, ProposalOut, ProposeRequest

router = APIRouter()


def _profile(body: ProposeRequest) -> Profile:
    return Profile.model_validate(body.model_dump(exclude={"date"}))


@router.post(
    "/recommendation",
    response_model=CalorieRecommendation,
    summary="Compute a recommendation without storing it",
)
async def preview(
    body: ProposeRequest,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> CalorieRecommendation:
    rec, _ = await target_svc.recommend(db, user_id, body.date, _profile(body))
    return rec


@router.post(
    "/propose",
    response_model=ProposalOut,
    status_code=status.HTTP_201_CREATED,
    summary="Recommend and store a pending target for a day",
)
async def propose(
    body: ProposeRequest,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ProposalOut:
    p = await target_svc.recommend_and_propose(db, user_id, body.date, _profile(body))
    return ProposalOut(
        target=DailyTargetOut.model_validate(p.target, from_attributes=True),
        recommendation=p.recommendation,
    )


@router.get("/today", response_model=DailyTargetOut | None)
async def todays_target(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> DailyTargetOut | None:
    row = await target_svc.get_todays_target(db, user_id)
    return DailyTargetOut.model_validate(row, from_attributes=True) if row else None


@router.get("/{day}", response_model=DailyTargetOut | None)
async def target_for_day(
    day: date,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> DailyTargetOut | None:
    row = await target_svc.get_target(db, user_id, day)
    return DailyTargetOut.model_validate(row, from_attributes=True) if row else None


@router.get("/{day}/pending", response_model=DailyTargetOut | None)
async def pending_for_day(
    day: date,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> DailyTargetOut | None:
    row = await target_svc.get_pending(db, user_id, day)
    return DailyTargetOut.model_validate(row, from_attributes=True) if row else None


@router.post("/{day}/accept", response_model=DailyTargetOut)
async def accept(
    day: date,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> DailyTargetOut:
    row = await target_svc.accept_target(db, user_id, day)
    return DailyTargetOut.model_validate(row, from_attributes=True)
