from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import InsufficientData, NotFound
from services import goals as goal_svc
from services.auth import current_user_id
from services.db import get_session
from api.v1.schemas import BiometricIn, BiometricOut

router = APIRouter()


@router.post("", response_model=BiometricOut, status_code=status.HTTP_201_CREATED)
async def record_biometric(
    body: BiometricIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> BiometricOut:
    if body.weight_kg is None and body.height_cm is None and body.body_fat_percentage is None:
        raise InsufficientData("at least one measurement is required")
    row = await goal_svc.add_biometric(db, user_id, body.model_dump())
    return BiometricOut.model_validate(row, from_attributes=True)


@router.get("", response_model=list[BiometricOut], summary="Biometric history, newest first")
async def list_biometrics(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[BiometricOut]:
    rows = await goal_svc.list_biometrics(db, user_id)
    return [BiometricOut.model_validate(r, from_attributes=True) for r in rows]


@router.get("/latest", response_model=BiometricOut)
async def latest_biometric(
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> BiometricOut:
    row = await goal_svc.latest_biometric(db, user_id)
    if row is None:
        raise NotFound("no biometrics recorded")
    return BiometricOut.model_validate(row, from_attributes=True)
