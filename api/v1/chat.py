# api/v1/chat.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from services import chat as chat_svc
from services import targets as target_svc
from services.auth import current_user_id
from services.db import get_session
from api.v1.schemas import ChatMessageIn, ChatMessageOut

router = APIRouter()


@router.get("", response_model=list[ChatMessageOut], summary="The day's chat thread, oldest first")
async def history(
    day: date | None = None,
    limit: int = Query(50, ge=1, le=500),
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> list[ChatMessageOut]:
    rows = await chat_svc.list_messages(db, user_id, day or target_svc.today(), limit)
    return [ChatMessageOut.model_validate(m, from_attributes=True) for m in rows]


@router.post("", response_model=ChatMessageOut, status_code=status.HTTP_201_CREATED)
async def add_message(
    body: ChatMessageIn,
    user_id: int = Depends(current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ChatMessageOut:
    msg = await chat_svc.add_message(db, user_id, body.role, body.content, body.date or target_svc.today())
    return ChatMessageOut.model_validate(msg, from_attributes=True)
