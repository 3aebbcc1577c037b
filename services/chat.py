"""
services/chat.py
────────────────────────────────────────────────────────────────────────
Assistant chat history. Messages are stored per (user, date) so every day
gets its own thread; the assistant itself lives outside this service.
"""
from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services import store
from services.db import ChatMessage

_LOG = logging.getLogger(__name__)

ROLES = ("user", "assistant")


async def add_message(db: AsyncSession, user_id: int, role: str, content: str, day: date) -> ChatMessage:
    if role not in ROLES:
        raise ValueError(f"role must be one of {ROLES}, got {role!r}")

    async def op(s: AsyncSession) -> ChatMessage:
        msg = ChatMessage(user_id=user_id, role=role, content=content, date=day)
        s.add(msg)
        await s.flush()
        return msg

    msg = await store.run(db, op, label="add_chat_message")
    _LOG.debug("user %s: %s message %s on %s", user_id, role, msg.id, day)
    return msg


async def list_messages(db: AsyncSession, user_id: int, day: date, limit: int = 50) -> list[ChatMessage]:
    """The last `limit` messages of the day's thread, oldest first."""

    async def op(s: AsyncSession) -> list[ChatMessage]:
        res = await s.execute(
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id, ChatMessage.date == day)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        return list(reversed(res.scalars().all()))

    return await store.run(db, op, label="list_chat_messages", write=False)
