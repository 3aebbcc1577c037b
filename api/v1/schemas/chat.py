from __future__ import annotations
import datetime as dt
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageIn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)
    date: dt.date | None = None


class ChatMessageOut(ChatMessageIn):
    id: int
    date: dt.date
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
