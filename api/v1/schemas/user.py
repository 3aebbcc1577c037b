from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.models.user import ActivityLevel, Sex


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3)
    name: str | None = None
    age: int | None = Field(None, ge=15, le=100)
    sex: Sex | None = Field(None, description="male or female")
    activity_level: ActivityLevel | None = None


class UserUpdate(BaseModel):
    name: str | None = None
    age: int | None = Field(None, ge=15, le=100)
    sex: Sex | None = None
    activity_level: ActivityLevel | None = None


class UserOut(UserCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserToken(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"
