"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models for users, preferences, biometrics, goals, daily targets, meals,
  chat history and the quick-add library
* Session helpers: `get_session` for FastAPI, `session_scope` for scripts
"""
from __future__ import annotations

from contextlib import asynccontextmanager
import datetime as dt
from datetime import datetime, timezone
from typing import AsyncGenerator, AsyncIterator, List

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    text,
)
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

from config import settings

# ───────── connection helper ────────────────────────────────────────
_ENGINE: AsyncEngine | None = None
_SESSIONS: async_sessionmaker[AsyncSession] | None = None


def engine() -> AsyncEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = create_async_engine(settings.database_url, pool_pre_ping=True)
    return _ENGINE


def sessionmaker_for(eng: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(eng, expire_on_commit=False)


def _sessions() -> async_sessionmaker[AsyncSession]:
    global _SESSIONS
    if _SESSIONS is None:
        _SESSIONS = sessionmaker_for(engine())
    return _SESSIONS


async def init_models(eng: AsyncEngine | None = None) -> None:
    """Create missing tables (local SQLite / tests)."""
    async with (eng or engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose() -> None:
    global _ENGINE, _SESSIONS
    if _ENGINE is not None:
        await _ENGINE.dispose()
    _ENGINE = _SESSIONS = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)

# ───────── models ───────────────────────────────────────────────────


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True)
    name: Mapped[str | None] = mapped_column(String)
    age: Mapped[int | None] = mapped_column(Integer)
    sex: Mapped[str | None] = mapped_column(String)
    activity_level: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Preference(Base):
    __tablename__ = "preferences"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String)            # allergy / dislike / dietary_restriction …
    food_name: Mapped[str] = mapped_column(String)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Biometric(Base):
    __tablename__ = "biometrics"
    __table_args__ = (Index("idx_biometrics_user_recorded", "user_id", "recorded_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    weight_kg: Mapped[float | None] = mapped_column(Float)
    height_cm: Mapped[float | None] = mapped_column(Float)
    body_fat_percentage: Mapped[float | None] = mapped_column(Float)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (
        # at most one active goal per user
        Index(
            "uq_goals_one_active",
            "user_id",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    goal_type: Mapped[str] = mapped_column(String)
    target_weight_kg: Mapped[float | None] = mapped_column(Float)
    target_body_fat_percentage: Mapped[float | None] = mapped_column(Float)
    target_date: Mapped[dt.date | None] = mapped_column(Date)
    daily_calorie_target: Mapped[int | None] = mapped_column(Integer)
    daily_protein_target: Mapped[int | None] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class DailyTarget(Base):
    """
    One row per proposal. Per (user, date) there is at most one live
    proposal (not accepted, not superseded) and at most one accepted row.
    """

    __tablename__ = "daily_targets"
    __table_args__ = (
        Index("idx_daily_targets_user_date", "user_id", "date"),
        Index(
            "uq_daily_targets_accepted",
            "user_id",
            "date",
            unique=True,
            sqlite_where=text("is_accepted"),
            postgresql_where=text("is_accepted"),
        ),
        Index(
            "uq_daily_targets_pending",
            "user_id",
            "date",
            unique=True,
            sqlite_where=text("NOT is_accepted AND superseded_at IS NULL"),
            postgresql_where=text("NOT is_accepted AND superseded_at IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    goal_id: Mapped[int | None] = mapped_column(ForeignKey("goals.id", ondelete="SET NULL"))
    date: Mapped[dt.date] = mapped_column(Date)
    calories_target: Mapped[int] = mapped_column(Integer)
    protein_target: Mapped[int] = mapped_column(Integer)
    carbs_target: Mapped[int | None] = mapped_column(Integer)
    fat_target: Mapped[int | None] = mapped_column(Integer)
    reasoning: Mapped[str | None] = mapped_column(Text)
    is_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    superseded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class Meal(Base):
    __tablename__ = "meals"
    __table_args__ = (Index("idx_meals_user_date", "user_id", "date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    date: Mapped[dt.date] = mapped_column(Date)
    meal_name: Mapped[str | None] = mapped_column(String)
    meal_type: Mapped[str | None] = mapped_column(String)
    kcal_total: Mapped[float | None] = mapped_column(Float)
    g_protein: Mapped[float | None] = mapped_column(Float)
    g_carb: Mapped[float | None] = mapped_column(Float)
    g_fat: Mapped[float | None] = mapped_column(Float)
    logged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    image_url: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String, default="logged")   # logged / planned

    items: Mapped[List["MealItem"]] = relationship(
        back_populates="meal",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="MealItem.id",
    )


class MealItem(Base):
    __tablename__ = "meal_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    meal_id: Mapped[int] = mapped_column(ForeignKey("meals.id", ondelete="CASCADE"), index=True)
    food_name: Mapped[str] = mapped_column(String)
    quantity_grams: Mapped[float | None] = mapped_column(Float)
    quantity_ml: Mapped[float | None] = mapped_column(Float)
    kcal: Mapped[float | None] = mapped_column(Float)
    g_protein: Mapped[float | None] = mapped_column(Float)
    g_carb: Mapped[float | None] = mapped_column(Float)
    g_fat: Mapped[float | None] = mapped_column(Float)
    source: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    meal: Mapped[Meal] = relationship(back_populates="items")


class ChatMessage(Base):
    """One assistant-chat turn. Each (user, date) is its own thread."""

    __tablename__ = "chat_messages"
    __table_args__ = (Index("idx_chat_messages_user_date", "user_id", "date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    role: Mapped[str] = mapped_column(String)              # user / assistant
    content: Mapped[str] = mapped_column(Text)
    date: Mapped[dt.date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


# ───────── quick-add library ─────────────────────────────────────────


class Brand(Base):
    """Restaurants and product brands, shared by every user."""

    __tablename__ = "brands"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True)
    type: Mapped[str] = mapped_column(String)   # restaurant / supplement_brand / food_brand / other
    description: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class SavedItem(Base):
    __tablename__ = "saved_items"
    __table_args__ = (Index("idx_saved_items_user_used", "user_id", "times_used"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    brand_id: Mapped[int | None] = mapped_column(ForeignKey("brands.id", ondelete="SET NULL"))
    name: Mapped[str] = mapped_column(String)
    category: Mapped[str] = mapped_column(String)   # meal / snack / supplement / drink / ingredient
    serving_size: Mapped[str | None] = mapped_column(String)
    kcal_per_serving: Mapped[int | None] = mapped_column(Integer)
    g_protein_per_serving: Mapped[float | None] = mapped_column(Float)
    g_carb_per_serving: Mapped[float | None] = mapped_column(Float)
    g_fat_per_serving: Mapped[float | None] = mapped_column(Float)
    ingredients: Mapped[list | None] = mapped_column(JSON)
    allergens: Mapped[list | None] = mapped_column(JSON)
    notes: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(Text)
    times_used: Mapped[int] = mapped_column(Integer, default=0)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    brand: Mapped[Brand | None] = relationship(lazy="selectin")


class BrandMenuItem(Base):
    """Public menu of a brand; only the importing user may edit a row."""

    __tablename__ = "brand_menu_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    brand_id: Mapped[int] = mapped_column(ForeignKey("brands.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String)   # breakfast / lunch / beverage …
    price_cents: Mapped[int | None] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String, default="USD")
    serving_size: Mapped[str | None] = mapped_column(String)
    kcal_per_serving: Mapped[int | None] = mapped_column(Integer)
    g_protein_per_serving: Mapped[float | None] = mapped_column(Float)
    g_carb_per_serving: Mapped[float | None] = mapped_column(Float)
    g_fat_per_serving: Mapped[float | None] = mapped_column(Float)
    g_fiber_per_serving: Mapped[float | None] = mapped_column(Float)
    g_sugar_per_serving: Mapped[float | None] = mapped_column(Float)
    mg_sodium_per_serving: Mapped[float | None] = mapped_column(Float)
    ingredients: Mapped[list | None] = mapped_column(JSON)
    allergens: Mapped[list | None] = mapped_column(JSON)
    dietary_tags: Mapped[list | None] = mapped_column(JSON)
    imported_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    import_source: Mapped[str | None] = mapped_column(String)   # csv / image / manual
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)
    is_seasonal: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class SupplementSchedule(Base):
    __tablename__ = "supplement_schedules"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    saved_item_id: Mapped[int] = mapped_column(ForeignKey("saved_items.id", ondelete="CASCADE"))
    frequency: Mapped[str] = mapped_column(String)          # daily / weekly / as_needed
    times_per_day: Mapped[int] = mapped_column(Integer, default=1)
    preferred_times: Mapped[list | None] = mapped_column(JSON)   # ["08:00", "20:00"]
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


# ───────── session helpers ───────────────────────────────────────────

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with _sessions()() as session:
        yield session


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with _sessions()() as session:
        yield session
