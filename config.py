"""
Centralised settings loader.

Every value can be overridden from the environment or a local `.env`.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB / auth ─────────────────────────────────────────
    env_name: str = "local"
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///./nutrilog.db"
    create_tables: bool = True          # off when migrations own the schema
    jwt_secret: str = "changeme"
    jwt_ttl_minutes: int = 60 * 24
    timezone: str = "UTC"

    # ─── store call policy ──────────────────────────────────────────
    store_timeout_s: float = Field(10.0, gt=0)
    store_retry_backoff_s: float = Field(0.2, ge=0)

    # ─── target recommender knobs ───────────────────────────────────
    calorie_floor: int = 1200
    default_deficit_kcal: int = 500
    surplus_fraction: float = 0.15

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )

    @field_validator("surplus_fraction")
    @classmethod
    def _surplus_in_band(cls, v: float) -> float:
        if not 0.10 <= v <= 0.20:
            raise ValueError("surplus_fraction must be between 0.10 and 0.20")
        return v


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
