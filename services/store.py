"""
services/store.py
────────────────────────────────────────────────────────────────────────
Call policy for every workflow that touches the database.

* each write runs as one commit / rollback unit, so a cancelled or failed
  request never leaves half of a multi-row change behind
* every call is bounded by `settings.store_timeout_s`
* `StoreUnavailable` is retried once after a short backoff
* a lost race (unique index hit or failed conditional write) is retried
  once, then surfaces as `ConflictRetryExhausted`
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from config import settings
from core.errors import ConflictRetryExhausted, StoreUnavailable

_LOG = logging.getLogger(__name__)

T = TypeVar("T")

ATTEMPTS = 2


class WriteConflict(Exception):
    """A conditional write matched no row."""


async def _unit(db: AsyncSession, op: Callable[[AsyncSession], Awaitable[T]], write: bool) -> T:
    try:
        result = await op(db)
        if write:
            await db.commit()
        return result
    except BaseException:
        # cancellation included: nothing partial may survive
        await db.rollback()
        raise


async def run(
    db: AsyncSession,
    op: Callable[[AsyncSession], Awaitable[T]],
    *,
    label: str,
    write: bool = True,
    timeout: float | None = None,
) -> T:
    """Execute `op(db)` under the retry / timeout policy."""
    timeout = timeout if timeout is not None else settings.store_timeout_s

    for attempt in range(1, ATTEMPTS + 1):
        try:
            return await asyncio.wait_for(_unit(db, op, write), timeout)
        except (IntegrityError, StaleDataError, WriteConflict) as exc:
            if attempt == ATTEMPTS:
                _LOG.error("%s: conflict persisted after retry: %s", label, exc)
                raise ConflictRetryExhausted(f"{label}: concurrent update, please retry") from exc
            _LOG.warning("%s: write conflict, retrying once", label)
        except (OperationalError, InterfaceError, asyncio.TimeoutError) as exc:
            if attempt == ATTEMPTS:
                _LOG.error("%s: store unavailable after retry: %r", label, exc)
                raise StoreUnavailable(f"{label}: data store unavailable") from exc
            backoff = settings.store_retry_backoff_s * (1 + random.random())
            _LOG.warning("%s: store error %r, retrying in %.2fs", label, exc, backoff)
            await asyncio.sleep(backoff)

    raise AssertionError("unreachable")  # pragma: no cover
