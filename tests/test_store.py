from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from core.errors import ConflictRetryExhausted, StoreUnavailable
from services import goals as goal_svc
from services import store
from services.db import Goal


def _flaky(exc, fail_times):
    calls = {"n": 0}

    async def op(_s):
        calls["n"] += 1
        if calls["n"] <= fail_times:
            raise exc
        return "ok"

    return op, calls


def test_store_error_retried_once(run_db):
    op, calls = _flaky(OperationalError("SELECT 1", {}, Exception("db down")), 1)
    assert run_db(lambda s: store.run(s, op, label="t")) == "ok"
    assert calls["n"] == 2


def test_store_error_twice_surfaces(run_db):
    op, calls = _flaky(OperationalError("SELECT 1", {}, Exception("db down")), 5)
    with pytest.raises(StoreUnavailable):
        run_db(lambda s: store.run(s, op, label="t"))
    assert calls["n"] == 2


def test_conflict_retried_then_exhausted(run_db):
    op, calls = _flaky(IntegrityError("INSERT", {}, Exception("dup")), 5)
    with pytest.raises(ConflictRetryExhausted):
        run_db(lambda s: store.run(s, op, label="t"))
    assert calls["n"] == 2


def test_conflict_once_recovers(run_db):
    op, calls = _flaky(store.WriteConflict("lost race"), 1)
    assert run_db(lambda s: store.run(s, op, label="t")) == "ok"


def test_timeout_is_store_unavailable(run_db):
    async def slow(_s):
        await asyncio.sleep(1)

    with pytest.raises(StoreUnavailable):
        run_db(lambda s: store.run(s, slow, label="t", timeout=0.01))


def test_domain_errors_are_not_retried(run_db):
    op, calls = _flaky(ValueError("bad input"), 5)
    with pytest.raises(ValueError):
        run_db(lambda s: store.run(s, op, label="t"))
    assert calls["n"] == 1


def test_bad_statement_is_not_retried(run_db):
    op, calls = _flaky(ProgrammingError("SELEC 1", {}, Exception("syntax error")), 5)
    with pytest.raises(ProgrammingError):
        run_db(lambda s: store.run(s, op, label="t"))
    assert calls["n"] == 1


def test_goal_switch_cut_off_midway_rolls_back(run_db, new_user):
    async def go(s):
        u = await new_user(s)
        old = await goal_svc.replace_active_goal(s, u.id, {"goal_type": "weight_loss"})
        old_id, user_id = old.id, u.id

        async def switch(s2):
            await goal_svc._deactivate_all(s2, user_id)
            await asyncio.sleep(5)
            s2.add(Goal(user_id=user_id, goal_type="maintenance", is_active=True))

        with pytest.raises(StoreUnavailable):
            await store.run(s, switch, label="switch", timeout=0.05)

        res = await s.execute(
            select(Goal.id).where(Goal.user_id == user_id, Goal.is_active.is_(True))
        )
        return old_id, list(res.scalars().all())

    old_id, active = run_db(go)
    assert active == [old_id]
