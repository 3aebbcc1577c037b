import asyncio
import os

# settings are read once at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CREATE_TABLES", "false")
os.environ.setdefault("STORE_RETRY_BACKOFF_S", "0")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from services.db import User, init_models, sessionmaker_for


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def run_db(db_url):
    """Run `fn(session)` against a fresh schema inside its own event loop."""

    def _run(fn):
        async def go():
            eng = create_async_engine(db_url, poolclass=NullPool)
            await init_models(eng)
            try:
                async with sessionmaker_for(eng)() as s:
                    return await fn(s)
            finally:
                await eng.dispose()

        return asyncio.run(go())

    return _run


async def make_user(s, email="a@example.com", **kw) -> User:
    user = User(email=email, **kw)
    s.add(user)
    await s.commit()
    return user


@pytest.fixture
def new_user():
    return make_user
