"""Shared fixtures: per-test SQLite database, fake cache, fixed clock."""

import os

# Must be set before postfast builds its engine and settings.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from postfast.core.permissions import Requester, Role
from postfast.crud.post import post as post_store
from postfast.crud.user import user as user_crud
from postfast.database import Base
from postfast.models import post as _post_model  # noqa: F401
from postfast.services.cache import CacheBackend
from postfast.services.cache_sync import CacheSynchronizer
from postfast.services.posts import PostService


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------
class FakeCache(CacheBackend):
    """In-memory cache that records every operation."""

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.ops: list[tuple[str, str]] = []
        self.fail = False

    def _record(self, op: str, key: str):
        self.ops.append((op, key))
        if self.fail:
            raise ConnectionError("cache is down")

    async def get(self, key: str) -> Optional[bytes]:
        self._record("get", key)
        return self.data.get(key)

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self._record("set", key)
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self._record("delete", key)
        self.data.pop(key, None)

    def count(self, op: str, key: str) -> int:
        return self.ops.count((op, key))


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class SpyStore:
    """Wraps the post store and counts calls per method."""

    def __init__(self, inner=post_store):
        self.inner = inner
        self.calls = Counter()

    def __getattr__(self, name):
        attr = getattr(self.inner, name)

        async def wrapper(*args, **kwargs):
            self.calls[name] += 1
            return await attr(*args, **kwargs)

        return wrapper


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'posts.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def users(session_factory):
    """Author, another user and an admin, as requesters."""
    async with session_factory() as session:
        author = await user_crud.create(session, "author@example.com", "author")
        other = await user_crud.create(session, "other@example.com", "other")
        admin = await user_crud.create(session, "admin@example.com", "admin", role=Role.ADMIN)
    return {
        "author": Requester(id=author.id, role=Role.USER),
        "other": Requester(id=other.id, role=Role.USER),
        "admin": Requester(id=admin.id, role=Role.ADMIN),
    }


# ---------------------------------------------------------------------------
# Core objects
# ---------------------------------------------------------------------------
@pytest.fixture
def sample_utc_now():
    return datetime(2026, 6, 15, 12, 0, 0)


@pytest.fixture
def clock(sample_utc_now):
    return FakeClock(sample_utc_now)


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def cache_sync(cache):
    return CacheSynchronizer(cache, ttl=600)


@pytest.fixture
def store():
    return SpyStore()


@pytest.fixture
def service(db, cache_sync, clock, store):
    return PostService(db, cache_sync, clock=clock, store=store)
