"""Pytest configuration and fixtures.

Each test gets a fresh in-memory SQLite database (aiosqlite) and an
in-process stand-in for Redis, so the suite needs no running services.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fotolokashen.auth.jwt import create_access_token
from fotolokashen.auth.password import hash_password
from fotolokashen.database import Base, get_db
from fotolokashen.main import app
from fotolokashen.models.user import User, UserRole
from fotolokashen.utils import cache

TEST_PASSWORD = "testpassword123"


# ── Redis stand-in ───────────────────────────────────────────────

class FakeRedis:
    """The handful of redis.asyncio calls the app makes, backed by a dict.

    TTLs are accepted and ignored.
    """

    def __init__(self):
        self.store: dict[str, str] = {}

    async def setex(self, key, ttl, value):
        self.store[key] = str(value)
        return True

    async def get(self, key):
        return self.store.get(key)

    async def exists(self, key):
        return int(key in self.store)

    async def delete(self, key):
        return int(self.store.pop(key, None) is not None)

    async def ping(self):
        return True

    async def aclose(self):
        pass


@pytest.fixture
def fake_redis():
    fake = FakeRedis()
    previous = cache._redis_client
    cache._redis_client = fake
    yield fake
    cache._redis_client = previous


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and inspecting data outside the app."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_writes(test_engine) -> list[str]:
    """Every UPDATE issued against the users table, in order."""
    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("UPDATE USERS"):
            statements.append(statement)

    event.listen(test_engine.sync_engine, "before_cursor_execute", _record)
    yield statements
    event.remove(test_engine.sync_engine, "before_cursor_execute", _record)


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the app's database dependency pointed at SQLite."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

async def make_user(
    db: AsyncSession,
    *,
    email: str = "test@example.com",
    username: str = "testuser",
    role: UserRole = UserRole.USER,
    is_active: bool = True,
    email_verified: bool = True,
    **fields,
) -> User:
    user = User(
        email=email,
        username=username,
        hashed_password=hash_password(TEST_PASSWORD),
        first_name="Test",
        last_name="User",
        role=role,
        is_active=is_active,
        email_verified=email_verified,
        **fields,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session)


@pytest_asyncio.fixture
async def staff_user(db_session: AsyncSession) -> User:
    return await make_user(
        db_session, email="staff@example.com", username="staffer", role=UserRole.STAFFER
    )


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return auth_headers_for(test_user)


@pytest.fixture
def headers_for():
    """Bearer headers for any user."""
    return auth_headers_for


@pytest.fixture
def user_factory(db_session: AsyncSession):
    async def _make(**kwargs) -> User:
        return await make_user(db_session, **kwargs)

    return _make


@pytest.fixture
def fetch_user(session_factory: async_sessionmaker):
    """Fresh copy of a user row as committed, read in its own session."""

    async def _fetch(user_id: str) -> User:
        async with session_factory() as session:
            return await session.get(User, user_id)

    return _fetch
