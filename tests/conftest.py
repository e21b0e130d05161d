"""Shared fixtures for waitlist tests.

Provides:
- an in-memory SQLite (aiosqlite) engine with all tables created per test
- a factory for httpx clients bound to an app built with given WaitlistOptions
- helpers for seeding users and issuing bearer tokens
"""
import os

# Settings are read at import time, so these must be set before the app loads.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "test")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import waitlist_service.models  # noqa: E402,F401
from waitlist_service.core.options import FieldSpec, WaitlistOptions  # noqa: E402
from waitlist_service.core.security import create_access_token, hash_password  # noqa: E402
from waitlist_service.db.session import Base, get_db  # noqa: E402
from waitlist_service.main import create_app  # noqa: E402
from waitlist_service.models.user import User, UserRole  # noqa: E402

ADMIN_EMAIL = "admin@test.com"
USER_EMAIL = "member@test.com"
PASSWORD = "Largat1234"

DEFAULT_FIELDS = (
    FieldSpec("name", "string", required=True),
    FieldSpec("department", "string"),
)


def default_options(**overrides) -> WaitlistOptions:
    values = dict(
        enabled=True,
        allowed_domains=("@test.com",),
        additional_fields=DEFAULT_FIELDS,
    )
    values.update(overrides)
    return WaitlistOptions(**values)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

async def create_user(session_maker, email: str, role: UserRole = UserRole.user) -> User:
    async with session_maker() as session:
        user = User(email=email, hashed_password=hash_password(PASSWORD), role=role)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.email, user.role.value)}"}


@pytest_asyncio.fixture()
async def admin_user(session_maker) -> User:
    return await create_user(session_maker, ADMIN_EMAIL, UserRole.admin)


@pytest_asyncio.fixture()
async def regular_user(session_maker) -> User:
    return await create_user(session_maker, USER_EMAIL, UserRole.user)


@pytest.fixture()
def admin_headers(admin_user) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture()
def user_headers(regular_user) -> dict[str, str]:
    return auth_headers(regular_user)


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def make_client(session_maker):
    """Return a factory building an AsyncClient for an app with given options."""
    clients: list[AsyncClient] = []

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    def _make(options: WaitlistOptions | None = None) -> AsyncClient:
        app = create_app(options or default_options())
        app.dependency_overrides[get_db] = override_get_db
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture()
async def client(make_client) -> AsyncClient:
    return make_client()
