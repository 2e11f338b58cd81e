"""Pytest configuration and fixtures for adconnect.

Uses app.main:app for HTTP tests and app.infrastructure.persistence.database
for DB-dependent fixtures. Required secrets get test defaults before the app
is imported, since create_app() loads settings at import time.
"""

import os
from datetime import UTC, datetime

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt-and-oauth-state")
os.environ.setdefault("ENCRYPTION_KEY", "0123456789abcdef0123456789abcdef")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.core.limiter import limiter  # noqa: E402
from app.domain.enums import UserRole  # noqa: E402
from app.domain.value_objects import CallerIdentity  # noqa: E402
from app.infrastructure.persistence import database  # noqa: E402
from app.infrastructure.security.secret_codec import SecretCodec  # noqa: E402
from app.infrastructure.security.state_signer import OAuthStateSigner  # noqa: E402
from app.infrastructure.session import InMemorySessionStore  # noqa: E402
from app.main import app  # noqa: E402
from app.shared.utils.datetime import FixedClock  # noqa: E402

TEST_ORGANIZATION_ID = "org-test-1"
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI).

    ASGITransport does not run the lifespan, so the in-process session store
    is installed here.
    """
    app.state.session_store = InMemorySessionStore()
    app.state.provider_http_client = None
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL pointing at a migrated Postgres. Skips when it is
    not configured; run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def codec() -> SecretCodec:
    return SecretCodec("0123456789abcdef0123456789abcdef")


@pytest.fixture
def signer() -> OAuthStateSigner:
    return OAuthStateSigner("test-secret-key-for-oauth-state-signing")


@pytest.fixture
def session_store(clock: FixedClock) -> InMemorySessionStore:
    return InMemorySessionStore(ttl=3600, clock=clock)


@pytest.fixture
def session(session_store: InMemorySessionStore):
    return session_store.open()


@pytest.fixture
def admin() -> CallerIdentity:
    return CallerIdentity(user_id="user-admin", role=UserRole.ADMIN)


@pytest.fixture
def member() -> CallerIdentity:
    return CallerIdentity(user_id="user-member", role=UserRole.MEMBER)
