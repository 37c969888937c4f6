"""Service test fixtures: async DB, seeded authors/rooms, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db, get_settings, get_rate_limiters and get_presigner overridden per test
    - db_manager patched so the readiness probe hits the test engine
    - Session cookies are read from Set-Cookie and sent back explicitly

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features are not exercised here)
    - base_url is https: the session cookie is Secure
    - The client cookie jar is cleared after each login so every request states
      exactly which session it carries
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from backalley.api.dependencies import (
    RateLimiterRegistry, get_presigner, get_rate_limiters,
)
from backalley.config import get_settings, load_settings
from backalley.core.credential_hasher import CredentialHasher
from backalley.core.domain_types import AuthorId
from backalley.db.base import Base
from backalley.infrastructure.database import get_db, DatabaseSessionManager
from backalley.models.author import Author
from backalley.models.invite import InviteQuota
from backalley.models.room import Room
import backalley.infrastructure.database as db_module
from backalley.main import app
from tests.services.helpers import PASSWORD, FakeClock, FakePresigner


# ─── Database ────────────────────────────────────────────────────

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


# ─── Collaborators ───────────────────────────────────────────────

@pytest.fixture
def settings():
    return load_settings(
        password_pepper="test-pepper",
        bcrypt_rounds=4,
        database_url="sqlite+aiosqlite:///:memory:",
        _env_file=None,
    )


@pytest.fixture
def hasher(settings):
    return CredentialHasher(settings.password_pepper, settings.bcrypt_rounds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def presigner():
    return FakePresigner()


# ─── Seed data ───────────────────────────────────────────────────

@pytest.fixture
def author_factory(test_db, hasher):
    """Insert an author with a password and an invite quota; returns its id."""

    async def _create(name: str, password: str = PASSWORD, quota: int = 3) -> AuthorId:
        author = Author(name=name, password_hash=hasher.hash(password))
        test_db.add(author)
        await test_db.flush()
        author_id = AuthorId(author.id)
        test_db.add(InviteQuota(author_id=author_id, remaining=quota))
        await test_db.commit()
        return author_id

    return _create


@pytest.fixture
async def root_author(author_factory):
    return await author_factory("root")


@pytest.fixture
async def room(test_db):
    test_db.add(Room(name="general"))
    await test_db.commit()
    return "general"


# ─── HTTP client ─────────────────────────────────────────────────

@pytest.fixture
async def client(test_engine, test_session_factory, settings, presigner):
    """FastAPI test client with DB and process-wide collaborators overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    limiters = RateLimiterRegistry(settings)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rate_limiters] = lambda: limiters
    app.dependency_overrides[get_presigner] = lambda: presigner

    # Readiness probe reads db_manager directly
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="https://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager

