"""
Pytest configuration and fixtures for testing
"""
import uuid
from datetime import datetime

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from utils.clock import get_clock

# In-memory SQLite database for testing (one shared connection per test)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed "now" for every time-relative assertion
FIXED_NOW = datetime(2025, 1, 15, 12, 0, 0)

# Session factory of the currently running test, used by override_get_db
_test_session_factory = None


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
async def test_db():
    """
    Fixture that provides an isolated, in-memory SQLite database connection for each test.

    This fixture:
    - Creates a fresh engine and all tables before the test runs
    - Yields a clean AsyncSession for the test
    - Disposes of the engine (and the in-memory database) afterwards
    """
    global _test_session_factory

    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
    )
    _test_session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    # Create all tables
    async with test_engine.begin() as conn:
        # Import models to ensure they're registered with Base
        import database_models  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)

    # Create a session for the test
    async with _test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    _test_session_factory = None
    await test_engine.dispose()


# Override get_db dependency to use test database
async def override_get_db():
    """Override get_db to use test database"""
    async with _test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@pytest.fixture
async def async_client(test_db):
    """
    Async HTTP client fixture with test database and fixed clock overrides.
    Tables come from the test_db fixture, which tests can also use for seeding.
    """
    from main import app

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Cleanup: remove dependency overrides
    app.dependency_overrides.clear()


async def create_profile(db, **fields):
    """Insert a profile with trial defaults; returns the committed Profile."""
    from database_models import Profile

    data = {
        "email": f"user-{uuid.uuid4().hex[:10]}@example.com",
        "plan_type": "trial",
        "trial_ends_at": datetime(2025, 1, 1),
        "created_at": FIXED_NOW,
    }
    data.update(fields)
    user = Profile(**data)
    db.add(user)
    await db.commit()
    return user


async def reload_profile(db, user_id):
    """Fetch a profile fresh from the database, bypassing the identity map."""
    from database_models import Profile

    return await db.get(Profile, user_id, populate_existing=True)
