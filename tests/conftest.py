"""Shared test fixtures."""

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from clubhouse.config import CourseSetup, Settings
from clubhouse.db.engine import create_engine, create_tables, get_session
from clubhouse.db.repository import Repository


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(clubhouse_env="development", database_url="sqlite+aiosqlite:///:memory:")


@pytest.fixture
def course() -> CourseSetup:
    """The default league nine: rating 34.0, slope 107, par 36."""
    return CourseSetup()


@pytest.fixture
async def engine() -> AsyncEngine:
    """Create an in-memory SQLite engine with all tables."""
    eng = create_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def repo(engine: AsyncEngine) -> Repository:
    """Yield a repository with a session bound to the in-memory database."""
    async with get_session(engine) as session:
        yield Repository(session)
