"""
Pytest configuration and fixtures

Every test gets its own SQLite file under tmp_path, so nothing is shared
between tests.
"""
import pytest
import pytest_asyncio
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import create_async_engine

from form_journal.schemas import AnalysisCreate
from form_journal.services.store import AnalysisStore

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    """Timestamp in the format the store writes."""
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_record():
    """Factory for inbound records with sensible defaults."""
    def _make(**overrides) -> AnalysisCreate:
        data = {
            "exercise_type": "squat",
            "fitness_level": "intermediate",
            "goals": "Build leg strength",
            "specific_concerns": None,
            "form_score": 80,
            "analysis": "Depth is good, knees track over toes.",
            "recommendations": ["Brace the core", "Slow the descent"],
            "key_points": ["Neutral spine"],
            "improvements": ["Hip mobility"],
            "media_type": "video",
        }
        if isinstance(overrides.get("created_at"), datetime):
            overrides["created_at"] = iso(overrides["created_at"])
        data.update(overrides)
        return AnalysisCreate(**data)
    return _make


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'journal.db'}"


@pytest_asyncio.fixture
async def store(database_url):
    """An opened, empty store."""
    store = AnalysisStore(database_url)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def drop_history_table(database_url):
    """Break the store underneath it by dropping its table from another connection."""
    async def _drop():
        engine = create_async_engine(database_url)
        async with engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE analysis_history")
        await engine.dispose()
    return _drop
