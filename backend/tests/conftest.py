"""Pytest fixtures for backend tests."""
from datetime import datetime, timezone

import pytest
import pytest_asyncio

from alert24.database import create_engine, create_session_factory, init_db
from alert24.models import MonitoringCheck
from alert24.store import MonitoringStore

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """SQLite database in a temporary directory, tables created."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'alert24-test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def store(test_engine) -> MonitoringStore:
    return MonitoringStore(create_session_factory(test_engine))


@pytest.fixture
def make_check():
    """Build an unsaved MonitoringCheck with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> MonitoringCheck:
        counter["n"] += 1
        values = {
            "id": f"check-{counter['n']}",
            "organization_id": "org-1",
            "name": f"Check {counter['n']}",
            "check_type": "http",
            "target_url": "https://example.com/health",
            "method": "GET",
            "expected_status_code": 200,
            "timeout_seconds": 5,
            "check_interval_seconds": 60,
            "status": "active",
            "current_status": "pending",
            "consecutive_failures": 0,
            "consecutive_successes": 0,
            "last_check_at": None,
        }
        values.update(overrides)
        return MonitoringCheck(**values)

    return _make
