"""Pytest configuration and fixtures."""
from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from agile_canvas.main import app
from agile_canvas.services.analytics import OverdueAlertMonitor
from agile_canvas.services.currency_service import CurrencyService
from agile_canvas.services.project_store import ProjectStore
from agile_canvas.storage import MemoryStorage


def make_project_create(**overrides):
    """Build a valid ProjectCreate with sensible defaults."""
    from agile_canvas.models.project import ProjectCreate

    data = {
        "name": "Website Redesign",
        "client": "Acme Corp",
        "description": "New marketing site",
        "start_date": date.today() - timedelta(days=10),
        "end_date": date.today() + timedelta(days=30),
    }
    data.update(overrides)
    return ProjectCreate(**data)


@pytest.fixture
def storage():
    """Empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def store(storage):
    """Project store backed by in-memory storage."""
    return ProjectStore(storage)


@pytest_asyncio.fixture
async def app_client():
    """
    Create a test client with a clean in-memory store.

    This fixture:
    - Swaps the runtime services for fresh in-memory ones
    - Yields an async HTTP client for testing
    - Restores the original services afterwards
    """
    from agile_canvas.database import database

    original = (database.store, database.currency, database.alerts)
    database.store = ProjectStore(MemoryStorage())
    database.currency = CurrencyService()
    database.alerts = OverdueAlertMonitor()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    database.store, database.currency, database.alerts = original


@pytest.fixture
def project_input():
    """Factory for valid ProjectCreate objects."""
    return make_project_create
