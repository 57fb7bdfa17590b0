"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import AsyncMock, Mock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LLM_PROVIDER", "anthropic")
os.environ.setdefault("LLM_MODEL", "claude-sonnet-4-20250514")
os.environ.setdefault("PROMOTERFLOW_API_BASE_URL", "https://promoterflow.test/api")
os.environ.setdefault("LOG_FORMAT", "text")

from promoterflow.models.activity import Activity
from promoterflow.models.promoter import Promoter, UserRole
from promoterflow.services.change_channel import ChangeChannel
from promoterflow.services.local_store import ACTIVITIES, PROMOTERS, LocalStore
from promoterflow.services.remote_store import RemoteActivityStore
from promoterflow.services.storage import MemoryStorage


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    client = Mock()
    client.table = Mock(return_value=Mock())
    return client


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def change_channel():
    return ChangeChannel()


@pytest.fixture
def sample_promoters():
    """Admin p1 plus field promoters p2 and p3."""
    return [
        Promoter(id="p1", name="Carlos Mendoza", role=UserRole.ADMIN),
        Promoter(id="p2", name="Elena Rodríguez", role=UserRole.FIELD_PROMOTER),
        Promoter(id="p3", name="Roberto Gómez", role=UserRole.FIELD_PROMOTER),
    ]


@pytest.fixture
def sample_activities():
    """Activities owned by p2, p3 and p2, in that order."""
    return [
        Activity(id="a1", promoter_id="p2", objective="Visita Sector 4", date="2026-02-01", status="Pendiente"),
        Activity(id="a2", promoter_id="p3", objective="Reunión vecinal", date="2026-02-02", status="En Proceso"),
        Activity(id="a3", promoter_id="p2", objective="Seguimiento de obra", date="2026-02-03", status="Pendiente"),
    ]


@pytest.fixture
def local_store(memory_storage, sample_promoters, sample_activities):
    """Store seeded with the sample promoters and activities."""
    store = LocalStore(memory_storage, store_id="store-test")
    store.set(PROMOTERS, lambda _: sample_promoters)
    store.set(ACTIVITIES, lambda _: sample_activities)
    return store


@pytest.fixture
def mock_remote():
    """Remote activity store with every call mocked."""
    remote = Mock(spec=RemoteActivityStore)
    remote.list_activities = AsyncMock(return_value=[])
    remote.create_activity = AsyncMock()
    remote.add_observation = AsyncMock(return_value={})
    remote.list_promoters = AsyncMock(return_value=[])
    remote.upsert_promoter = AsyncMock(return_value={})
    return remote


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2026-02-01 12:00:00") as frozen_time:
        yield frozen_time


@pytest.fixture
def mock_vercel_request():
    """Mock Vercel serverless function request."""
    return {
        "method": "GET",
        "path": "/api/activities",
        "headers": {"content-type": "application/json"},
        "body": None,
        "query": {}
    }


@pytest.fixture(scope="function")
def reset_environment(monkeypatch):
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
