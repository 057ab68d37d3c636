"""Shared test fixtures and configuration for the test suite."""

from datetime import date, datetime, timedelta, timezone
from typing import Generator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from taskboard.config import Settings
from taskboard.main import create_app
from taskboard.models.task import TaskStatus
from taskboard.schemas import TaskCreate, TaskResponse
from taskboard.services.activity_recorder import ActivityRecorder
from taskboard.services.identity import IdentityProvider
from taskboard.services.task_service import TaskService
from taskboard.services.task_store import TaskStore

OWNER = "user-1"
OTHER_OWNER = "user-2"


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings without file logging."""
    return Settings(
        jwt_secret="test-secret",
        log_level="DEBUG",
        environment="test",
        log_dir=None,
    )


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def task_store() -> TaskStore:
    """Create a task store instance for testing."""
    return TaskStore()


@pytest.fixture
def activity_recorder() -> ActivityRecorder:
    """Create an activity recorder instance for testing."""
    return ActivityRecorder()


@pytest.fixture
def task_service(task_store, activity_recorder) -> TaskService:
    """Create a task service instance for testing."""
    return TaskService(task_store, activity_recorder)


@pytest.fixture
def identity_provider(test_settings) -> IdentityProvider:
    return IdentityProvider(test_settings)


@pytest.fixture
def client(test_settings) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(identity_provider) -> dict:
    """Authorization headers for OWNER."""
    return {"Authorization": f"Bearer {identity_provider.create_access_token(OWNER)}"}


@pytest.fixture
def other_auth_headers(identity_provider) -> dict:
    """Authorization headers for OTHER_OWNER."""
    return {"Authorization": f"Bearer {identity_provider.create_access_token(OTHER_OWNER)}"}


# Test data fixtures
@pytest.fixture
def sample_task_data(today) -> dict:
    """Sample task data for testing."""
    return {
        "title": "Ship report",
        "description": "Finish Q1 report",
        "due_date": (today + timedelta(days=2)).isoformat(),
    }


@pytest.fixture
def sample_task_create(sample_task_data) -> TaskCreate:
    return TaskCreate(**sample_task_data)


def make_task_response(status: TaskStatus = TaskStatus.PENDING, title: str = "Ship report") -> TaskResponse:
    """Build a task as the client would receive it from the server."""
    now = datetime.now(timezone.utc)
    return TaskResponse(
        id=uuid4(),
        title=title,
        description="Finish Q1 report",
        status=status,
        due_date=date.today() + timedelta(days=2),
        owner_id=OWNER,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def make_task():
    """Factory for client-side task records."""
    return make_task_response
