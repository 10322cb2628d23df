"""Shared test fixtures for backend tests."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from beyond_mask.core.config import settings
from beyond_mask.core.database import get_session
from beyond_mask.services.llm.base import BaseLLMProvider, Turn

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def get_test_session():
    with Session(test_engine) as session:
        yield session


class FakeProvider(BaseLLMProvider):
    """Records every call and replays queued replies or errors."""

    def __init__(self, replies=None):
        self.replies = list(replies or ["Hi there"])
        self.calls: list[tuple[str, list[Turn], str]] = []
        self.closed = False

    async def complete(self, system_instruction, history, user_content):
        self.calls.append((system_instruction, list(history), user_content))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def aclose(self):
        self.closed = True


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import beyond_mask.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    with patch("beyond_mask.core.database.engine", test_engine):
        yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(autouse=True)
def no_retry_wait():
    """Keep completion retries instant."""
    with (
        patch.object(settings, "completion_retry_min_wait", 0),
        patch.object(settings, "completion_retry_max_wait", 0),
    ):
        yield


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def client(fake_provider):
    """FastAPI TestClient with the database and LLM provider patched."""
    with patch("beyond_mask.main.get_llm_provider", return_value=fake_provider):
        from beyond_mask.main import app

        # Use FastAPI's dependency override for get_session
        app.dependency_overrides[get_session] = get_test_session

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()
