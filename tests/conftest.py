"""
Test configuration and fixtures
"""

import os

# Must be set before greenlight.core.config is imported
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["NOTIFICATIONS_ENABLED"] = "false"
os.environ["ROOT_USERS"] = ""

from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from greenlight.api.deps import get_jira_client, get_notifier, get_state_store
from greenlight.database.engine import get_db, get_engine
from greenlight.database.migrations import SchemaMigrationGuard
from greenlight.integrations.jira import JiraClient
from greenlight.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
JIRA_BASE_URL = "https://jira.example.com"


class InMemoryStateStore:
    """Async key-value double with the redis get/set signature"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(initial or {})
        self.writes: List[Tuple[str, Any]] = []

    async def get(self, name: str) -> Optional[Any]:
        return self.data.get(name)

    async def set(self, name: str, value: Any) -> bool:
        self.data[name] = value
        self.writes.append((name, value))
        return True


class RecordingNotifier:
    """Notification sink double"""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[Tuple[Any, str, str]] = []

    async def send(self, release, action: str, actor: str) -> bool:
        self.calls.append((release, action, actor))
        if self.error is not None:
            raise self.error
        return True


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database, no schema yet"""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, echo=False)
    yield engine
    await engine.dispose()


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest_asyncio.fixture
async def migrated_engine(engine: AsyncEngine, state_store: InMemoryStateStore) -> AsyncEngine:
    assert await SchemaMigrationGuard(engine, state_store).ensure_schema()
    return engine


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    migrated_engine: AsyncEngine,
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def jira_client() -> JiraClient:
    """Unconfigured client: lookups skipped, browse URLs still built"""
    return JiraClient(base_url=JIRA_BASE_URL)


@pytest_asyncio.fixture
async def client(
    engine: AsyncEngine,
    state_store: InMemoryStateStore,
    session_maker: async_sessionmaker[AsyncSession],
    jira_client: JiraClient,
    notifier: RecordingNotifier,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app; the schema guard runs on the first release request"""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    async def override_get_state_store():
        return state_store

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_state_store] = override_get_state_store
    app.dependency_overrides[get_jira_client] = lambda: jira_client
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
