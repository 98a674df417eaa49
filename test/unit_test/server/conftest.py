from typing import AsyncGenerator, Callable, Dict
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from orgdesk.calendar import OptimisticHourLedger
from orgdesk.core.cache import TTLStorage
from orgdesk.core.database import create_all, create_sessionmaker
from orgdesk.core.database.entities import Profile, Role, RolePermission
from orgdesk.core.models.domain.enums import RoleId
from orgdesk.storage import LocalStorageBackend

# Use in-memory SQLite for testing
# Note: We use check_same_thread=False for SQLite with async
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh test database engine for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async_session_maker = create_sessionmaker(test_engine)

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def cache() -> TTLStorage:
    return TTLStorage()


@pytest.fixture
def ledger() -> OptimisticHourLedger:
    return OptimisticHourLedger()


@pytest.fixture
def storage(tmp_path) -> LocalStorageBackend:
    return LocalStorageBackend(tmp_path / "storage")


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession,
    cache: TTLStorage,
    ledger: OptimisticHourLedger,
    storage: LocalStorageBackend,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from orgdesk.core.database import get_session
    from orgdesk.server.main import app
    from orgdesk.server.services.deps import get_cache, get_ledger, get_storage

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_storage] = lambda: storage

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("orgdesk.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def users(session: AsyncSession) -> Dict[str, Profile]:
    """Seed the four roles with their default grants and a profile for each, plus a second client."""
    session.add_all(
        [
            Role(id=RoleId.ADMIN.value, role="admin", slug="admin"),
            Role(id=RoleId.COACH.value, role="jobcoach", slug="jobcoach"),
            Role(id=RoleId.CLIENT.value, role="client", slug="client"),
            Role(id=RoleId.USER.value, role="user", slug="user"),
            RolePermission(role_id=RoleId.ADMIN.value, permission_level="admin"),
            RolePermission(role_id=RoleId.COACH.value, specific_actions=["log_hours", "export_data"]),
            RolePermission(role_id=RoleId.CLIENT.value, specific_actions=["export_data"]),
        ]
    )
    profiles = {
        "admin": Profile(id="admin-1", email="ada@example.com", display_name="Ada", role=RoleId.ADMIN.value),
        "coach": Profile(id="coach-1", email="carl@example.com", full_name="Carl Coach", role=RoleId.COACH.value),
        "client": Profile(id="client-1", email="cleo@example.com", full_name="Cleo Client", role=RoleId.CLIENT.value),
        "client2": Profile(id="client-2", email="cole@example.com", role=RoleId.CLIENT.value),
        "user": Profile(id="user-1", email="uma@example.com", role=RoleId.USER.value),
    }
    session.add_all(list(profiles.values()))
    await session.commit()
    return profiles


@pytest.fixture
def as_user(users: Dict[str, Profile]) -> Callable[[str], Dict[str, str]]:
    """Headers authenticating as one of the seeded users."""
    user_ids = {key: profile.id for key, profile in users.items()}
    return lambda key: {"X-User-Id": user_ids[key]}
