"""Test configuration for database unit tests.

This module provides common fixtures for exercising the repositories
against an in-memory SQLite database.
"""

from __future__ import annotations

from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from orgdesk.core.database import create_all, create_sessionmaker
from orgdesk.core.database.entities import Profile, Role
from orgdesk.core.models.domain.enums import RoleId


@pytest_asyncio.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    await create_all(engine)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async_session = create_sessionmaker(in_memory_engine)

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def sample_profiles(in_memory_session: AsyncSession) -> Dict[str, Profile]:
    """Seed the four roles and one profile per role."""
    in_memory_session.add_all(
        [
            Role(id=RoleId.ADMIN.value, role="admin", slug="admin"),
            Role(id=RoleId.COACH.value, role="jobcoach", slug="jobcoach"),
            Role(id=RoleId.CLIENT.value, role="client", slug="client"),
            Role(id=RoleId.USER.value, role="user", slug="user"),
        ]
    )
    profiles = {
        "admin": Profile(id="admin-1", email="ada@example.com", display_name="Ada", role=RoleId.ADMIN.value),
        "coach": Profile(id="coach-1", email="carl@example.com", full_name="Carl Coach", role=RoleId.COACH.value),
        "client": Profile(id="client-1", email="cleo@example.com", role=RoleId.CLIENT.value),
        "user": Profile(id="user-1", email="uma@example.com", role=RoleId.USER.value),
    }
    in_memory_session.add_all(list(profiles.values()))
    await in_memory_session.commit()
    return profiles


@pytest.fixture(scope="function")
def sample_document_data() -> dict:
    """Sample document data for testing."""
    return {
        "name": "report.pdf",
        "type": "file",
        "mime_type": "application/pdf",
        "size": 2048,
        "path": "/report.pdf",
        "parent_path": None,
        "storage_path": "1700000000000-report.pdf",
        "uploaded_by": "admin-1",
        "tags": ["finance"],
    }
