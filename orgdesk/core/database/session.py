"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.core.logging_config import get_logger
from orgdesk.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.effective_database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    SQLite URLs are treated as local development and get their tables created
    here. Any other backend is expected to be migrated by Alembic beforehand.
    """
    if engine.url.get_backend_name() == "sqlite":
        logger.info("SQLite database detected, creating tables from ORM metadata")
        await create_all(engine)
    else:
        logger.debug("Skipping table creation; schema is managed by Alembic migrations")
