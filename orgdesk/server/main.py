"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orgdesk import __version__
from orgdesk.core.database import init_db
from orgdesk.core.logging_config import get_logger, setup_logging
from orgdesk.core.monitoring import initialize_logfire

from .api.v1 import (
    analytics,
    calendar,
    catalog,
    documents,
    health,
    invites,
    messages,
    notifications,
    permissions,
    profiles,
    roles,
    schedule,
    specializations,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the schema for local SQLite databases on startup and logs
    startup and shutdown.
    """
    try:
        logger.info("Starting up orgdesk server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down orgdesk server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    orgdesk Server API

    Backend services for the organisation dashboard: roles and permissions,
    documents, messaging and notifications, calendar and coach hour logs,
    analytics and the product catalog.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)


app.include_router(health.router, tags=["health"])
app.include_router(permissions.router, prefix=f"{constant.API_V1_STR}/permissions", tags=["permissions"])
app.include_router(roles.router, prefix=f"{constant.API_V1_STR}/roles", tags=["roles"])
app.include_router(profiles.router, prefix=f"{constant.API_V1_STR}/profiles", tags=["profiles"])
app.include_router(
    specializations.router, prefix=f"{constant.API_V1_STR}/profiles/specializations", tags=["specializations"]
)
app.include_router(invites.router, prefix=f"{constant.API_V1_STR}/invites", tags=["invites"])
app.include_router(calendar.router, prefix=f"{constant.API_V1_STR}/calendar", tags=["calendar"])
app.include_router(documents.router, prefix=f"{constant.API_V1_STR}/documents", tags=["documents"])
app.include_router(messages.router, prefix=f"{constant.API_V1_STR}/messages", tags=["messages"])
app.include_router(notifications.router, prefix=f"{constant.API_V1_STR}/notifications", tags=["notifications"])
app.include_router(catalog.router, prefix=f"{constant.API_V1_STR}/catalog", tags=["catalog"])
app.include_router(catalog.products_router, prefix=f"{constant.API_V1_STR}/products", tags=["products"])
app.include_router(analytics.router, prefix=f"{constant.API_V1_STR}/analytics", tags=["analytics"])
app.include_router(schedule.router, prefix=f"{constant.API_V1_STR}/schedule", tags=["schedule"])
