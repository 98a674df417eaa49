"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class PostgreSQLConfig(BaseModel):
    """PostgreSQL database configuration."""

    db: str = Field(default="orgdesk", alias="POSTGRES_DB", description="PostgreSQL database name")
    user: str = Field(default="orgdesk", alias="POSTGRES_USER", description="PostgreSQL database user")
    password: str = Field(default="changeme", alias="POSTGRES_PASSWORD", description="PostgreSQL database password")
    host: str = Field(default="postgres", alias="POSTGRES_HOST", description="PostgreSQL database host address")
    port: int = Field(default=5432, alias="POSTGRES_PORT", description="PostgreSQL database port number")

    model_config = {"populate_by_name": True}

    @property
    def url(self) -> str:
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


class StorageConfig(BaseModel):
    """Object storage configuration for document and attachment buckets."""

    root: str = Field(default="./storage", alias="STORAGE_ROOT", description="Root directory for the local bucket store")
    documents_bucket: str = Field(
        default="documents", alias="STORAGE_DOCUMENTS_BUCKET", description="Bucket holding uploaded documents"
    )
    attachments_bucket: str = Field(
        default="message-attachments",
        alias="STORAGE_ATTACHMENTS_BUCKET",
        description="Bucket holding chat message attachments",
    )
    max_upload_size_mb: int = Field(
        default=50, alias="MAX_UPLOAD_SIZE_MB", description="Largest accepted upload, in megabytes"
    )

    model_config = {"populate_by_name": True}

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="orgdesk server host address to bind to",
        alias="ORGDESK_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="orgdesk server port number",
        alias="ORGDESK_SERVER_PORT",
    )
    site_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web front-end, used to build invite links",
        alias="SITE_URL",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="ORGDESK_LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="Log format (simple, detailed, json)", alias="LOG_FORMAT")
    log_file_dir: str = Field(default="logs", description="Directory for the log file", alias="LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Whether to also log to a file", alias="ENABLE_FILE_LOGGING"
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: Optional[str] = Field(
        default=None,
        description="Async database connection URL; built from the POSTGRES_* settings when unset",
        alias="DATABASE_URL",
    )

    # Grouped overrides; unset values fall back to the grouped model defaults
    postgres_db: Optional[str] = Field(default=None, alias="POSTGRES_DB")
    postgres_user: Optional[str] = Field(default=None, alias="POSTGRES_USER")
    postgres_password: Optional[str] = Field(default=None, alias="POSTGRES_PASSWORD")
    postgres_host: Optional[str] = Field(default=None, alias="POSTGRES_HOST")
    postgres_port: Optional[int] = Field(default=None, alias="POSTGRES_PORT")
    cors_origins: Optional[list[str]] = Field(default=None, alias="CORS_ORIGINS")

    # =====================================================================
    # Storage Configuration
    # =====================================================================
    storage_root: Optional[str] = Field(default=None, alias="STORAGE_ROOT")
    storage_documents_bucket: Optional[str] = Field(default=None, alias="STORAGE_DOCUMENTS_BUCKET")
    storage_attachments_bucket: Optional[str] = Field(default=None, alias="STORAGE_ATTACHMENTS_BUCKET")
    max_upload_size_mb: Optional[int] = Field(default=None, alias="MAX_UPLOAD_SIZE_MB")

    # =====================================================================
    # Feature Flags
    # =====================================================================
    notifications_api_enabled: bool = Field(
        default=True,
        description="Serve the notifications feed endpoints",
        alias="NOTIFICATIONS_API_ENABLED",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def postgres(self) -> PostgreSQLConfig:
        """Get PostgreSQL configuration from environment variables."""
        return PostgreSQLConfig.model_validate(self.model_dump(by_alias=True, exclude_none=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True, exclude_none=True))

    @property
    def storage(self) -> StorageConfig:
        """Get object storage configuration from environment variables."""
        return StorageConfig.model_validate(self.model_dump(by_alias=True, exclude_none=True))

    @property
    def effective_database_url(self) -> str:
        return self.database_url or self.postgres.url


settings = Settings()
