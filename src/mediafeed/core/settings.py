"""Application settings and configuration.

This module defines all configuration options for the media feed service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Media Feed", alias="MEDIAFEED_APP_NAME")
    app_version: str = Field(default="0.1.0", alias="MEDIAFEED_APP_VERSION")
    debug: bool = Field(default=False, alias="MEDIAFEED_DEBUG")
    log_level: str = Field(default="INFO", alias="MEDIAFEED_LOG_LEVEL")

    # Document store
    database_url: str = Field(default="sqlite:///./mediafeed.db", alias="MEDIAFEED_DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="MEDIAFEED_SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="MEDIAFEED_AUTO_CREATE_TABLES")
    store_max_attempts: int = Field(default=3, ge=1, alias="MEDIAFEED_STORE_MAX_ATTEMPTS")
    store_retry_backoff_seconds: float = Field(
        default=0.05,
        ge=0.0,
        alias="MEDIAFEED_STORE_RETRY_BACKOFF_SECONDS",
    )

    # Fixed partition value holding every username reservation.
    username_partition: str = Field(
        default="unique_username",
        alias="MEDIAFEED_USERNAME_PARTITION",
    )

    # Object store and media delivery
    media_root: str = Field(default="./media", alias="MEDIAFEED_MEDIA_ROOT")
    media_container: str = Field(default="media", alias="MEDIAFEED_MEDIA_CONTAINER")
    cdn_base_url: str = Field(default="/media/", alias="MEDIAFEED_CDN_BASE_URL")
    upload_buffer_size: int = Field(default=4 * MIB, ge=1, alias="MEDIAFEED_UPLOAD_BUFFER_SIZE")
    max_upload_bytes: int = Field(default=500 * MIB, ge=1, alias="MEDIAFEED_MAX_UPLOAD_BYTES")

    # Feed pagination
    feed_default_page_size: int = Field(default=2, ge=1, alias="MEDIAFEED_FEED_DEFAULT_PAGE_SIZE")
    feed_max_page_size: int = Field(default=50, ge=1, alias="MEDIAFEED_FEED_MAX_PAGE_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url


settings = Settings()
