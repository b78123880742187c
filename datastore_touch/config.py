"""
Configuration settings for datastore-touch.

Uses Pydantic Settings to load environment variables for the target Datastore
project, logging, and the migration defaults (pool size, retry budget, progress
interval). CLI flags override the defaults for a single run.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Datastore
    datastore_project_id: Optional[str] = Field(None, alias="DATASTORE_PROJECT_ID")
    datastore_namespace: Optional[str] = Field(None, alias="DATASTORE_NAMESPACE")
    connect_attempts: int = Field(3, alias="TOUCH_CONNECT_ATTEMPTS")
    connect_backoff_max_seconds: float = Field(5.0, alias="TOUCH_CONNECT_BACKOFF_MAX_SECONDS")
    connect_timeout_seconds: float = Field(10.0, alias="TOUCH_CONNECT_TIMEOUT_SECONDS")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Migration defaults
    workers: int = Field(4, alias="TOUCH_WORKERS", ge=1)
    emit_progress_every: int = Field(1000, alias="TOUCH_EMIT_PROGRESS_EVERY", ge=1)
    count_timeout_seconds: float = Field(60.0, alias="TOUCH_COUNT_TIMEOUT_SECONDS")
    queue_per_worker: int = Field(50, alias="TOUCH_QUEUE_PER_WORKER", ge=1)
    schema_fields: str = Field("", alias="TOUCH_SCHEMA_FIELDS")

    # Write retry policy
    write_attempts: int = Field(6, alias="TOUCH_WRITE_ATTEMPTS", ge=1)
    write_timeout_seconds: float = Field(20.0, alias="TOUCH_WRITE_TIMEOUT_SECONDS")
    write_backoff_start_seconds: float = Field(3.0, alias="TOUCH_WRITE_BACKOFF_START_SECONDS")
    write_backoff_increment_seconds: float = Field(
        1.0, alias="TOUCH_WRITE_BACKOFF_INCREMENT_SECONDS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def schema_field_names(self) -> List[str]:
        """Comma separated `TOUCH_SCHEMA_FIELDS` as a list of property names."""
        return [part.strip() for part in self.schema_fields.split(",") if part.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
