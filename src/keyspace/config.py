"""Configuration for Keyspace.

Settings resolve with the following priority:
1. Explicit argument
2. ``KEYSPACE_*`` environment variable
3. Default
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

DEFAULT_DATABASE_URL = "sqlite:///./keyspace.db"
DEFAULT_BACKEND = "local"


def normalize_database_url(url: str) -> str:
    """Normalize PostgreSQL URLs to use the psycopg3 driver.

    SQLAlchemy defaults to psycopg2 for 'postgresql://' URLs.
    Other URLs are returned unchanged.
    """
    if "postgresql+" in url:
        return url
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


class KeyspaceSettings(BaseModel):
    """Runtime settings for the default backends."""

    database_url: str = Field(
        default=DEFAULT_DATABASE_URL, description="SQLAlchemy URL of the 'local' backend"
    )
    default_backend: str = Field(
        default=DEFAULT_BACKEND, description="Backend name used when a store names none"
    )
    sql_echo: bool = Field(default=False, description="Echo SQL statements (for debugging)")

    @field_validator("database_url")
    @classmethod
    def _normalize_url(cls, v: str) -> str:
        return normalize_database_url(v)

    @field_validator("default_backend")
    @classmethod
    def _non_empty_backend(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_backend must not be empty")
        return v.strip()


def get_settings(
    database_url: str | None = None,
    default_backend: str | None = None,
    sql_echo: bool | None = None,
) -> KeyspaceSettings:
    """Resolve settings from arguments, environment variables and defaults."""
    return KeyspaceSettings(
        database_url=database_url or os.getenv("KEYSPACE_DATABASE_URL") or DEFAULT_DATABASE_URL,
        default_backend=(
            default_backend or os.getenv("KEYSPACE_DEFAULT_BACKEND") or DEFAULT_BACKEND
        ),
        sql_echo=sql_echo if sql_echo is not None else _env_flag("KEYSPACE_SQL_ECHO"),
    )
