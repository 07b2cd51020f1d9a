"""Shared test fixtures for Keyspace."""

import os
from collections.abc import Generator
from typing import Any

import pytest

import keyspace.backends
from keyspace import BackendMap, MemoryBackend, SQLBackend, reset_key_registry


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


def _postgresql_connectable(url: str) -> bool:
    """Check if we can connect to PostgreSQL."""
    if not _psycopg_available():
        return False
    try:
        from sqlalchemy import text

        backend = SQLBackend(url)
        with backend.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        backend.close()
        return True
    except Exception:
        return False


class QuotaExceededError(Exception):
    """Raised by BrokenBackend on every write."""


class BrokenBackend:
    """Has every method but refuses writes, like a full or disabled backend."""

    def set(self, key: str, raw_value: Any) -> None:
        raise QuotaExceededError("quota exceeded")

    def get(self, key: str) -> Any:
        return None

    def remove(self, key: str) -> None:
        return None

    def clear(self) -> None:
        return None


@pytest.fixture(autouse=True)
def clean_registry() -> Generator[None, None, None]:
    """Start and finish every test with an empty key registry."""
    reset_key_registry()
    yield
    reset_key_registry()


@pytest.fixture(autouse=True)
def isolated_default_backends(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test a fresh default backend map backed by in-memory SQLite."""
    monkeypatch.setenv("KEYSPACE_DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.delenv("KEYSPACE_DEFAULT_BACKEND", raising=False)
    monkeypatch.delenv("KEYSPACE_SQL_ECHO", raising=False)
    monkeypatch.setattr(keyspace.backends, "_default_backends", None)


@pytest.fixture
def local_backend() -> Generator[SQLBackend, None, None]:
    """SQLite in-memory backend, standing in for persistent storage."""
    backend = SQLBackend("sqlite:///:memory:")
    yield backend
    backend.close()


@pytest.fixture
def session_backend() -> MemoryBackend:
    """In-memory dictionary backend."""
    return MemoryBackend()


@pytest.fixture
def broken_backend() -> BrokenBackend:
    """Backend that fails its storage probe."""
    return BrokenBackend()


@pytest.fixture
def backends(local_backend: SQLBackend, session_backend: MemoryBackend) -> BackendMap:
    """Backend map with "local" and "session" entries."""
    return BackendMap({"local": local_backend, "session": session_backend})


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from environment or use default.

    Skips when psycopg is missing or no server is reachable.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        # Default to local PostgreSQL
        url = "postgresql://localhost/keyspace_test"

    # Skip if psycopg not available
    if not _psycopg_available():
        pytest.skip("psycopg not installed")

    # Skip if can't connect (no PostgreSQL server)
    if not _postgresql_connectable(url):
        pytest.skip(f"Cannot connect to PostgreSQL at {url}")

    return url

