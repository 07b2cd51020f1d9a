"""Core types and options for Keyspace."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MigrationStrategy(StrEnum):
    """Ordering used when a store moves its values to a new backend."""

    MOVE = "move"  # Read and remove each value, then write all (lowest footprint)
    BUFFERED = "buffered"  # Read all, write all, then remove from the old backend

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid strategy values."""
        return [s.value for s in cls]


class StoreOptions(BaseModel):
    """Options for constructing a Store.

    Callers may pass this model or a plain dict with the same keys.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=False)

    transformer: Any = Field(
        default=None, description="Object with parse/stringify (default: identity)"
    )
    backend: Any = Field(
        default=None,
        description="Backend, backend name, or ordered list of either (default: configured name)",
    )
    backends: Any = Field(
        default=None, description="Name -> backend mapping used to resolve backend names"
    )
    registry: Any = Field(default=None, description="KeyRegistry (default: process-wide)")
    migration_strategy: MigrationStrategy = Field(
        default=MigrationStrategy.MOVE, description="Ordering used by set_backend"
    )
