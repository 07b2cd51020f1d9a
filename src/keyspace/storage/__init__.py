"""Backend migration for Keyspace.

Moves a store's values from its current backend to a newly selected one.
"""

from keyspace.storage.migration import (
    BackendMigration,
    MigrationProgress,
    MigrationResult,
    ProgressCallback,
)

__all__ = ["BackendMigration", "MigrationProgress", "MigrationResult", "ProgressCallback"]
