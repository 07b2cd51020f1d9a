"""Backend migration for Keyspace.

Moves every declared key of a store from its current backend to a newly
selected one, with progress callbacks. There is no rollback: if a read,
remove or write fails part way, a MigrationError carrying the values read
so far is raised and the store may be missing keys in both backends.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from keyspace.core.types import MigrationStrategy
from keyspace.exceptions import MigrationError

if TYPE_CHECKING:
    from keyspace.core.store import Store

logger = logging.getLogger(__name__)


@dataclass
class MigrationProgress:
    """Progress information for migration callbacks."""

    total_keys: int
    migrated_keys: int
    current_key: str
    phase: str  # "read", "write" or "remove"

    @property
    def percentage(self) -> float:
        """Get completion percentage of the write phase."""
        if self.total_keys == 0:
            return 100.0
        return (self.migrated_keys / self.total_keys) * 100


@dataclass
class MigrationResult:
    """Result of a backend migration."""

    keys_migrated: list[str]
    old_backend: str
    new_backend: str
    strategy: str
    duration_seconds: float = 0.0

    @property
    def count(self) -> int:
        return len(self.keys_migrated)


ProgressCallback = Callable[[MigrationProgress], None]


class BackendMigration:
    """Moves a store's values between backends.

    Two orderings are supported:
    - MOVE: read and remove each key from the old backend, switch, then
      write everything to the new backend. Values are never held in both
      backends, but a failure while writing loses the values in flight
      (they stay available on the raised MigrationError).
    - BUFFERED: read every key, switch, write everything, then remove from
      the old backend. A failure never leaves a value in neither backend.
    """

    def __init__(
        self,
        strategy: MigrationStrategy = MigrationStrategy.MOVE,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Initialize the migration handler.

        Args:
            strategy: Ordering of the read/remove/write phases
            on_progress: Optional progress callback
        """
        self._strategy = MigrationStrategy(strategy)
        self._on_progress = on_progress

    @property
    def strategy(self) -> MigrationStrategy:
        return self._strategy

    def migrate(self, store: Store, new_backend: Any) -> MigrationResult:
        """Switch ``store`` to ``new_backend`` and move its values across.

        ``new_backend`` must already be validated.

        Returns:
            MigrationResult with details

        Raises:
            MigrationError: If any backend or transformer call fails
        """
        start_time = datetime.now(UTC)
        old_backend = store.backend
        keys = list(store.keys)
        old_name = type(old_backend).__name__
        new_name = type(new_backend).__name__

        if new_backend is old_backend:
            logger.info(f"{new_name} is already the active backend, nothing to migrate")
            return MigrationResult(
                keys_migrated=[],
                old_backend=old_name,
                new_backend=new_name,
                strategy=self._strategy.value,
            )

        logger.info(
            f"Migrating {len(keys)} keys from {old_name} to {new_name} "
            f"({self._strategy.value})"
        )

        if self._strategy == MigrationStrategy.BUFFERED:
            written = self._migrate_buffered(store, keys, old_backend, new_backend)
        else:
            written = self._migrate_move(store, keys, old_backend, new_backend)

        duration = (datetime.now(UTC) - start_time).total_seconds()
        logger.info(f"Migrated {len(written)} keys to {new_name} in {duration:.3f}s")
        return MigrationResult(
            keys_migrated=written,
            old_backend=old_name,
            new_backend=new_name,
            strategy=self._strategy.value,
            duration_seconds=duration,
        )

    def _migrate_move(
        self, store: Store, keys: list[str], old_backend: Any, new_backend: Any
    ) -> list[str]:
        captured: list[tuple[str, Any]] = []
        action = "reading"
        try:
            # 1. Read and remove from the old backend
            for key in keys:
                action = "reading"
                raw = old_backend.get(key)
                if raw is not None:
                    captured.append((key, store.transformer.parse(raw)))
                    action = "removing"
                    old_backend.remove(key)
                self._report(len(keys), 0, key, "read")
        except Exception as e:
            logger.error(f"Migration failed while {action} '{key}' from old backend: {e}")
            raise MigrationError(
                f"{action} '{key}' from old backend: {e}", captured=captured
            ) from e

        # 2. Switch
        store._backend = new_backend

        # 3. Write to the new backend
        return self._write_all(store, captured)

    def _migrate_buffered(
        self, store: Store, keys: list[str], old_backend: Any, new_backend: Any
    ) -> list[str]:
        captured: list[tuple[str, Any]] = []
        try:
            # 1. Read everything, old backend untouched
            for key in keys:
                raw = old_backend.get(key)
                if raw is not None:
                    captured.append((key, store.transformer.parse(raw)))
                self._report(len(keys), 0, key, "read")
        except Exception as e:
            logger.error(f"Migration failed while reading '{key}' from old backend: {e}")
            raise MigrationError(
                f"reading '{key}' from old backend: {e}", captured=captured
            ) from e

        # 2. Switch and write
        store._backend = new_backend
        written = self._write_all(store, captured)

        # 3. Remove from the old backend
        try:
            for key in written:
                old_backend.remove(key)
                self._report(len(keys), len(written), key, "remove")
        except Exception as e:
            logger.error(f"Migration failed while removing '{key}' from old backend: {e}")
            raise MigrationError(
                f"removing '{key}' from old backend: {e}",
                captured=captured,
                written_keys=written,
            ) from e

        return written

    def _write_all(self, store: Store, captured: list[tuple[str, Any]]) -> list[str]:
        written: list[str] = []
        try:
            for key, value in captured:
                store.set(key, value)
                written.append(key)
                self._report(len(captured), len(written), key, "write")
        except Exception as e:
            logger.error(f"Migration failed while writing '{key}' to new backend: {e}")
            raise MigrationError(
                f"writing '{key}' to new backend: {e}",
                captured=captured,
                written_keys=written,
            ) from e
        return written

    def _report(self, total: int, migrated: int, key: str, phase: str) -> None:
        if self._on_progress:
            self._on_progress(
                MigrationProgress(
                    total_keys=total,
                    migrated_keys=migrated,
                    current_key=key,
                    phase=phase,
                )
            )
