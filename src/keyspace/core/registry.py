"""Process-wide key ownership registry.

Tracks which store currently owns each key name so that independent stores
can never read or overwrite each other's data.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from keyspace.exceptions import DuplicateKeyError

logger = logging.getLogger(__name__)


class KeyRegistry:
    """Maps key names to the owner token of the store that declared them.

    All reads and writes go through ``lock``. Callers that need several
    operations to be atomic (a store re-declaring its keys) hold the lock
    across them; it is re-entrant.
    """

    def __init__(self) -> None:
        self._owners: dict[str, str] = {}
        self.lock = threading.RLock()

    def can_declare(self, key: str) -> bool:
        """Check whether no store currently owns ``key``."""
        with self.lock:
            return key not in self._owners

    def owner_of(self, key: str) -> str | None:
        """Get the owner token for ``key``, or None if unowned."""
        with self.lock:
            return self._owners.get(key)

    def declare(self, key: str, owner: str) -> None:
        """Claim ``key`` for ``owner``.

        Claiming a key the owner already holds is a no-op.

        Raises:
            DuplicateKeyError: If a different owner holds the key
        """
        with self.lock:
            current = self._owners.get(key)
            if current is not None and current != owner:
                raise DuplicateKeyError(key)
            self._owners[key] = owner

    def release(self, keys: Iterable[str]) -> None:
        """Unconditionally forget ``keys``."""
        with self.lock:
            for key in keys:
                self._owners.pop(key, None)

    def reset(self) -> None:
        """Forget every key.

        **Do not use this in production.** Any live store keeps working but
        its keys can then be claimed by another store.
        """
        with self.lock:
            count = len(self._owners)
            self._owners.clear()
        logger.warning(f"Key registry reset, {count} keys released")

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the key -> owner mapping."""
        with self.lock:
            return dict(self._owners)

    def __contains__(self, key: object) -> bool:
        with self.lock:
            return key in self._owners

    def __len__(self) -> int:
        with self.lock:
            return len(self._owners)


default_registry = KeyRegistry()


def reset_key_registry() -> None:
    """Clear the process-wide registry. **Do not use this in production.**"""
    default_registry.reset()
