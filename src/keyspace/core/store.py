"""The Store: namespaced access to a pluggable backend.

A Store declares the keys it may use. Keys are owned globally, so two
stores can never read or overwrite each other's data. Values pass through
a transformer on their way in and out of the backend, and the backend can
be switched at runtime without losing data.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import uuid4

from keyspace.config import get_settings
from keyspace.core.registry import KeyRegistry, default_registry
from keyspace.core.selector import BackendSelector
from keyspace.core.transform import PASS_TRANSFORMER, validate_transformer
from keyspace.core.types import StoreOptions
from keyspace.exceptions import (
    DuplicateKeyError,
    InvalidKeyTypeError,
    KeyspaceError,
    UndeclaredKeyError,
)
from keyspace.storage.migration import BackendMigration, MigrationResult, ProgressCallback

logger = logging.getLogger(__name__)


def normalize_keys(keys: str | Iterable[str] | None) -> list[str]:
    """Turn a single key or iterable of keys into a deduplicated list.

    First-occurrence order is preserved.

    Raises:
        InvalidKeyTypeError: If any key is not a string
    """
    if keys is None:
        return []
    if isinstance(keys, str) or not isinstance(keys, Iterable):
        keys = [keys]  # type: ignore[list-item]

    ordered: dict[str, None] = {}
    for key in keys:
        if not isinstance(key, str):
            raise InvalidKeyTypeError(key)
        ordered.setdefault(key, None)
    return list(ordered)


class Store:
    """Key-value store limited to its declared keys.

    Example:
        >>> store = Store(["user", "auth"], {"backend": ["local", "session"]})
        >>> store.set("user", {"id": 10, "name": "Tom"})
        {'id': 10, 'name': 'Tom'}
        >>> store.get("user")
        {'id': 10, 'name': 'Tom'}
    """

    def __init__(
        self,
        keys: str | Iterable[str] | None = None,
        options: StoreOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Create a store.

        Args:
            keys: Key or keys this store may access
            options: StoreOptions or dict with ``transformer``, ``backend``,
                ``backends``, ``registry`` and ``migration_strategy``

        Raises:
            InvalidKeyTypeError: If a key is not a string
            DuplicateKeyError: If another store owns one of the keys
            TransformerCapabilityError: If the transformer lacks parse/stringify
            NoUsableBackendError: If no backend candidate works
        """
        if options is None:
            options = StoreOptions()
        elif not isinstance(options, StoreOptions):
            options = StoreOptions(**options)

        self._owner = uuid4().hex
        self._registry: KeyRegistry = (
            options.registry if options.registry is not None else default_registry
        )
        self._key_map: dict[str, str] = {}
        self._backend: Any = None
        self._selector = BackendSelector(options.backends)
        self._migration_strategy = options.migration_strategy
        self.last_migration: MigrationResult | None = None

        self.declare_keys(keys)

        try:
            transformer = options.transformer
            if transformer is None:
                transformer = PASS_TRANSFORMER
            validate_transformer(transformer)
            self._transformer = transformer

            backend = options.backend
            if backend is None:
                backend = [get_settings().default_backend]
            self.set_backend(backend)
        except KeyspaceError:
            # Don't keep keys claimed by a store that was never usable
            self._registry.release(self._key_map)
            self._key_map = {}
            raise

    # === Keys ===

    @property
    def keys(self) -> tuple[str, ...]:
        """Declared keys, in declaration order."""
        return tuple(self._key_map)

    @property
    def registry(self) -> KeyRegistry:
        return self._registry

    def declare_keys(self, keys: str | Iterable[str] | None) -> tuple[str, ...]:
        """Declare the set of keys this store can access.

        Keys owned previously but missing from ``keys`` are released.
        Re-declaring a key this store already owns is a no-op. Nothing
        changes if any key is invalid or owned by another store.

        Args:
            keys: Single key or iterable of keys

        Returns:
            The resulting keys

        Raises:
            InvalidKeyTypeError: If a key is not a string
            DuplicateKeyError: If another store owns one of the keys
        """
        new_keys = normalize_keys(keys)

        with self._registry.lock:
            for key in new_keys:
                owner = self._registry.owner_of(key)
                if owner is not None and owner != self._owner:
                    raise DuplicateKeyError(key)

            stale = [key for key in self._key_map if key not in new_keys]
            self._registry.release(stale)
            for key in new_keys:
                self._registry.declare(key, self._owner)

        self._key_map = {key: key for key in new_keys}
        logger.debug(f"Store {self._owner[:8]} declared keys: {', '.join(new_keys) or '(none)'}")
        return self.keys

    def has_declared(self, key: str) -> bool:
        """Check whether this store may access ``key``."""
        return isinstance(key, str) and key in self._key_map

    def can_declare(self, key: str) -> bool:
        """Check whether ``key`` is free for this store to declare."""
        owner = self._registry.owner_of(key)
        return owner is None or owner == self._owner

    def _require_declared(self, key: str, operation: str) -> None:
        if not self.has_declared(key):
            raise UndeclaredKeyError(key, operation, list(self._key_map))

    # === Values ===

    def get(self, key: str) -> Any:
        """Get the value at ``key``, parsed by the transformer.

        A missing value is passed to the transformer as None.

        Raises:
            UndeclaredKeyError: If the key was not declared
        """
        self._require_declared(key, "get")
        return self._transformer.parse(self._backend.get(key))

    def set(self, key: str, value: Any) -> Any:
        """Store ``value`` at ``key`` after passing it through the transformer.

        Returns:
            The value as supplied, not its stored form

        Raises:
            UndeclaredKeyError: If the key was not declared
        """
        self._require_declared(key, "set")
        self._backend.set(key, self._transformer.stringify(value))
        return value

    def remove(self, key: str) -> Any:
        """Remove the value at ``key``.

        Returns:
            Whatever the backend's remove returns

        Raises:
            UndeclaredKeyError: If the key was not declared
        """
        self._require_declared(key, "remove")
        return self._backend.remove(key)

    # === Backend & transformer ===

    @property
    def backend(self) -> Any:
        return self._backend

    @property
    def transformer(self) -> Any:
        return self._transformer

    def set_backend(
        self,
        backends: Any,
        on_progress: ProgressCallback | None = None,
    ) -> Any:
        """Pick a usable backend, moving existing values into it.

        Candidates are tried left to right and the first that passes
        validation is used. When switching away from an existing backend,
        every declared key is moved to the new one. Selecting the backend
        that is already active moves nothing.

        Args:
            backends: Backend, backend name, or list of either
            on_progress: Optional migration progress callback

        Returns:
            The new backend

        Raises:
            NoUsableBackendError: If no candidate works; nothing is changed
            MigrationError: If moving values fails part way
        """
        new_backend = self._selector.select(backends)

        if self._backend is None:
            self._backend = new_backend
            return self._backend

        migration = BackendMigration(self._migration_strategy, on_progress=on_progress)
        self.last_migration = migration.migrate(self, new_backend)
        return self._backend

    def __repr__(self) -> str:
        return f"Store(keys={list(self.keys)!r}, backend={self._backend!r})"
