"""Keyspace - Namespaced, Migratable Key-Value Storage.

A thin layer over pluggable storage backends. Every store declares the keys
it uses and no two stores may declare the same key, so independent
consumers can share a backend without clobbering each other. Backends are
validated before use, fall back left-to-right, and can be switched at
runtime with all values moved across.

Example:
    from keyspace import JSON_TRANSFORMER, Store

    store = Store(
        ["user", "auth"],
        {"backend": ["local", "session"], "transformer": JSON_TRANSFORMER},
    )

    store.set("user", {"id": 10, "name": "Tom"})
    store.get("user")  # {"id": 10, "name": "Tom"}

    # Move every declared key to the in-memory backend
    store.set_backend("session")
"""

from keyspace.backends import Backend, BackendMap, MemoryBackend, SQLBackend, get_default_backends
from keyspace.config import KeyspaceSettings, get_settings
from keyspace.core.registry import KeyRegistry, default_registry, reset_key_registry
from keyspace.core.selector import BackendSelector, select_backend, validate_backend
from keyspace.core.store import Store
from keyspace.core.transform import (
    JSON_TRANSFORMER,
    PASS_TRANSFORMER,
    JSONTransformer,
    ModelTransformer,
    PassTransformer,
    Transformer,
    validate_transformer,
)
from keyspace.core.types import MigrationStrategy, StoreOptions
from keyspace.exceptions import (
    BackendValidationError,
    DuplicateKeyError,
    InvalidKeyTypeError,
    KeyspaceError,
    MigrationError,
    MissingCapabilityError,
    NoUsableBackendError,
    ProbeFailureError,
    TransformerCapabilityError,
    UndeclaredKeyError,
    UnknownBackendError,
)
from keyspace.storage import BackendMigration, MigrationProgress, MigrationResult

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "Store",
    "StoreOptions",
    "KeyRegistry",
    "default_registry",
    "reset_key_registry",
    # Backends
    "Backend",
    "BackendMap",
    "MemoryBackend",
    "SQLBackend",
    "get_default_backends",
    "BackendSelector",
    "select_backend",
    "validate_backend",
    # Transformers
    "Transformer",
    "PassTransformer",
    "JSONTransformer",
    "ModelTransformer",
    "PASS_TRANSFORMER",
    "JSON_TRANSFORMER",
    "validate_transformer",
    # Migration
    "BackendMigration",
    "MigrationStrategy",
    "MigrationProgress",
    "MigrationResult",
    # Configuration
    "KeyspaceSettings",
    "get_settings",
    # Exceptions
    "KeyspaceError",
    "UndeclaredKeyError",
    "DuplicateKeyError",
    "InvalidKeyTypeError",
    "BackendValidationError",
    "MissingCapabilityError",
    "UnknownBackendError",
    "ProbeFailureError",
    "NoUsableBackendError",
    "TransformerCapabilityError",
    "MigrationError",
]
