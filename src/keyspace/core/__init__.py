"""Core components for Keyspace."""

from keyspace.core.registry import KeyRegistry, default_registry, reset_key_registry
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
from keyspace.core.selector import BackendSelector, select_backend, validate_backend
from keyspace.core.store import Store

__all__ = [
    "KeyRegistry",
    "default_registry",
    "reset_key_registry",
    "Transformer",
    "PassTransformer",
    "JSONTransformer",
    "ModelTransformer",
    "PASS_TRANSFORMER",
    "JSON_TRANSFORMER",
    "validate_transformer",
    "MigrationStrategy",
    "StoreOptions",
    "BackendSelector",
    "select_backend",
    "validate_backend",
    "Store",
]
