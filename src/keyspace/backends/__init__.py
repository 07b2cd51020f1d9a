"""Storage backends for Keyspace.

A backend is any object exposing ``set``, ``get``, ``remove`` and ``clear``.
Stores refer to backends either directly or by a symbolic name resolved
through a ``BackendMap``. The default map provides:
- "local": SQLBackend persisted at the configured database URL
- "session": MemoryBackend living as long as the process
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

from keyspace.backends.memory import MemoryBackend
from keyspace.backends.sql import SQLBackend
from keyspace.config import get_settings


@runtime_checkable
class Backend(Protocol):
    """Capability contract every backend satisfies."""

    def set(self, key: str, raw_value: Any) -> None: ...

    def get(self, key: str) -> Any | None: ...

    def remove(self, key: str) -> Any: ...

    def clear(self) -> None: ...


BackendFactory = Callable[[], Any]


class BackendMap(Mapping[str, Any]):
    """Named backend lookup.

    Entries are either backend instances or zero-argument factories; a
    factory is called once, on first lookup, and its result is reused.
    """

    def __init__(
        self,
        backends: Mapping[str, Any] | None = None,
        factories: Mapping[str, BackendFactory] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._backends: dict[str, Any] = dict(backends or {})
        self._factories: dict[str, BackendFactory] = dict(factories or {})

    def register(self, name: str, backend: Any) -> None:
        """Register a backend instance under ``name``, replacing any previous one."""
        with self._lock:
            self._factories.pop(name, None)
            self._backends[name] = backend

    def register_factory(self, name: str, factory: BackendFactory) -> None:
        """Register a lazily created backend under ``name``."""
        if not callable(factory):
            raise ValueError(f"Backend factory for '{name}' must be callable")
        with self._lock:
            self._backends.pop(name, None)
            self._factories[name] = factory

    def __getitem__(self, name: str) -> Any:
        with self._lock:
            if name not in self._backends and name in self._factories:
                self._backends[name] = self._factories[name]()
                del self._factories[name]
            return self._backends[name]

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._backends or name in self._factories

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._backends) + list(self._factories))

    def __len__(self) -> int:
        with self._lock:
            return len(self._backends) + len(self._factories)


def _local_backend() -> SQLBackend:
    settings = get_settings()
    return SQLBackend(settings.database_url, echo=settings.sql_echo)


_default_backends: BackendMap | None = None
_default_lock = threading.Lock()


def get_default_backends() -> BackendMap:
    """Get the process-wide default backend map, creating it on first use."""
    global _default_backends
    with _default_lock:
        if _default_backends is None:
            _default_backends = BackendMap(
                factories={"local": _local_backend, "session": MemoryBackend}
            )
        return _default_backends


__all__ = [
    "Backend",
    "BackendMap",
    "MemoryBackend",
    "SQLBackend",
    "get_default_backends",
]
