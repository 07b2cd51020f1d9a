"""In-process dictionary backend.

Values live for the lifetime of the process, which makes this the
``"session"`` backend of the default backend map.
"""

from __future__ import annotations

import threading
from typing import Any


class MemoryBackend:
    """Dictionary-backed storage."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._lock = threading.RLock()
        self._items: dict[str, Any] = dict(initial or {})

    def set(self, key: str, raw_value: Any) -> None:
        with self._lock:
            self._items[key] = raw_value

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._items.get(key)

    def remove(self, key: str) -> bool:
        """Remove ``key``. Returns True if a value was stored."""
        with self._lock:
            return self._items.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __repr__(self) -> str:
        return f"MemoryBackend(items={len(self)})"
