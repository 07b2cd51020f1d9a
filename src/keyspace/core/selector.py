"""Backend validation and fallback selection.

Each candidate is tested for the required methods and then probed with a
real write, read and remove so that disabled or full backends are rejected
before a store starts using them. Validation failures stay inside the
selector; only an exhausted candidate list is reported to the caller.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from keyspace.exceptions import (
    BackendValidationError,
    MissingCapabilityError,
    NoUsableBackendError,
    ProbeFailureError,
    UnknownBackendError,
)

logger = logging.getLogger(__name__)

PROBE_KEY_PREFIX = "__keyspace_probe__"


def normalize_candidates(candidates: Any) -> list[Any]:
    """Turn a single backend or name into a one-item list."""
    if isinstance(candidates, (list, tuple)):
        return list(candidates)
    return [candidates]


def describe_candidate(candidate: Any) -> str:
    """Short label for logs and error context."""
    if isinstance(candidate, str):
        return candidate
    return type(candidate).__name__


def validate_backend(backend: Any) -> None:
    """Check that ``backend`` is usable.

    Raises:
        MissingCapabilityError: If set/get/remove/clear is missing or not callable
        ProbeFailureError: If writing, reading or removing a probe value raises
    """
    for method_name in MissingCapabilityError.REQUIRED_METHODS:
        if not callable(getattr(backend, method_name, None)):
            raise MissingCapabilityError(method_name, backend)

    probe_key = f"{PROBE_KEY_PREFIX}{time.time_ns()}"
    try:
        backend.set(probe_key, probe_key)
        backend.get(probe_key)
        backend.remove(probe_key)
    except Exception as e:
        raise ProbeFailureError(backend, f"{type(e).__name__}: {e}") from e


class BackendSelector:
    """Picks the first usable backend from an ordered candidate list."""

    def __init__(self, backends: Mapping[str, Any] | None = None) -> None:
        """Initialize the selector.

        Args:
            backends: Name -> backend lookup used for string candidates.
                Defaults to the process-wide default backend map.
        """
        if backends is None:
            from keyspace.backends import get_default_backends

            backends = get_default_backends()
        self._backends = backends

    @property
    def backends(self) -> Mapping[str, Any]:
        return self._backends

    def resolve(self, candidate: Any) -> Any:
        """Resolve a symbolic name to its backend; other candidates pass through.

        Raises:
            UnknownBackendError: If ``candidate`` is a name the map does not know
            ProbeFailureError: If creating the named backend raises
        """
        if not isinstance(candidate, str):
            return candidate
        if candidate not in self._backends:
            raise UnknownBackendError(candidate, sorted(self._backends))
        try:
            return self._backends[candidate]
        except Exception as e:
            raise ProbeFailureError(candidate, f"could not be created: {e}") from e

    def validate(self, backend: Any) -> None:
        validate_backend(backend)

    def select(self, candidates: Any) -> Any:
        """Return the first candidate that passes validation.

        Args:
            candidates: A backend, a backend name, or a list of either

        Returns:
            The selected backend instance

        Raises:
            NoUsableBackendError: If no candidate validates
        """
        rejected: list[dict[str, str]] = []
        for candidate in normalize_candidates(candidates):
            label = describe_candidate(candidate)
            try:
                backend = self.resolve(candidate)
                self.validate(backend)
            except BackendValidationError as e:
                logger.debug(f"Rejected backend candidate {label}: {e.message}")
                rejected.append({"candidate": label, "reason": e.message})
                continue

            logger.info(f"Selected backend {label}")
            return backend

        raise NoUsableBackendError(rejected)


def select_backend(candidates: Any, backends: Mapping[str, Any] | None = None) -> Any:
    """Select a backend with a one-off ``BackendSelector``."""
    return BackendSelector(backends).select(candidates)
