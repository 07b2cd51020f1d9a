"""Custom exceptions for Keyspace.

All exceptions are designed to be loud and actionable:
- Messages tell what went wrong AND how to fix it
- Include context about available options when relevant
"""

from __future__ import annotations

from typing import Any


class KeyspaceError(Exception):
    """Base exception for all Keyspace errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


# === Key Ownership Errors ===


class UndeclaredKeyError(KeyspaceError):
    """Operation on a key the store has not declared."""

    def __init__(self, key: str, operation: str, declared_keys: list[str] | None = None) -> None:
        declared = declared_keys or []
        message = f"Attempting to {operation} undeclared key: {key}."
        if declared:
            message += f" Declared keys: {', '.join(declared)}"
        else:
            message += " This store has not declared any keys."

        super().__init__(
            message, {"key": key, "operation": operation, "declared_keys": declared}
        )
        self.key = key
        self.operation = operation
        self.declared_keys = declared


class DuplicateKeyError(KeyspaceError):
    """Key is already owned by another store."""

    def __init__(self, key: str) -> None:
        message = (
            f"Attempting to declare already declared key: {key}. "
            "Another store owns it; re-declare that store's keys to release it first."
        )
        super().__init__(message, {"key": key})
        self.key = key


class InvalidKeyTypeError(KeyspaceError, TypeError):
    """Declared key is not a string."""

    def __init__(self, key: Any) -> None:
        message = f"All keys must be strings, got {type(key).__name__}: {key!r}"
        super().__init__(message, {"key": repr(key), "key_type": type(key).__name__})
        self.key = key


# === Backend Errors ===


class BackendValidationError(KeyspaceError):
    """A backend candidate failed validation.

    Raised while testing candidates and caught by the selector, which moves
    on to the next candidate.
    """

    pass


class MissingCapabilityError(BackendValidationError):
    """Backend does not expose a required method."""

    REQUIRED_METHODS = ["set", "get", "remove", "clear"]

    def __init__(self, method_name: str, backend: Any = None) -> None:
        message = (
            f'Backend missing method, "{method_name}". '
            f"Backends must implement: {', '.join(self.REQUIRED_METHODS)}"
        )
        super().__init__(
            message,
            {
                "method_name": method_name,
                "backend": type(backend).__name__,
                "required_methods": self.REQUIRED_METHODS,
            },
        )
        self.method_name = method_name


class UnknownBackendError(BackendValidationError):
    """Backend name is not in the backend map."""

    def __init__(self, name: str, available_names: list[str] | None = None) -> None:
        available = available_names or []
        if available:
            message = f"Unknown backend name '{name}'. Available names: {', '.join(available)}"
        else:
            message = f"Unknown backend name '{name}'. No named backends are registered."
        super().__init__(message, {"name": name, "available_names": available})
        self.name = name
        self.available_names = available


class ProbeFailureError(BackendValidationError):
    """Backend raised while a probe value was written, read or removed."""

    def __init__(self, backend: Any, reason: str) -> None:
        label = backend if isinstance(backend, str) else type(backend).__name__
        message = f"Backend {label} failed its storage probe: {reason}"
        super().__init__(message, {"backend": label, "reason": reason})
        self.reason = reason


class NoUsableBackendError(KeyspaceError, TypeError):
    """Every backend candidate failed validation."""

    def __init__(self, rejected: list[dict[str, str]] | None = None) -> None:
        rejected = rejected or []
        message = "No usable backends could be found."
        if rejected:
            reasons = "; ".join(f"{r['candidate']}: {r['reason']}" for r in rejected)
            message += f" Rejected: {reasons}"
        else:
            message += " No candidates were supplied."
        super().__init__(message, {"rejected": rejected})
        self.rejected = rejected


# === Transformer Errors ===


class TransformerCapabilityError(KeyspaceError, TypeError):
    """Transformer does not expose parse/stringify."""

    REQUIRED_METHODS = ["parse", "stringify"]

    def __init__(self, method_name: str) -> None:
        message = (
            f'Transformer missing method, "{method_name}". '
            f"Transformers must implement: {', '.join(self.REQUIRED_METHODS)}"
        )
        super().__init__(
            message, {"method_name": method_name, "required_methods": self.REQUIRED_METHODS}
        )
        self.method_name = method_name


# === Migration Errors ===


class MigrationError(KeyspaceError):
    """Backend switch failed part way through moving values."""

    def __init__(
        self,
        reason: str,
        captured: list[tuple[str, Any]] | None = None,
        written_keys: list[str] | None = None,
    ) -> None:
        captured = captured or []
        written = written_keys or []
        captured_keys = [key for key, _ in captured]
        message = f"Backend migration failed: {reason}"
        if captured_keys:
            message += (
                f". Values for {', '.join(captured_keys)} were read before the failure; "
                "recover them from error.captured."
            )
        super().__init__(
            message,
            {"reason": reason, "captured_keys": captured_keys, "written_keys": written},
        )
        self.reason = reason
        self.captured = captured
        self.written_keys = written
