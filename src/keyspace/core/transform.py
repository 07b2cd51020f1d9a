"""Value transformers applied on the way in and out of a backend.

A transformer is any object with ``parse(raw) -> value`` and
``stringify(value) -> raw``. Backends report a missing key as ``None`` and
that marker is handed to ``parse`` unchanged, so every transformer must
accept it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter

from keyspace.exceptions import TransformerCapabilityError

T = TypeVar("T")


@runtime_checkable
class Transformer(Protocol):
    """Parse/stringify capability pair."""

    def parse(self, raw: Any) -> Any: ...

    def stringify(self, value: Any) -> Any: ...


@dataclass(frozen=True)
class PassTransformer:
    """Identity transformer used by default.

    Instances are frozen so the shared default cannot have its methods
    replaced to inspect values as they pass through another store.
    """

    def parse(self, raw: Any) -> Any:
        return raw

    def stringify(self, value: Any) -> Any:
        return value


@dataclass(frozen=True)
class JSONTransformer:
    """Stores values as compact JSON text."""

    def parse(self, raw: str | None) -> Any:
        if raw is None:
            return None
        return json.loads(raw)

    def stringify(self, value: Any) -> str:
        return json.dumps(value, separators=(",", ":"))


@dataclass(frozen=True)
class ModelTransformer(Generic[T]):
    """Validates values against a type with pydantic.

    Values are validated before they are written and again when they are
    read back, so malformed stored data raises ``pydantic.ValidationError``
    at the ``get`` call.

    Example:
        >>> transformer = ModelTransformer(User)
        >>> store = Store("user", {"transformer": transformer})
    """

    type_: Any
    _adapter: TypeAdapter[T] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_adapter", TypeAdapter(self.type_))

    def parse(self, raw: str | bytes | None) -> T | None:
        if raw is None:
            return None
        return self._adapter.validate_json(raw)

    def stringify(self, value: T) -> str:
        validated = self._adapter.validate_python(value)
        return self._adapter.dump_json(validated).decode()


PASS_TRANSFORMER = PassTransformer()
JSON_TRANSFORMER = JSONTransformer()


def validate_transformer(transformer: Any) -> None:
    """Check that ``transformer`` has callable parse and stringify methods.

    Raises:
        TransformerCapabilityError: Naming the first missing method
    """
    for method_name in TransformerCapabilityError.REQUIRED_METHODS:
        if not callable(getattr(transformer, method_name, None)):
            raise TransformerCapabilityError(method_name)
