"""Tests for value transformers."""

from dataclasses import FrozenInstanceError
from typing import Any

import pytest
from pydantic import BaseModel, ValidationError

from keyspace import (
    JSON_TRANSFORMER,
    PASS_TRANSFORMER,
    ModelTransformer,
    Store,
    Transformer,
    TransformerCapabilityError,
    validate_transformer,
)


class IntegerTransformer:
    """Stores values as integer strings."""

    def parse(self, raw: Any) -> int | None:
        return None if raw is None else int(raw)

    def stringify(self, value: Any) -> str:
        return str(int(float(value)))


class User(BaseModel):
    id: int
    name: str


class TestPassTransformer:
    """Tests for the default identity transformer."""

    def test_identity(self):
        """Values pass through untouched."""
        value = {"a": 10}
        assert PASS_TRANSFORMER.parse(value) is value
        assert PASS_TRANSFORMER.stringify(value) is value
        assert PASS_TRANSFORMER.parse(None) is None

    def test_methods_cannot_be_overwritten(self):
        """The shared default cannot be hijacked to intercept values."""
        with pytest.raises(FrozenInstanceError):
            PASS_TRANSFORMER.stringify = lambda v: "ANOTHER THING"  # type: ignore[method-assign]

        assert PASS_TRANSFORMER.stringify("THING") == "THING"

    def test_satisfies_protocol(self):
        """Built-in transformers match the Transformer protocol."""
        assert isinstance(PASS_TRANSFORMER, Transformer)
        assert isinstance(JSON_TRANSFORMER, Transformer)


class TestJSONTransformer:
    """Tests for the JSON transformer."""

    def test_stringify_is_compact(self):
        """Output matches the compact JSON form."""
        assert JSON_TRANSFORMER.stringify({"a": 10}) == '{"a":10}'

    def test_parse(self):
        """JSON text is decoded."""
        assert JSON_TRANSFORMER.parse('{ "a": 10 }') == {"a": 10}

    def test_parse_absent_value(self):
        """The absent marker parses to None."""
        assert JSON_TRANSFORMER.parse(None) is None

    def test_malformed_input_raises(self):
        """Malformed stored data is reported, not hidden."""
        with pytest.raises(ValueError):
            JSON_TRANSFORMER.parse("{not json")


class TestModelTransformer:
    """Tests for the pydantic-backed transformer."""

    def test_round_trip(self):
        """A model instance comes back equal."""
        transformer = ModelTransformer(User)
        raw = transformer.stringify(User(id=10, name="Tom"))

        assert isinstance(raw, str)
        assert transformer.parse(raw) == User(id=10, name="Tom")

    def test_stringify_accepts_dict(self):
        """Dicts are validated into the model before storing."""
        transformer = ModelTransformer(User)
        raw = transformer.stringify({"id": 10, "name": "Tom"})
        assert transformer.parse(raw) == User(id=10, name="Tom")

    def test_invalid_value_raises(self):
        """Values that don't fit the type are rejected on the way in."""
        transformer = ModelTransformer(User)
        with pytest.raises(ValidationError):
            transformer.stringify({"id": "not-a-number"})

    def test_plain_types(self):
        """Any pydantic-supported type works."""
        transformer = ModelTransformer(list[int])
        assert transformer.parse(transformer.stringify([1, 2, 3])) == [1, 2, 3]
        assert transformer.parse(None) is None


class TestValidateTransformer:
    """Tests for validate_transformer."""

    def test_accepts_custom_transformer(self):
        """Objects with parse and stringify are accepted."""
        validate_transformer(IntegerTransformer())

    def test_missing_parse(self):
        """A transformer without parse is rejected."""

        class NoParse:
            def stringify(self, value: Any) -> Any:
                return value

        with pytest.raises(TransformerCapabilityError, match='"parse"'):
            validate_transformer(NoParse())

    def test_missing_stringify(self):
        """A transformer without stringify is rejected."""

        class NoStringify:
            def parse(self, raw: Any) -> Any:
                return raw

        with pytest.raises(TransformerCapabilityError, match='"stringify"'):
            validate_transformer(NoStringify())

    def test_non_callable_method(self):
        """Attributes that aren't callable don't count."""

        class NotCallable:
            parse = "nope"
            stringify = "nope"

        with pytest.raises(TransformerCapabilityError):
            validate_transformer(NotCallable())

    def test_error_is_type_error(self):
        """TransformerCapabilityError is also a TypeError."""
        with pytest.raises(TypeError):
            validate_transformer(object())


class TestStoreTransformers:
    """Transformers wired through a Store."""

    def test_json_parse(self, backends, session_backend):
        """Stored JSON is decoded on get."""
        store = Store(
            "example",
            {"transformer": JSON_TRANSFORMER, "backend": "session", "backends": backends},
        )
        session_backend.set("example", '{ "a": 10 }')
        assert store.get("example") == {"a": 10}

    def test_json_stringify(self, backends, session_backend):
        """Values are encoded on set."""
        store = Store(
            "example",
            {"transformer": JSON_TRANSFORMER, "backend": "session", "backends": backends},
        )
        store.set("example", {"a": 10})
        assert session_backend.get("example") == '{"a":10}'

    def test_custom_parse(self, backends, session_backend):
        """Custom transformers decode on get."""
        store = Store(
            "example",
            {"transformer": IntegerTransformer(), "backend": "session", "backends": backends},
        )
        session_backend.set("example", "10")
        assert store.get("example") == 10

    def test_custom_stringify(self, backends, session_backend):
        """Custom transformers encode on set; set returns the original value."""
        store = Store(
            "example",
            {"transformer": IntegerTransformer(), "backend": "session", "backends": backends},
        )
        assert store.set("example", "10.233242") == "10.233242"
        assert session_backend.get("example") == "10"

    def test_transformer_errors_propagate(self, backends, session_backend):
        """Malformed stored data surfaces from get unchanged."""
        store = Store(
            "example",
            {"transformer": IntegerTransformer(), "backend": "session", "backends": backends},
        )
        session_backend.set("example", "ten")
        with pytest.raises(ValueError):
            store.get("example")

    def test_invalid_transformer_rejected_at_construction(self, backends):
        """A store cannot be built with an incomplete transformer."""
        with pytest.raises(TransformerCapabilityError):
            Store("example", {"transformer": object(), "backends": backends})

        # The failed store released its keys
        Store("example", {"backends": backends})
