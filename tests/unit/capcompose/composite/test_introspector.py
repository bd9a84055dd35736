"""Tests for capability introspection."""

from __future__ import annotations

import abc
import inspect
from typing import Any, Protocol, TypeVar

import pytest

from capcompose.composite.introspector import describe_capability, introspect
from capcompose.composite.types import MethodOrder
from capcompose.errors import InvalidCapabilityError

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class Greeter(Protocol):
    def greet(self, name: str) -> str:
        """Return a greeting for *name*."""
        ...


class Storage(Protocol):
    def put(self, key: str, value: bytes, *, overwrite: bool = False) -> None: ...

    def get(self, key: str) -> bytes: ...

    def delete(self, key: str) -> bool: ...


class NamedStorage(Storage, Protocol):
    def name(self) -> str: ...


class Untyped(Protocol):
    def handle(self, payload): ...


class Clock(abc.ABC):
    @abc.abstractmethod
    def now(self) -> float: ...

    @abc.abstractmethod
    def sleep(self, seconds: float) -> None: ...


class HalfAbstract(abc.ABC):
    @abc.abstractmethod
    def run(self) -> None: ...

    def helper(self) -> int:
        return 1


class PlainClass:
    def run(self) -> None:
        pass


class WithProperty(Protocol):
    @property
    def size(self) -> int: ...


class WithStatic(abc.ABC):
    @staticmethod
    @abc.abstractmethod
    def make() -> int: ...


class GenericBox(Protocol[T]):
    def unwrap(self) -> T: ...


class GenericParam(Protocol):
    def accept(self, item: T) -> None: ...


class GenericContainer(Protocol):
    def items(self) -> list[T]: ...


class PrivateHelpers(Protocol):
    def visible(self) -> int: ...

    def _hidden(self) -> int: ...


class Empty(Protocol):
    pass


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestIntrospect:
    def test_single_method(self):
        (sig,) = introspect(Greeter)
        assert sig.name == "greet"
        assert sig.parameter_types == (str,)
        assert sig.return_type is str
        assert sig.doc == "Return a greeting for *name*."

    def test_declaration_order(self):
        names = [s.name for s in introspect(Storage)]
        assert names == ["put", "get", "delete"]

    def test_sorted_order(self):
        names = [s.name for s in introspect(Storage, MethodOrder.SORTED)]
        assert names == ["delete", "get", "put"]

    def test_sorted_order_accepts_string(self):
        names = [s.name for s in introspect(Storage, "sorted")]
        assert names == ["delete", "get", "put"]

    def test_inherited_methods_come_first(self):
        names = [s.name for s in introspect(NamedStorage)]
        assert names == ["put", "get", "delete", "name"]

    def test_parameters_exclude_self(self):
        put = introspect(Storage)[0]
        assert [p.name for p in put.parameters] == ["key", "value", "overwrite"]
        assert put.parameters[2].kind == "KEYWORD_ONLY"
        assert put.parameters[2].has_default is True
        assert "self" not in put.signature.parameters

    def test_missing_annotations_are_any(self):
        (sig,) = introspect(Untyped)
        assert sig.parameter_types == (Any,)
        assert sig.return_type is Any

    def test_resolves_string_annotations(self):
        # module uses postponed evaluation, so raw annotations are strings
        (sig,) = introspect(Greeter)
        assert sig.signature.parameters["name"].annotation is str
        assert sig.signature.return_annotation is str

    def test_locally_scoped_annotation_kept_unresolved(self):
        class Point:
            pass

        class Mover(Protocol):
            def move(self, p: Point, steps: int) -> Point: ...

        (sig,) = introspect(Mover)
        assert sig.parameter_types == ("Point", int)
        assert sig.return_type == "Point"

    def test_typevar_rejected_next_to_unresolved_name(self):
        class Point:
            pass

        class Mover(Protocol):
            def move(self, p: Point, other: T) -> None: ...

        with pytest.raises(InvalidCapabilityError, match="generic parameter 'other'"):
            introspect(Mover)

    def test_abstract_base_class(self):
        names = [s.name for s in introspect(Clock)]
        assert names == ["now", "sleep"]

    def test_private_methods_ignored(self):
        assert [s.name for s in introspect(PrivateHelpers)] == ["visible"]

    def test_empty_capability(self):
        assert introspect(Empty) == ()

    def test_describe(self):
        (sig,) = introspect(Greeter)
        assert sig.describe() == "greet(name: str) -> str"


class TestInvalidCapabilities:
    def test_not_a_class(self):
        with pytest.raises(InvalidCapabilityError, match="not a class"):
            introspect("Greeter")  # type: ignore[arg-type]

    def test_plain_class_rejected(self):
        with pytest.raises(InvalidCapabilityError, match="Protocol or an abc.ABC"):
            introspect(PlainClass)

    def test_concrete_method_rejected(self):
        with pytest.raises(InvalidCapabilityError, match="helper"):
            introspect(HalfAbstract)

    def test_property_rejected(self):
        with pytest.raises(InvalidCapabilityError, match="not an instance method"):
            introspect(WithProperty)

    def test_staticmethod_rejected(self):
        with pytest.raises(InvalidCapabilityError, match="not an instance method"):
            introspect(WithStatic)

    def test_generic_return_rejected(self):
        with pytest.raises(InvalidCapabilityError, match="generic return"):
            introspect(GenericBox)

    def test_generic_parameter_rejected(self):
        with pytest.raises(InvalidCapabilityError, match="generic parameter"):
            introspect(GenericParam)

    def test_nested_typevar_rejected(self):
        with pytest.raises(InvalidCapabilityError):
            introspect(GenericContainer)

    def test_error_is_type_error(self):
        with pytest.raises(TypeError):
            introspect(PlainClass)

    def test_error_carries_capability(self):
        with pytest.raises(InvalidCapabilityError) as exc_info:
            introspect(PlainClass)
        assert exc_info.value.capability is PlainClass


class TestDescribeCapability:
    def test_protocol_is_structural(self):
        spec = describe_capability(Greeter)
        assert spec.capability is Greeter
        assert spec.display_name == "Greeter"
        assert spec.structural is True
        assert len(spec.methods) == 1

    def test_abc_is_nominal(self):
        spec = describe_capability(Clock)
        assert spec.structural is False

    def test_spec_is_immutable(self):
        spec = describe_capability(Greeter)
        with pytest.raises(Exception):
            spec.display_name = "Other"  # type: ignore[misc]

    def test_signature_round_trips_through_inspect(self):
        (sig,) = introspect(Greeter)
        assert isinstance(sig.signature, inspect.Signature)
        sig.signature.bind("Sam")
