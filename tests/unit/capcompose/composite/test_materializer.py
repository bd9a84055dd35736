"""Tests for type materialization and dispatch stubs."""

from __future__ import annotations

import abc
import inspect
from typing import Protocol

import pytest

from capcompose.composite.materializer import (
    GENERATED_MODULE,
    composite_method_names,
    materialize,
)
from capcompose.composite.synthesizer import synthesize
from capcompose.errors import InvalidBaseTypeError


class Greeter(Protocol):
    def greet(self, name: str, punctuation: str = "!") -> str:
        """Greet someone."""
        ...


class Counter(Protocol):
    def increment(self) -> int: ...


class Failing(abc.ABC):
    @abc.abstractmethod
    def explode(self, reason: str) -> None: ...


class SimpleGreeter:
    def greet(self, name: str, punctuation: str = "!") -> str:
        return f"Hello, {name}{punctuation}"


class SimpleCounter:
    def __init__(self) -> None:
        self.count = 0

    def increment(self) -> int:
        self.count += 1
        return self.count


class BoomError(RuntimeError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class Exploder(Failing):
    def explode(self, reason: str) -> None:
        raise BoomError(reason)


class Recorder:
    """Records every call it receives."""

    def __init__(self) -> None:
        self.calls = []

    def greet(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return self.calls


class Base:
    def __init__(self) -> None:
        self.initialised = True

    def describe(self) -> str:
        return "base"


class NeedsArgs:
    def __init__(self, value: int) -> None:
        self.value = value


@pytest.fixture
def shape():
    return synthesize([Greeter, Counter], "__test")


class TestInterface:
    def test_interface_name_and_module(self, shape):
        _, interface = materialize(shape)
        assert interface.__name__ == "I__test"
        assert interface.__module__ == GENERATED_MODULE

    def test_interface_methods_are_abstract(self, shape):
        _, interface = materialize(shape)
        assert getattr(interface.Greeter_greet, "__isabstractmethod__", False)
        assert getattr(interface.Counter_increment, "__isabstractmethod__", False)

    def test_interface_exposes_synthesized_names(self, shape):
        _, interface = materialize(shape)
        assert composite_method_names(interface) == (
            "Greeter_greet",
            "Counter_increment",
        )

    def test_interface_is_structural(self, shape):
        _, interface = materialize(shape)

        class Anything:
            def Greeter_greet(self, name, punctuation="!"):
                return name

            def Counter_increment(self):
                return 0

        assert isinstance(Anything(), interface)
        assert not isinstance(SimpleGreeter(), interface)

    def test_interface_signature(self, shape):
        _, interface = materialize(shape)
        sig = inspect.signature(interface.Greeter_greet)
        assert list(sig.parameters) == ["self", "name", "punctuation"]
        assert sig.return_annotation is str


class TestCompositeType:
    def test_type_name(self, shape):
        composite_type, _ = materialize(shape)
        assert composite_type.__name__ == "__testClass"
        assert composite_type.__module__ == GENERATED_MODULE

    def test_implements_interface(self, shape):
        composite_type, interface = materialize(shape)
        assert issubclass(composite_type, interface)
        instance = composite_type({Greeter: SimpleGreeter(), Counter: SimpleCounter()})
        assert isinstance(instance, interface)

    def test_one_slot_per_capability(self, shape):
        composite_type, _ = materialize(shape)
        assert composite_type.__slots__ == ("_slot_0", "_slot_1")
        assert composite_type.__annotations__ == {
            "_slot_0": Greeter,
            "_slot_1": Counter,
        }

    def test_shape_attached(self, shape):
        composite_type, _ = materialize(shape)
        assert composite_type.__composite_shape__ is shape
        assert composite_method_names(composite_type) == shape.method_names()

    def test_stub_metadata(self, shape):
        composite_type, _ = materialize(shape)
        stub = composite_type.Greeter_greet
        assert stub.__name__ == "Greeter_greet"
        assert stub.__qualname__ == "__testClass.Greeter_greet"
        assert stub.__doc__ == "Greet someone."
        assert list(inspect.signature(stub).parameters) == [
            "self",
            "name",
            "punctuation",
        ]

    def test_fresh_types_per_materialization(self, shape):
        first, first_iface = materialize(shape)
        second, second_iface = materialize(shape)
        assert first is not second
        assert first_iface is not second_iface

    def test_repr(self, shape):
        composite_type, _ = materialize(shape)
        instance = composite_type({Greeter: SimpleGreeter(), Counter: SimpleCounter()})
        assert repr(instance) == "<__testClass composite of [Greeter, Counter]>"


class TestDispatch:
    def test_forwards_positional_and_keyword(self):
        composite_type, _ = materialize(synthesize([Greeter], "__d"))
        instance = composite_type({Greeter: SimpleGreeter()})
        assert instance.Greeter_greet("Sam") == "Hello, Sam!"
        assert instance.Greeter_greet("Sam", "?") == "Hello, Sam?"
        assert instance.Greeter_greet("Sam", punctuation=".") == "Hello, Sam."

    def test_arguments_are_unmodified(self):
        composite_type, _ = materialize(synthesize([Greeter], "__d"))
        recorder = Recorder()
        instance = composite_type({Greeter: recorder})
        payload = {"nested": [1, 2]}
        instance.Greeter_greet(payload, punctuation=None)
        (args, kwargs) = recorder.calls[0]
        assert args[0] is payload
        assert kwargs == {"punctuation": None}

    def test_return_value_is_unmodified(self):
        composite_type, _ = materialize(synthesize([Greeter], "__d"))
        recorder = Recorder()
        instance = composite_type({Greeter: recorder})
        assert instance.Greeter_greet("x") is recorder.calls

    def test_side_effects_reach_delegate(self, shape):
        composite_type, _ = materialize(shape)
        counter = SimpleCounter()
        instance = composite_type({Greeter: SimpleGreeter(), Counter: counter})
        assert instance.Counter_increment() == 1
        assert instance.Counter_increment() == 2
        assert counter.count == 2

    def test_delegate_exception_propagates_unchanged(self):
        composite_type, _ = materialize(synthesize([Failing], "__d"))
        instance = composite_type({Failing: Exploder()})
        with pytest.raises(BoomError) as exc_info:
            instance.Failing_explode("kaboom")
        assert exc_info.value.reason == "kaboom"
        assert type(exc_info.value) is BoomError

    def test_lookup_by_synthesized_name(self, shape):
        composite_type, _ = materialize(shape)
        instance = composite_type({Greeter: SimpleGreeter(), Counter: SimpleCounter()})
        assert getattr(instance, "Greeter_greet")("Ada") == "Hello, Ada!"


class TestBaseType:
    def test_extends_base_type(self, shape):
        composite_type, interface = materialize(shape, Base)
        assert issubclass(composite_type, Base)
        instance = composite_type({Greeter: SimpleGreeter(), Counter: SimpleCounter()})
        assert instance.initialised is True
        assert instance.describe() == "base"
        assert isinstance(instance, interface)

    def test_not_a_class(self, shape):
        with pytest.raises(InvalidBaseTypeError, match="not a class"):
            materialize(shape, "object")  # type: ignore[arg-type]

    def test_final_class_rejected(self, shape):
        with pytest.raises(InvalidBaseTypeError):
            materialize(shape, bool)

    def test_layout_conflict_rejected(self, shape):
        with pytest.raises(InvalidBaseTypeError):
            materialize(shape, int)

    def test_base_requiring_arguments_fails_at_construction(self, shape):
        composite_type, _ = materialize(shape, NeedsArgs)
        with pytest.raises(TypeError):
            composite_type({Greeter: SimpleGreeter(), Counter: SimpleCounter()})
