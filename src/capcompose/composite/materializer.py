"""
Type materialization.

Turns a ``CompositeShape`` into two classes:

- the **composite interface**, a ``runtime_checkable`` Protocol named
  ``I{component}`` declaring every synthesized method abstractly, so
  ``isinstance(obj, interface)`` holds for anything offering the union;
- the **composite type**, named ``{component}Class``, which extends the
  requested base type and the interface, stores one delegate per
  ``__slots__`` entry and installs one dispatch stub per synthesized method.

Usage::

    composite_type, interface = materialize(shape)
    instance = composite_type({Greeter: greeter, Counter: counter})
    instance.Greeter_greet("Sam")
"""

from __future__ import annotations

import abc
import inspect
import logging
import types
from typing import Any, Mapping, Protocol, runtime_checkable

from capcompose.composite.factory import resolve_delegates
from capcompose.composite.schema import CompositeShape
from capcompose.composite.stubs import make_abstract_stub, make_dispatch_stub
from capcompose.errors import InvalidBaseTypeError

logger = logging.getLogger(__name__)

GENERATED_MODULE = "capcompose.generated"
SHAPE_ATTRIBUTE = "__composite_shape__"


def interface_name(component_name: str) -> str:
    return f"I{component_name}"


def type_name(component_name: str) -> str:
    return f"{component_name}Class"


def composite_method_names(cls: type) -> tuple[str, ...]:
    """Return the synthesized method names declared on a composite class.

    Works for both the composite interface and the composite type.
    """
    for klass in cls.__mro__:
        shape = vars(klass).get(SHAPE_ATTRIBUTE)
        if isinstance(shape, CompositeShape):
            return shape.method_names()
    return tuple(
        name for name, member in vars(cls).items()
        if not name.startswith("_") and inspect.isfunction(member)
    )


def _build_interface(shape: CompositeShape) -> type:
    name = interface_name(shape.component_name)

    def body(ns: dict[str, Any]) -> None:
        ns["__module__"] = GENERATED_MODULE
        ns["__qualname__"] = name
        ns["__doc__"] = (
            f"Composite interface of {', '.join(s.display_name for s in shape.slots)}."
        )
        for method in shape.methods:
            ns[method.name] = abc.abstractmethod(make_abstract_stub(method, name))

    return runtime_checkable(types.new_class(name, (Protocol,), {}, body))


def _make_init(shape: CompositeShape, base_type: type):
    slots = shape.slots
    base_init = None if base_type is object else base_type.__init__

    def __init__(self, binding: Mapping[type, Any]) -> None:
        delegates = resolve_delegates(shape, binding)
        if base_init is not None:
            base_init(self)
        for slot, delegate in zip(slots, delegates):
            setattr(self, slot.attribute, delegate)

    return __init__


def _make_repr(shape: CompositeShape):
    names = ", ".join(s.display_name for s in shape.slots)

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} composite of [{names}]>"

    return __repr__


def _build_type(shape: CompositeShape, interface: type, base_type: type) -> type:
    name = type_name(shape.component_name)
    bases = (interface,) if base_type is object else (base_type, interface)

    def body(ns: dict[str, Any]) -> None:
        ns["__module__"] = GENERATED_MODULE
        ns["__qualname__"] = name
        ns["__slots__"] = tuple(slot.attribute for slot in shape.slots)
        ns["__annotations__"] = {
            slot.attribute: slot.capability for slot in shape.slots
        }
        ns[SHAPE_ATTRIBUTE] = shape
        ns["__init__"] = _make_init(shape, base_type)
        ns["__repr__"] = _make_repr(shape)
        for method in shape.methods:
            ns[method.name] = make_dispatch_stub(
                method, shape.slot_for(method), name
            )

    try:
        return types.new_class(name, bases, {}, body)
    except TypeError as exc:
        raise InvalidBaseTypeError(base_type, str(exc)) from exc


def materialize(
    shape: CompositeShape,
    base_type: type = object,
) -> tuple[type, type]:
    """Materialize *shape* into ``(composite_type, composite_interface)``.

    Args:
        shape: The synthesized composite shape.
        base_type: Class the composite type extends.  Its ``__init__`` is
            called without arguments.

    Raises:
        InvalidBaseTypeError: If *base_type* is not a class or cannot be
            combined with the composite interface (final class, instance
            layout or metaclass conflict).
    """
    if not isinstance(base_type, type):
        raise InvalidBaseTypeError(base_type, "not a class")

    interface = _build_interface(shape)
    composite_type = _build_type(shape, interface, base_type)

    logger.debug(
        "Materialized %s (base=%s, slots=%d, methods=%d)",
        composite_type.__qualname__,
        base_type.__qualname__,
        len(shape.slots),
        len(shape.methods),
    )
    return composite_type, interface
