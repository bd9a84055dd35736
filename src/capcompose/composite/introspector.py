"""
Capability introspection.

Extracts the ordered method signatures of a capability interface.  A
capability is a class that only declares behaviour:

- a ``typing.Protocol`` subclass, or
- an ``abc.ABC`` subclass whose public methods are all abstract.

Protocol method bodies are not inspected; a default body counts as a
declaration and is never called by a composite.

Methods are collected from the class and its capability bases in class
body order (nearest definition wins).  Python preserves class body order,
so ``MethodOrder.DECLARATION`` is deterministic across runs;
``MethodOrder.SORTED`` additionally makes the order independent of how
the capability was written.

Usage::

    from capcompose.composite.introspector import introspect

    class Greeter(Protocol):
        def greet(self, name: str) -> str: ...

    introspect(Greeter)
    # (MethodSignature(name='greet', ...),)
"""

from __future__ import annotations

import abc
import inspect
import logging
import typing
from typing import Any, Generic, Protocol, TypeVar

from capcompose.composite.schema import CapabilitySpec, MethodSignature, ParameterSpec
from capcompose.composite.types import MethodOrder
from capcompose.errors import InvalidCapabilityError

logger = logging.getLogger(__name__)

_NON_CAPABILITY_BASES = (object, Protocol, Generic, abc.ABC)


def is_protocol(capability: type) -> bool:
    return bool(getattr(capability, "_is_protocol", False))


def _capability_bases(capability: type) -> list[type]:
    return [
        base for base in capability.__mro__
        if base not in _NON_CAPABILITY_BASES
    ]


def _declared_functions(capability: type) -> dict[str, Any]:
    """Collect public functions across the capability MRO in body order."""
    collected: dict[str, Any] = {}
    # Walk from the farthest base so overrides keep their original position
    for base in reversed(_capability_bases(capability)):
        for name, member in vars(base).items():
            if name.startswith("_"):
                continue
            collected[name] = member
    return collected


def _contains_typevar(annotation: Any) -> bool:
    if isinstance(annotation, TypeVar):
        return True
    return any(_contains_typevar(arg) for arg in typing.get_args(annotation))


def _check_capability_only(capability: type, functions: dict[str, Any]) -> None:
    for name, member in functions.items():
        if isinstance(member, (staticmethod, classmethod, property)):
            raise InvalidCapabilityError(
                capability, f"'{name}' is not an instance method"
            )
        if not inspect.isfunction(member):
            raise InvalidCapabilityError(
                capability, f"'{name}' is a data member, not a method"
            )

    if is_protocol(capability):
        return

    abstract = getattr(capability, "__abstractmethods__", frozenset())
    concrete = sorted(name for name in functions if name not in abstract)
    if not isinstance(capability, abc.ABCMeta):
        raise InvalidCapabilityError(
            capability, "must be a typing.Protocol or an abc.ABC subclass"
        )
    if concrete:
        raise InvalidCapabilityError(
            capability, f"methods {concrete} carry an implementation"
        )


def _resolve_hints(func: Any) -> dict[str, Any]:
    """Resolve annotations of *func*, keeping names that are not in scope.

    Annotations are descriptive only, so a name defined in a local or class
    scope stays as its unresolved string instead of failing the capability.
    """
    try:
        return typing.get_type_hints(func)
    except NameError:
        pass

    hints: dict[str, Any] = {}
    for key, raw in inspect.get_annotations(func).items():
        if isinstance(raw, str):
            try:
                raw = eval(raw, func.__globals__)  # noqa: S307
            except NameError:
                logger.debug("Keeping unresolved annotation %r of %s", raw, func.__qualname__)
        hints[key] = raw
    return hints


def _method_signature(capability: type, name: str, func: Any) -> MethodSignature:
    try:
        hints = _resolve_hints(func)
    except (NameError, TypeError, SyntaxError) as exc:
        raise InvalidCapabilityError(
            capability, f"cannot resolve annotations of '{name}': {exc}"
        ) from exc

    sig = inspect.signature(func)
    params = list(sig.parameters.values())
    if not params or params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise InvalidCapabilityError(
            capability, f"'{name}' does not take self as first parameter"
        )
    params = params[1:]

    specs = []
    resolved = []
    for param in params:
        annotation = hints.get(param.name, Any)
        if _contains_typevar(annotation):
            raise InvalidCapabilityError(
                capability, f"'{name}' has a generic parameter '{param.name}'"
            )
        specs.append(
            ParameterSpec(
                name=param.name,
                kind=param.kind.name,
                annotation=annotation,
                has_default=param.default is not inspect.Parameter.empty,
            )
        )
        resolved.append(param.replace(annotation=annotation))

    return_type = hints.get("return", Any)
    if _contains_typevar(return_type):
        raise InvalidCapabilityError(
            capability, f"'{name}' has a generic return type"
        )

    return MethodSignature(
        name=name,
        parameters=tuple(specs),
        return_type=return_type,
        signature=sig.replace(parameters=resolved, return_annotation=return_type),
        doc=inspect.getdoc(func),
    )


def introspect(
    capability: type,
    order: MethodOrder | str = MethodOrder.DECLARATION,
) -> tuple[MethodSignature, ...]:
    """Return the method signatures declared by *capability*.

    Args:
        capability: A Protocol or fully abstract ABC class.
        order: ``declaration`` (class body order) or ``sorted``.

    Returns:
        Ordered tuple of ``MethodSignature``.

    Raises:
        InvalidCapabilityError: If *capability* is not a class, carries an
            implementation, declares non-method members or has generic
            signatures.
    """
    if not isinstance(capability, type):
        raise InvalidCapabilityError(capability, "not a class")

    order = MethodOrder(order)
    functions = _declared_functions(capability)
    _check_capability_only(capability, functions)

    methods = [
        _method_signature(capability, name, func)
        for name, func in functions.items()
    ]
    if order is MethodOrder.SORTED:
        methods.sort(key=MethodSignature.sort_key)

    logger.debug(
        "Introspected capability %s: %d method(s), order=%s",
        capability.__qualname__,
        len(methods),
        order.value,
    )
    return tuple(methods)


def describe_capability(
    capability: type,
    order: MethodOrder | str = MethodOrder.DECLARATION,
) -> CapabilitySpec:
    """Introspect *capability* into a ``CapabilitySpec``."""
    return CapabilitySpec(
        capability=capability,
        display_name=capability.__name__,
        methods=introspect(capability, order),
        structural=is_protocol(capability),
    )
