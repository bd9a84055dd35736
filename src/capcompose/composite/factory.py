"""
Instance construction for materialized composite types.

``resolve_delegates`` validates a delegate binding against a shape and
returns the delegates in slot order.  It runs before any slot is written,
so a failed binding never yields a partially bound instance.

Binding rules:

- the binding holds exactly the shape's capabilities
  (``MissingCapabilityError`` / ``UnexpectedCapabilityError``);
- each delegate satisfies its capability (``TypeMismatchError``).  ABC
  capabilities require ``isinstance``; Protocol capabilities accept
  explicit subclasses or any object providing every method as a callable.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from capcompose.composite.schema import CompositeShape, CompositeSlot
from capcompose.errors import (
    MissingCapabilityError,
    TypeMismatchError,
    UnexpectedCapabilityError,
)

logger = logging.getLogger(__name__)


def _missing_methods(shape: CompositeShape, slot: CompositeSlot, delegate: Any) -> tuple[str, ...]:
    return tuple(
        m.source.name
        for m in shape.methods
        if m.slot_index == slot.index
        and not callable(getattr(delegate, m.source.name, None))
    )


def check_delegate(shape: CompositeShape, slot: CompositeSlot, delegate: Any) -> None:
    """Raise ``TypeMismatchError`` unless *delegate* satisfies *slot*."""
    capability = slot.capability
    if slot.structural:
        if capability in type(delegate).__mro__:
            return
        missing = _missing_methods(shape, slot, delegate)
        if missing:
            raise TypeMismatchError(capability, delegate, missing)
        return

    if not isinstance(delegate, capability):
        raise TypeMismatchError(capability, delegate)


def resolve_delegates(
    shape: CompositeShape,
    binding: Mapping[type, Any],
) -> tuple[Any, ...]:
    """Validate *binding* against *shape* and return delegates in slot order.

    Raises:
        UnexpectedCapabilityError: If the binding has keys outside the shape.
        MissingCapabilityError: If a slot's capability is not bound.
        TypeMismatchError: If a delegate does not implement its capability.
    """
    expected = set(shape.capabilities)
    unexpected = tuple(key for key in binding if key not in expected)
    if unexpected:
        raise UnexpectedCapabilityError(unexpected)

    delegates = []
    for slot in shape.slots:
        try:
            delegate = binding[slot.capability]
        except KeyError:
            raise MissingCapabilityError(slot.capability, slot.index) from None
        check_delegate(shape, slot, delegate)
        delegates.append(delegate)
    return tuple(delegates)


class CompositeFactory:
    """Creates bound instances of one materialized composite type.

    Usage::

        factory = CompositeFactory(composite_type)
        instance = factory.create({Greeter: greeter, Counter: counter})
    """

    def __init__(self, composite_type: type) -> None:
        shape = getattr(composite_type, "__composite_shape__", None)
        if not isinstance(shape, CompositeShape):
            raise TypeError(
                f"{composite_type!r} is not a materialized composite type"
            )
        self._type = composite_type
        self._shape = shape

    @property
    def composite_type(self) -> type:
        return self._type

    @property
    def shape(self) -> CompositeShape:
        return self._shape

    def create(self, binding: Mapping[type, Any]) -> Any:
        """Construct an instance of the composite type bound to *binding*."""
        instance = self._type(binding)
        logger.debug(
            "Created %s bound to %d delegate(s)",
            self._type.__qualname__,
            len(self._shape.slots),
        )
        return instance
