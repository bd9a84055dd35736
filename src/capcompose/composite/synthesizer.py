"""
Composite shape synthesis.

Derives the union shape of a capability set: slot ``i`` stores the
delegate of the ``i``-th capability, and every capability method becomes a
forwarding method named ``"{CapabilityName}_{methodName}"``.

Colliding names are a hard failure.  Two distinct capabilities can only
collide when they share a display name (e.g. same class name in two
modules) and declare the same method.
"""

from __future__ import annotations

import logging
from typing import Iterable

from capcompose.composite.introspector import describe_capability
from capcompose.composite.schema import CompositeMethod, CompositeShape, CompositeSlot
from capcompose.composite.types import MethodOrder
from capcompose.errors import DuplicateMethodNameError

logger = logging.getLogger(__name__)

NAME_SEPARATOR = "_"


def synthesized_name(display_name: str, method_name: str) -> str:
    return NAME_SEPARATOR.join((display_name, method_name))


def synthesize(
    capabilities: Iterable[type],
    component_name: str,
    order: MethodOrder | str = MethodOrder.DECLARATION,
) -> CompositeShape:
    """Build the ``CompositeShape`` for an ordered capability set.

    Args:
        capabilities: Capability classes in slot order.
        component_name: Name of the component the shape belongs to.
        order: Method order applied within each capability.

    Returns:
        The synthesized shape.

    Raises:
        InvalidCapabilityError: If a capability cannot be introspected.
        DuplicateMethodNameError: If two synthesized names collide.
    """
    slots: list[CompositeSlot] = []
    methods: list[CompositeMethod] = []
    owners: dict[str, type] = {}

    for index, capability in enumerate(capabilities):
        spec = describe_capability(capability, order)
        slots.append(
            CompositeSlot(
                index=index,
                capability=capability,
                display_name=spec.display_name,
                structural=spec.structural,
            )
        )
        for signature in spec.methods:
            name = synthesized_name(spec.display_name, signature.name)
            if name in owners:
                logger.warning(
                    "Duplicate synthesized method '%s' in component %s",
                    name,
                    component_name,
                )
                raise DuplicateMethodNameError(name, owners[name], capability)
            owners[name] = capability
            methods.append(
                CompositeMethod(name=name, slot_index=index, source=signature)
            )

    shape = CompositeShape(
        component_name=component_name,
        slots=tuple(slots),
        methods=tuple(methods),
    )
    logger.debug(
        "Synthesized shape for %s: slots=%d, methods=%d",
        component_name,
        len(shape.slots),
        len(shape.methods),
    )
    return shape
