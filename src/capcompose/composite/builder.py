"""
Composite capability builder: the public entry point.

Given a mapping ``{capability class: delegate}``, synthesizes a new type
exposing the union of all capability methods as
``"{CapabilityName}_{methodName}"`` and returns an instance of it bound
to the delegates, together with the composite interface.

Each builder owns a component name (random unless given) and a
``TypeRegistry``; every ``build`` materializes fresh types.

Usage::

    from capcompose.composite import CompositeInterfaceBuilder

    builder = CompositeInterfaceBuilder()
    instance, interface = builder.build({Greeter: greeter, Counter: counter})

    instance.Greeter_greet("Sam")        # 'Hello, Sam'
    getattr(instance, "Counter_increment")()  # 1
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Mapping, NamedTuple, Optional

from capcompose.composite.factory import CompositeFactory
from capcompose.composite.materializer import materialize
from capcompose.composite.otel import emit_build_result, emit_shape_synthesized
from capcompose.composite.registry import RegisteredComposite, TypeRegistry
from capcompose.composite.schema import CompositeShape
from capcompose.composite.synthesizer import synthesize
from capcompose.composite.types import BuildStatus, MethodOrder
from capcompose.config import get_config
from capcompose.errors import CompositeError
from capcompose.logger import BuildLogger

logger = logging.getLogger(__name__)


def generate_component_name(prefix: Optional[str] = None) -> str:
    """Return a process-unique component name such as ``__9f1c...``."""
    if prefix is None:
        prefix = get_config().component_prefix
    return f"{prefix}{uuid.uuid4().hex}"


class CompositeBuild(NamedTuple):
    """Result of ``CompositeInterfaceBuilder.build``."""

    instance: Any
    interface: type


class CompositeInterfaceBuilder:
    """Builds composite types forwarding to per-capability delegates."""

    def __init__(
        self,
        component_name: Optional[str] = None,
        method_order: MethodOrder | str | None = None,
    ) -> None:
        if component_name is not None and not component_name.strip():
            raise ValueError("component_name must not be blank")
        config = get_config()
        self._component_name = component_name or generate_component_name()
        self._method_order = MethodOrder(method_order or config.method_order)
        self._registry = TypeRegistry(self._component_name)
        self._build_logger = BuildLogger(component=self._component_name)

    @property
    def component_name(self) -> str:
        return self._component_name

    @property
    def method_order(self) -> MethodOrder:
        return self._method_order

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def synthesize(self, capabilities: Iterable[type]) -> CompositeShape:
        """Derive the composite shape of *capabilities* (in slot order)."""
        shape = synthesize(capabilities, self._component_name, self._method_order)
        emit_shape_synthesized(shape)
        return shape

    def generate(
        self,
        capabilities: Iterable[type],
        base_type: type = object,
    ) -> tuple[type, type]:
        """Materialize the composite type without binding delegates.

        Returns:
            Tuple of ``(composite_type, composite_interface)``.
        """
        entry = self._generate(list(capabilities), base_type)
        return entry.composite_type, entry.interface

    def build(
        self,
        binding: Mapping[type, Any],
        base_type: type = object,
    ) -> CompositeBuild:
        """Build a composite instance bound to *binding*.

        Args:
            binding: Mapping of capability class to delegate instance.  Its
                iteration order defines slot order.
            base_type: Class the composite type extends (default ``object``).

        Returns:
            ``CompositeBuild(instance, interface)``.

        Raises:
            InvalidCapabilityError: If a key is not a capability interface.
            DuplicateMethodNameError: If synthesized names collide.
            InvalidBaseTypeError: If *base_type* cannot be extended.
            TypeMismatchError: If a delegate does not implement its capability.
        """
        capabilities = list(binding.keys())
        try:
            shape = self.synthesize(capabilities)
            composite_type, interface = materialize(shape, base_type)
            instance = CompositeFactory(composite_type).create(binding)
        except CompositeError as exc:
            self._build_logger.log_build_failed(
                [getattr(c, "__qualname__", repr(c)) for c in capabilities], exc
            )
            emit_build_result(self._component_name, BuildStatus.FAILED, error=exc)
            raise

        # Only types that produced an instance are registered
        entry = self._registry.register(composite_type, interface, shape)
        self._build_logger.log_built(
            type_name=entry.composite_type.__qualname__,
            capabilities=[slot.display_name for slot in entry.shape.slots],
            methods=len(entry.shape.methods),
            build_id=entry.build_id,
            base_type=base_type.__qualname__,
        )
        emit_build_result(
            self._component_name, BuildStatus.BUILT, shape=entry.shape
        )
        return CompositeBuild(instance=instance, interface=entry.interface)

    def _generate(self, capabilities: list[type], base_type: type) -> RegisteredComposite:
        shape = self.synthesize(capabilities)
        composite_type, interface = materialize(shape, base_type)
        return self._registry.register(composite_type, interface, shape)
