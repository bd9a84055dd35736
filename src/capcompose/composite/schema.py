"""
Pydantic v2 models describing capabilities and composite shapes.

A composite shape is plain data: the ordered capability slots and the
synthesized forwarding methods.  Materialization and dispatch read from
these models and never from the capability classes directly.

All models are frozen and use ``extra="forbid"`` to reject unknown keys.
Capability classes and annotations are stored as-is, hence
``arbitrary_types_allowed``.

Usage::

    from capcompose.composite.schema import CompositeShape

    shape.method_names()
    # ('Greeter_greet', 'Counter_increment')
    shape.dispatch_table()
    # {'Greeter_greet': (0, 'greet'), 'Counter_increment': (1, 'increment')}
"""

from __future__ import annotations

import inspect
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def type_label(tp: Any) -> str:
    """Return a stable, human-readable label for an annotation."""
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp).replace("typing.", "")


_FROZEN = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)


# ---------------------------------------------------------------------------
# Method signatures
# ---------------------------------------------------------------------------


class ParameterSpec(BaseModel):
    """A single parameter of a capability method (``self`` excluded)."""

    model_config = _FROZEN

    name: str = Field(..., min_length=1)
    kind: str = Field(..., description="inspect.Parameter kind name")
    annotation: Any = Field(..., description="Resolved parameter annotation")
    has_default: bool = False


class MethodSignature(BaseModel):
    """Name, parameters and return type of one capability method."""

    model_config = _FROZEN

    name: str = Field(..., min_length=1)
    parameters: tuple[ParameterSpec, ...] = ()
    return_type: Any = Field(..., description="Resolved return annotation")
    signature: inspect.Signature = Field(
        ..., description="Source signature without the self parameter"
    )
    doc: str | None = None

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        return tuple(p.annotation for p in self.parameters)

    def sort_key(self) -> tuple[str, tuple[str, ...]]:
        return (self.name, tuple(type_label(t) for t in self.parameter_types))

    def describe(self) -> str:
        params = ", ".join(
            f"{p.name}: {type_label(p.annotation)}" for p in self.parameters
        )
        return f"{self.name}({params}) -> {type_label(self.return_type)}"


class CapabilitySpec(BaseModel):
    """An introspected capability interface."""

    model_config = _FROZEN

    capability: type
    display_name: str = Field(..., min_length=1)
    methods: tuple[MethodSignature, ...] = ()
    structural: bool = Field(
        False, description="True for Protocol capabilities (duck-typed binding)"
    )


# ---------------------------------------------------------------------------
# Composite shape
# ---------------------------------------------------------------------------


class CompositeSlot(BaseModel):
    """Storage slot holding the delegate for one capability."""

    model_config = _FROZEN

    index: int = Field(..., ge=0)
    capability: type
    display_name: str
    structural: bool = False

    @property
    def attribute(self) -> str:
        return f"_slot_{self.index}"


class CompositeMethod(BaseModel):
    """A synthesized forwarding method."""

    model_config = _FROZEN

    name: str = Field(..., min_length=1, description="'{Capability}_{method}'")
    slot_index: int = Field(..., ge=0)
    source: MethodSignature


class CompositeShape(BaseModel):
    """
    Union of several capabilities' methods under collision-free names.

    Invariant: ``methods`` names are pairwise distinct (enforced by the
    synthesizer, which raises ``DuplicateMethodNameError``).
    """

    model_config = _FROZEN

    component_name: str = Field(..., min_length=1)
    slots: tuple[CompositeSlot, ...] = ()
    methods: tuple[CompositeMethod, ...] = ()

    @property
    def capabilities(self) -> tuple[type, ...]:
        """The ordered capability set; position equals slot index."""
        return tuple(slot.capability for slot in self.slots)

    def method_names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self.methods)

    def slot_for(self, method: CompositeMethod) -> CompositeSlot:
        return self.slots[method.slot_index]

    def dispatch_table(self) -> dict[str, tuple[int, str]]:
        """Map each synthesized name to ``(slot index, source method name)``."""
        return {m.name: (m.slot_index, m.source.name) for m in self.methods}
