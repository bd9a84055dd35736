"""
Error taxonomy for composite capability builds.

Every failure raised by the builder derives from ``CompositeError``.
Failures raised by delegates during dispatch are NOT part of this
hierarchy: dispatch stubs let them propagate unchanged.

Hierarchy::

    CompositeError
    ├── CapabilityError
    │   └── InvalidCapabilityError        (also TypeError)
    ├── ShapeError
    │   └── DuplicateMethodNameError
    ├── MaterializationError
    │   └── InvalidBaseTypeError          (also TypeError)
    └── BindingError
        ├── MissingCapabilityError        (also KeyError)
        ├── TypeMismatchError             (also TypeError)
        └── UnexpectedCapabilityError
"""

from __future__ import annotations

from typing import Any, Optional


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)


class CompositeError(Exception):
    """Base class for all composite build errors."""


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------


class CapabilityError(CompositeError):
    """Base class for capability introspection errors."""


class InvalidCapabilityError(CapabilityError, TypeError):
    """Raised when a type cannot be used as a capability interface."""

    def __init__(self, capability: Any, reason: str) -> None:
        self.capability = capability
        self.reason = reason
        super().__init__(
            f"{_type_name(capability)} is not a valid capability: {reason}"
        )


# ---------------------------------------------------------------------------
# Shape synthesis
# ---------------------------------------------------------------------------


class ShapeError(CompositeError):
    """Base class for composite shape synthesis errors."""


class DuplicateMethodNameError(ShapeError):
    """Raised when two capabilities produce the same synthesized method name."""

    def __init__(self, method_name: str, first: type, second: type) -> None:
        self.method_name = method_name
        self.first = first
        self.second = second
        super().__init__(
            f"Synthesized method name '{method_name}' is produced by both "
            f"{first.__module__}.{first.__qualname__} and "
            f"{second.__module__}.{second.__qualname__}"
        )


# ---------------------------------------------------------------------------
# Materialization
# ---------------------------------------------------------------------------


class MaterializationError(CompositeError):
    """Base class for type materialization errors."""


class InvalidBaseTypeError(MaterializationError, TypeError):
    """Raised when the requested base type cannot be extended."""

    def __init__(self, base_type: Any, reason: str) -> None:
        self.base_type = base_type
        self.reason = reason
        super().__init__(
            f"Cannot use {_type_name(base_type)} as composite base type: {reason}"
        )


# ---------------------------------------------------------------------------
# Delegate binding
# ---------------------------------------------------------------------------


class BindingError(CompositeError):
    """Base class for delegate binding errors raised at construction."""


class MissingCapabilityError(BindingError, KeyError):
    """Raised when a binding omits a capability required by the shape."""

    def __init__(self, capability: type, slot_index: Optional[int] = None) -> None:
        self.capability = capability
        self.slot_index = slot_index
        self.message = (
            f"Delegate binding has no entry for capability "
            f"{_type_name(capability)}"
        )
        if slot_index is not None:
            self.message += f" (slot {slot_index})"
        super().__init__(self.message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.message


class TypeMismatchError(BindingError, TypeError):
    """Raised when a bound delegate does not implement its capability."""

    def __init__(
        self,
        capability: type,
        delegate: Any,
        missing_methods: tuple[str, ...] = (),
    ) -> None:
        self.capability = capability
        self.delegate = delegate
        self.missing_methods = missing_methods
        message = (
            f"Delegate of type {_type_name(type(delegate))} does not implement "
            f"capability {_type_name(capability)}"
        )
        if missing_methods:
            message += f": missing {', '.join(missing_methods)}"
        super().__init__(message)


class UnexpectedCapabilityError(BindingError):
    """Raised when a binding contains capabilities the shape does not declare."""

    def __init__(self, capabilities: tuple[type, ...]) -> None:
        self.capabilities = capabilities
        names = ", ".join(_type_name(c) for c in capabilities)
        super().__init__(f"Delegate binding has unexpected capabilities: {names}")
