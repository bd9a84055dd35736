"""Enums shared across the composite build pipeline."""

from __future__ import annotations

from enum import Enum


class MethodOrder(str, Enum):
    """Order in which a capability's methods enter a composite shape."""

    DECLARATION = "declaration"  # class body order
    SORTED = "sorted"  # by name, then parameter types


class BuildStatus(str, Enum):
    """Outcome of a single ``CompositeInterfaceBuilder.build`` call."""

    BUILT = "built"
    FAILED = "failed"

