"""
OTel span event emission helpers for composite builds.

Follows the log + optional span event pattern: every helper logs, then
adds a span event to the current span when one is recording.

Usage::

    from capcompose.composite.otel import emit_shape_synthesized, emit_build_result

    emit_shape_synthesized(shape)
    emit_build_result(shape.component_name, BuildStatus.BUILT, shape=shape)
"""

from __future__ import annotations

import logging
from typing import Optional

from capcompose._otel_helpers import add_span_event
from capcompose.composite.schema import CompositeShape
from capcompose.composite.types import BuildStatus

logger = logging.getLogger(__name__)


def emit_shape_synthesized(shape: CompositeShape) -> None:
    """Emit ``composite.shape.synthesized`` for a freshly derived shape."""
    attrs: dict[str, str | int | float | bool] = {
        "composite.component": shape.component_name,
        "composite.slot_count": len(shape.slots),
        "composite.method_count": len(shape.methods),
    }

    # Include first 3 capability names for quick filtering
    for i, slot in enumerate(shape.slots[:3]):
        attrs[f"composite.capability.{i}"] = slot.display_name

    logger.debug(
        "Composite shape %s: slots=%d methods=%d",
        shape.component_name,
        len(shape.slots),
        len(shape.methods),
    )
    add_span_event("composite.shape.synthesized", attrs)


def emit_build_result(
    component_name: str,
    status: BuildStatus,
    shape: Optional[CompositeShape] = None,
    error: Optional[BaseException] = None,
) -> None:
    """Emit ``composite.build.complete`` or ``composite.build.failed``."""
    event_name = {
        BuildStatus.BUILT: "composite.build.complete",
        BuildStatus.FAILED: "composite.build.failed",
    }[status]

    attrs: dict[str, str | int | float | bool] = {
        "composite.component": component_name,
        "composite.status": status.value,
    }
    if shape is not None:
        attrs["composite.method_count"] = len(shape.methods)
    if error is not None:
        attrs["composite.error_type"] = type(error).__name__
        attrs["composite.error"] = str(error)

    if status is BuildStatus.FAILED:
        logger.warning(
            "Composite build %s FAILED: %s",
            component_name,
            error,
        )
    else:
        logger.debug("Composite build %s: %s", component_name, status.value)

    add_span_event(event_name, attrs)
