"""
Shared OTel span event emission helper.

Provides ``add_span_event()`` — the single-source implementation used by
the ``otel.py`` modules.  Centralises the span recording check and the
``emit_span_events`` configuration switch.

Usage::

    from capcompose._otel_helpers import add_span_event

    add_span_event("composite.build.complete", {"composite.component": "__ab12"})
"""

from __future__ import annotations

from opentelemetry import trace as otel_trace

from capcompose.config import get_config


def add_span_event(
    name: str, attributes: dict[str, str | int | float | bool]
) -> None:
    """Add an event to the current OTel span if it is recording.

    No-op when span events are disabled in configuration or the current
    span is not recording.

    Args:
        name: Event name (e.g. ``"composite.shape.synthesized"``).
        attributes: Flat dict of span event attributes.
    """
    if not get_config().emit_span_events:
        return
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)
