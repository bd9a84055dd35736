"""
Dispatch stub generation.

A dispatch stub loads one slot of the composite instance and calls the
source method on the stored delegate with the caller's arguments,
returning the result unchanged.  Stubs never catch, wrap or log: an
exception raised by the delegate reaches the caller as-is.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable

from capcompose.composite.schema import CompositeMethod, CompositeSlot


def _bound_signature(method: CompositeMethod) -> inspect.Signature:
    self_param = inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)
    source = method.source.signature
    return source.replace(parameters=[self_param, *source.parameters.values()])


def _decorate(func: Callable[..., Any], method: CompositeMethod, owner: str) -> None:
    func.__name__ = method.name
    func.__qualname__ = f"{owner}.{method.name}"
    func.__doc__ = method.source.doc
    func.__signature__ = _bound_signature(method)  # type: ignore[attr-defined]
    func.__annotations__ = {
        **{p.name: p.annotation for p in method.source.parameters},
        "return": method.source.return_type,
    }


def make_dispatch_stub(
    method: CompositeMethod,
    slot: CompositeSlot,
    owner: str,
) -> Callable[..., Any]:
    """Create the forwarding function for *method* reading *slot*.

    Args:
        method: The synthesized method.
        slot: The slot holding the delegate of the method's capability.
        owner: Qualified name of the class the stub is installed on.
    """
    attribute = slot.attribute
    target = method.source.name

    def stub(self, *args, **kwargs):
        return getattr(getattr(self, attribute), target)(*args, **kwargs)

    _decorate(stub, method, owner)
    return stub


def make_abstract_stub(method: CompositeMethod, owner: str) -> Callable[..., Any]:
    """Create the abstract declaration of *method* for the composite interface."""

    def declaration(self, *args, **kwargs):
        raise NotImplementedError(method.name)

    _decorate(declaration, method, owner)
    return declaration
