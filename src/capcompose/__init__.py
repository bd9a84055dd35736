"""
capcompose - Composite capability types built at runtime.

Given several capability interfaces (Protocols or abstract base classes)
and one delegate per interface, capcompose synthesizes a single type
exposing the union of their methods under collision-free names
(``"{CapabilityName}_{methodName}"``) and forwarding every call to the
right delegate.

Example usage:
    from capcompose import CompositeInterfaceBuilder

    builder = CompositeInterfaceBuilder()
    instance, interface = builder.build({Greeter: greeter, Counter: counter})

    instance.Greeter_greet("Sam")     # forwarded to greeter.greet("Sam")
    instance.Counter_increment()      # forwarded to counter.increment()
    isinstance(instance, interface)   # True
"""

__version__ = "0.1.0"
__all__ = [
    "CompositeInterfaceBuilder",
    "CompositeBuild",
    "CompositeError",
    "DuplicateMethodNameError",
    "MissingCapabilityError",
    "TypeMismatchError",
    "__version__",
]


# Lazy imports to keep ``import capcompose`` light
def __getattr__(name: str):
    if name in ("CompositeInterfaceBuilder", "CompositeBuild"):
        from capcompose.composite import builder
        return getattr(builder, name)
    if name in ("CompositeError", "DuplicateMethodNameError",
                "MissingCapabilityError", "TypeMismatchError"):
        from capcompose import errors
        return getattr(errors, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
