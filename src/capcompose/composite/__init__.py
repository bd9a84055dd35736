"""
Composite capability types.

Synthesizes, at runtime, a type exposing the union of several capability
interfaces and forwarding every call to one delegate per capability.

Public API::

    from capcompose.composite import (
        # Builder
        CompositeInterfaceBuilder,
        CompositeBuild,
        # Pipeline stages
        introspect,
        describe_capability,
        synthesize,
        materialize,
        CompositeFactory,
        # Schema models
        MethodSignature,
        CapabilitySpec,
        CompositeShape,
        CompositeSlot,
        CompositeMethod,
        # Registry
        TypeRegistry,
        # Manifests
        ShapeManifest,
        ManifestLoader,
        # Enums
        MethodOrder,
        BuildStatus,
    )
"""

from capcompose.composite.builder import (
    CompositeBuild,
    CompositeInterfaceBuilder,
    generate_component_name,
)
from capcompose.composite.factory import CompositeFactory, resolve_delegates
from capcompose.composite.introspector import describe_capability, introspect
from capcompose.composite.manifest import ManifestDiff, ManifestLoader, ShapeManifest
from capcompose.composite.materializer import composite_method_names, materialize
from capcompose.composite.registry import RegisteredComposite, TypeRegistry
from capcompose.composite.schema import (
    CapabilitySpec,
    CompositeMethod,
    CompositeShape,
    CompositeSlot,
    MethodSignature,
    ParameterSpec,
)
from capcompose.composite.synthesizer import synthesize
from capcompose.composite.types import BuildStatus, MethodOrder

__all__ = [
    # Builder
    "CompositeInterfaceBuilder",
    "CompositeBuild",
    "generate_component_name",
    # Pipeline stages
    "introspect",
    "describe_capability",
    "synthesize",
    "materialize",
    "composite_method_names",
    "CompositeFactory",
    "resolve_delegates",
    # Schema
    "MethodSignature",
    "ParameterSpec",
    "CapabilitySpec",
    "CompositeShape",
    "CompositeSlot",
    "CompositeMethod",
    # Registry
    "TypeRegistry",
    "RegisteredComposite",
    # Manifests
    "ShapeManifest",
    "ManifestLoader",
    "ManifestDiff",
    # Enums
    "MethodOrder",
    "BuildStatus",
]
