"""
Shape manifests: a YAML record of a composite shape.

A manifest lists every synthesized method with its slot, owning
capability and signature labels.  Recording it once and diffing later
shapes against it detects drift in capability definitions or method
ordering between runs.

Manifest YAML format::

    schema_version: "0.1.0"
    manifest_type: composite_shape
    capabilities:
      - slot: 0
        capability: myapp.caps.Greeter
    methods:
      - name: Greeter_greet
        slot: 0
        method: greet
        parameters: [str]
        returns: str

Usage::

    from capcompose.composite.manifest import ManifestLoader, ShapeManifest

    Path("shape.yaml").write_text(ShapeManifest.from_shape(shape).to_yaml())

    recorded = ManifestLoader().load(Path("shape.yaml"))
    diff = recorded.diff(builder.synthesize([Greeter, Counter]))
    if not diff.matches:
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

from capcompose.composite.schema import CompositeShape, type_label

logger = logging.getLogger(__name__)

MANIFEST_SCHEMA_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Manifest models
# ---------------------------------------------------------------------------


class ManifestCapability(BaseModel):
    """One slot entry of a manifest."""

    model_config = ConfigDict(extra="forbid")

    slot: int = Field(..., ge=0)
    capability: str = Field(..., min_length=1, description="Qualified class name")


class ManifestMethod(BaseModel):
    """One synthesized method entry of a manifest."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Synthesized method name")
    slot: int = Field(..., ge=0)
    method: str = Field(..., min_length=1, description="Source method name")
    parameters: list[str] = Field(default_factory=list)
    returns: str = "Any"


class ManifestDiff(BaseModel):
    """Differences between a recorded manifest and a shape."""

    model_config = ConfigDict(extra="forbid")

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    changed: list[str] = Field(default_factory=list)
    reordered: bool = False

    @property
    def matches(self) -> bool:
        return not (self.added or self.removed or self.changed or self.reordered)


class ShapeManifest(BaseModel):
    """
    Root model for a composite shape manifest YAML file.

    The component name is deliberately absent: it is random per builder
    and would make every manifest unique.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., min_length=1)
    manifest_type: Literal["composite_shape"] = Field(
        ..., description="Must be 'composite_shape'"
    )
    capabilities: list[ManifestCapability] = Field(default_factory=list)
    methods: list[ManifestMethod] = Field(default_factory=list)

    @classmethod
    def from_shape(cls, shape: CompositeShape) -> "ShapeManifest":
        return cls(
            schema_version=MANIFEST_SCHEMA_VERSION,
            manifest_type="composite_shape",
            capabilities=[
                ManifestCapability(slot=s.index, capability=type_label(s.capability))
                for s in shape.slots
            ],
            methods=[
                ManifestMethod(
                    name=m.name,
                    slot=m.slot_index,
                    method=m.source.name,
                    parameters=[type_label(t) for t in m.source.parameter_types],
                    returns=type_label(m.source.return_type),
                )
                for m in shape.methods
            ],
        )

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.model_dump(), sort_keys=False)

    def diff(self, shape: CompositeShape) -> ManifestDiff:
        """Compare this manifest with *shape*."""
        current = ShapeManifest.from_shape(shape)
        recorded = {m.name: m for m in self.methods}
        actual = {m.name: m for m in current.methods}

        result = ManifestDiff(
            added=[n for n in actual if n not in recorded],
            removed=[n for n in recorded if n not in actual],
            changed=[
                n for n in actual
                if n in recorded and actual[n] != recorded[n]
            ],
        )
        common_recorded = [n for n in recorded if n in actual]
        common_actual = [n for n in actual if n in recorded]
        result.reordered = (
            common_recorded != common_actual
            or self.capabilities != current.capabilities
        )

        if not result.matches:
            logger.info(
                "Shape %s drifted from manifest: added=%s removed=%s changed=%s reordered=%s",
                shape.component_name,
                result.added,
                result.removed,
                result.changed,
                result.reordered,
            )
        return result


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class ManifestLoader:
    """Loads and caches shape manifests from YAML files."""

    _cache: ClassVar[dict[str, ShapeManifest]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the manifest cache (useful in tests)."""
        cls._cache.clear()

    def load(self, path: Path) -> ShapeManifest:
        """Load a manifest from a YAML file.

        Args:
            path: Path to the YAML manifest file.

        Returns:
            Validated ``ShapeManifest`` instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            TypeError: If the YAML root is not a mapping.
            yaml.YAMLError: If the file contains invalid YAML.
            pydantic.ValidationError: If the YAML does not match the schema.
        """
        key = str(path.resolve())
        if key in self._cache:
            logger.debug("Shape manifest cache hit: %s", key)
            return self._cache[key]

        if not path.exists():
            raise FileNotFoundError(f"Shape manifest file not found: {path}")

        with open(path) as fh:
            manifest = self._validate(yaml.safe_load(fh), str(path))
        self._cache[key] = manifest

        logger.debug(
            "Loaded shape manifest: capabilities=%d, methods=%d",
            len(manifest.capabilities),
            len(manifest.methods),
        )
        return manifest

    def load_from_string(self, yaml_str: str) -> ShapeManifest:
        """Load a manifest from a YAML string (convenience for testing)."""
        return self._validate(yaml.safe_load(yaml_str), "string")

    @staticmethod
    def _validate(raw: object, source: str) -> ShapeManifest:
        if not isinstance(raw, dict):
            raise TypeError(
                f"Expected YAML mapping at root of {source}, "
                f"got {type(raw).__name__}"
            )
        return ShapeManifest.model_validate(raw)
