"""
In-process registry of materialized composite types.

Each builder owns one registry.  Entries are keyed by a random build id
so repeated builds, even of the same capability set, never overwrite each
other.  Nothing is persisted and nothing is shared between builders.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Iterator, Optional

from capcompose.composite.schema import CompositeShape

logger = logging.getLogger(__name__)


def new_build_id() -> str:
    return secrets.token_hex(8)


@dataclass(frozen=True)
class RegisteredComposite:
    """A materialized composite type and its interface."""

    build_id: str
    composite_type: type
    interface: type
    shape: CompositeShape


class TypeRegistry:
    """Holds the composite types materialized by one builder."""

    def __init__(self, component_name: str) -> None:
        self.component_name = component_name
        self._entries: dict[str, RegisteredComposite] = {}

    def register(
        self,
        composite_type: type,
        interface: type,
        shape: CompositeShape,
    ) -> RegisteredComposite:
        build_id = new_build_id()
        while build_id in self._entries:
            build_id = new_build_id()
        entry = RegisteredComposite(
            build_id=build_id,
            composite_type=composite_type,
            interface=interface,
            shape=shape,
        )
        self._entries[build_id] = entry
        logger.debug(
            "Registered %s as build %s (%d registered)",
            composite_type.__qualname__,
            build_id,
            len(self._entries),
        )
        return entry

    def get(self, build_id: str) -> Optional[RegisteredComposite]:
        return self._entries.get(build_id)

    def find(self, composite_type: type) -> Optional[RegisteredComposite]:
        for entry in self._entries.values():
            if entry.composite_type is composite_type:
                return entry
        return None

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, build_id: object) -> bool:
        return build_id in self._entries

    def __iter__(self) -> Iterator[RegisteredComposite]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
