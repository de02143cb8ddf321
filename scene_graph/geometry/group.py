"""Group - a compound object made of embedded components.

Components are opaque child data: each has its own kind, transform,
inline material and raw geometry mapping, but none of them is an
addressable node. Addressable children are attached through the normal
parent/child links instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from scene_graph.errors import InvalidParameters
from scene_graph.primitives import (
    COMPONENT_KINDS,
    MaterialProps,
    NodeKind,
    Transform,
    coerce_enum,
)

KIND = NodeKind.GROUP


@dataclass(frozen=True)
class Component:
    """One embedded part of a compound object.

    Attributes:
        kind: cube, sphere, cylinder or plane
        transform: Placement relative to the group
        material: Inline material, if any
        geometry: Raw geometry parameters, stored as given
    """

    kind: NodeKind
    transform: Transform = field(default_factory=Transform)
    material: MaterialProps | None = None
    geometry: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        kind = coerce_enum(NodeKind, self.kind, "component type")
        if kind not in COMPONENT_KINDS:
            allowed = ", ".join(sorted(k.value for k in COMPONENT_KINDS))
            raise InvalidParameters(f"component type must be one of {allowed}, got {kind.value!r}")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "geometry", dict(self.geometry))

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"type": self.kind.value, **self.transform.to_dict()}
        if self.material is not None:
            out["material"] = self.material.to_dict()
        if self.geometry:
            out["geometry"] = dict(self.geometry)
        return out


@dataclass(frozen=True)
class Params:
    components: tuple[Component, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "components", tuple(self.components))
        for c in self.components:
            if not isinstance(c, Component):
                raise InvalidParameters(f"group components must be Component, got {type(c).__name__}")


def to_wire(params: Params) -> dict:
    return {"components": [c.to_dict() for c in params.components]}


def describe(params: Params) -> str:
    n = len(params.components)
    kinds = ", ".join(c.kind.value for c in params.components)
    return f"{n} component{'s' if n != 1 else ''}" + (f" ({kinds})" if kinds else "")
