"""Geometry registry - auto-discovers node-kind modules in this package.

=== HOW TO ADD A NEW KIND ===

Each node kind is a single Python file in this directory. It must define:

1. `KIND`, the NodeKind member it describes
2. A frozen dataclass called `Params` with the kind's documented defaults,
   validating itself in __post_init__
3. `to_wire(params) -> dict`, the keys merged into a node's snapshot
4. `describe(params) -> str`, a short dimension summary for messages

Add the member to NodeKind (scene_graph/primitives.py), then drop the
file here and it's auto-discovered.

Example (scene_graph/geometry/torus.py):

    from dataclasses import dataclass

    from scene_graph.primitives import NodeKind, check_dimension

    KIND = NodeKind.TORUS

    @dataclass(frozen=True)
    class Params:
        radius: float = 1.0
        tube: float = 0.4

        def __post_init__(self):
            check_dimension(self.radius, "radius")
            check_dimension(self.tube, "tube")

    def to_wire(params: Params) -> dict:
        return {"geometry": {"radius": params.radius, "tube": params.tube}}

    def describe(params: Params) -> str:
        return f"radius={params.radius:g}, tube={params.tube:g}"

=== CONVENTIONS ===

    - Params only describe geometry; nothing is tessellated here
    - Field names are snake_case; wire keys are camelCase
    - URLs and equations are stored as opaque strings
"""

from __future__ import annotations

import importlib
import pkgutil

from scene_graph.primitives import NodeKind

_registry: dict[NodeKind, object] = {}


def _discover():
    """Auto-discover kind modules that define KIND + Params."""
    for info in pkgutil.iter_modules(__path__):
        mod = importlib.import_module(f".{info.name}", __package__)
        if hasattr(mod, "KIND") and hasattr(mod, "Params"):
            _registry[mod.KIND] = mod


_discover()


def get(kind: NodeKind | str):
    """Get a kind module. Raises ValueError for an unknown kind."""
    return _registry[NodeKind(kind)]


def list_kinds() -> list[str]:
    """List all available kind names."""
    return sorted(k.value for k in _registry)


def all_kinds() -> dict[NodeKind, object]:
    """Return the full registry {kind: module}."""
    return dict(_registry)
