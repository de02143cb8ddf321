"""Scene entities - nodes, cameras, materials, animations and the scene itself.

A Scene owns four tables:

    objects     id -> Node, every addressable node (cameras included)
    cameras     id -> Node, the same Node objects as in `objects`
    materials   id -> Material, the reusable material library
    animations  id -> Animation, keyframe tracks targeting nodes

Structural invariants (checked by Scene.check_invariants()):
    - node.parent is None or names an existing node whose children list
      contains node.id, and every child id names a node whose parent is
      the owner of that list
    - child lists never hold duplicates
    - no node is its own ancestor
    - every camera id is also an object id, holding the same Node
    - active_camera is None or a camera id

Materials and animations may hold dangling ids once their target is
deleted. They are reported by dangling_references(), never rewritten.

Mutations live in scene_graph.operations; this module only holds the
data and read-only helpers.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterator

from scene_graph import geometry
from scene_graph.errors import camera_not_found, material_not_found, object_not_found
from scene_graph.primitives import (
    AnimatedProperty,
    Color,
    Easing,
    MaterialProps,
    MaterialStyle,
    NodeKind,
    Transform,
    camel,
    check_dimension,
    coerce_color,
    coerce_enum,
    color_to_wire,
)

# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass
class Node:
    """An addressable entity in a scene's hierarchy.

    Attributes:
        id: Unique within its scene
        kind: Node kind, selects the geometry module describing `params`
        params: The kind module's Params instance
        transform: Position / rotation / scale
        material: Inline material, if any
        material_id: Reference into the scene's material library
        parent: Parent node id, None for roots
        children: Ordered child ids, no duplicates
    """

    id: str
    kind: NodeKind
    params: object
    transform: Transform = field(default_factory=Transform)
    material: MaterialProps | None = None
    material_id: str | None = None
    parent: str | None = None
    children: list[str] = field(default_factory=list)

    @property
    def is_camera(self) -> bool:
        return self.kind == NodeKind.CAMERA

    def to_dict(self) -> dict:
        """Wire snapshot of this node (a fresh, independent dict)."""
        out: dict[str, Any] = {"type": self.kind.value}
        out.update(geometry.get(self.kind).to_wire(self.params))
        out.update(self.transform.to_dict())
        if self.material is not None:
            out["material"] = self.material.to_dict()
        if self.material_id is not None:
            out["materialId"] = self.material_id
        out["parent"] = self.parent
        out["children"] = list(self.children)
        return copy.deepcopy(out)


# ---------------------------------------------------------------------------
# Material library and animations
# ---------------------------------------------------------------------------


_MAP_FIELDS = (
    "texture_url",
    "normal_map_url",
    "bump_map_url",
    "roughness_map_url",
    "metalness_map_url",
    "emissive_map_url",
)


@dataclass
class Material:
    """A reusable, named material in a scene's library.

    Map URLs are stored as opaque strings and never fetched.
    """

    type: MaterialStyle
    color: Color | None = None
    texture_url: str | None = None
    normal_map_url: str | None = None
    bump_map_url: str | None = None
    roughness_map_url: str | None = None
    metalness_map_url: str | None = None
    emissive_map_url: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.type = coerce_enum(MaterialStyle, self.type, "material type")
        if self.color is not None:
            self.color = coerce_color(self.color)
        self.properties = dict(self.properties or {})

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"type": self.type.value}
        if self.color is not None:
            out["color"] = color_to_wire(self.color)
        for name in _MAP_FIELDS:
            value = getattr(self, name)
            if value is not None:
                out[camel(name)] = value
        if self.properties:
            out["properties"] = copy.deepcopy(self.properties)
        return out


@dataclass(frozen=True)
class Keyframe:
    time: float
    value: Any
    easing: Easing | None = None

    def __post_init__(self):
        if self.easing is not None:
            object.__setattr__(self, "easing", coerce_enum(Easing, self.easing, "easing"))

    def to_dict(self) -> dict:
        out = {"time": self.time, "value": copy.deepcopy(self.value)}
        if self.easing is not None:
            out["easing"] = self.easing.value
        return out


@dataclass
class Animation:
    """A keyframe track driving one property of one node.

    target_id is checked when the animation is created and never again,
    so it may dangle after the target is deleted.
    """

    target_id: str
    property: AnimatedProperty
    keyframes: tuple[Keyframe, ...]
    duration: float = 1.0
    loop: bool = False

    def __post_init__(self):
        self.property = coerce_enum(AnimatedProperty, self.property, "animated property")
        self.keyframes = tuple(self.keyframes)
        check_dimension(self.duration, "duration")

    def to_dict(self) -> dict:
        return {
            "targetId": self.target_id,
            "property": self.property.value,
            "keyframes": [k.to_dict() for k in self.keyframes],
            "duration": self.duration,
            "loop": self.loop,
        }


@dataclass(frozen=True)
class AmbientLight:
    color: Color
    intensity: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "color", coerce_color(self.color, "ambientLightColor"))
        check_dimension(self.intensity, "ambientLightIntensity")

    def to_dict(self) -> dict:
        return {"color": color_to_wire(self.color), "intensity": self.intensity}


@dataclass(frozen=True)
class DanglingReference:
    """A stored id that no longer resolves.

    Attributes:
        kind: "animation" (target gone) or "material" (library entry gone)
        owner_id: Animation id or node id holding the reference
        missing_id: The id that does not resolve
    """

    kind: str
    owner_id: str
    missing_id: str


# ---------------------------------------------------------------------------
# Scene
# ---------------------------------------------------------------------------


@dataclass
class Scene:
    """A named container of nodes, cameras, materials and animations."""

    id: str
    objects: dict[str, Node] = field(default_factory=dict)
    cameras: dict[str, Node] = field(default_factory=dict)
    active_camera: str | None = None
    materials: dict[str, Material] = field(default_factory=dict)
    animations: dict[str, Animation] = field(default_factory=dict)
    background_color: Color | None = None
    ambient_light: AmbientLight | None = None

    # -- lookups ------------------------------------------------------------

    def get_object(self, object_id: str) -> Node:
        try:
            return self.objects[object_id]
        except KeyError:
            raise object_not_found(object_id, self.id) from None

    def get_camera(self, camera_id: str) -> Node:
        try:
            return self.cameras[camera_id]
        except KeyError:
            raise camera_not_found(camera_id, self.id) from None

    def get_material(self, material_id: str) -> Material:
        try:
            return self.materials[material_id]
        except KeyError:
            raise material_not_found(material_id, self.id) from None

    def resolve_material(self, node: Node) -> Material | None:
        """Library entry referenced by node.material_id, None if unset or gone."""
        if node.material_id is None:
            return None
        return self.materials.get(node.material_id)

    # -- hierarchy ----------------------------------------------------------

    def roots(self) -> list[Node]:
        return [n for n in self.objects.values() if n.parent is None]

    def ancestors(self, object_id: str) -> Iterator[str]:
        """Yield parent, grandparent, ... of a node, stopping on a cycle."""
        seen = {object_id}
        current = self.objects[object_id].parent
        while current is not None and current not in seen:
            yield current
            seen.add(current)
            node = self.objects.get(current)
            current = node.parent if node is not None else None

    def descendants(self, object_id: str) -> list[str]:
        """All transitive children of a node, depth-first, pre-order."""
        out: list[str] = []
        seen = {object_id}
        stack = list(reversed(self.objects[object_id].children))
        while stack:
            cid = stack.pop()
            if cid in seen or cid not in self.objects:
                continue
            seen.add(cid)
            out.append(cid)
            stack.extend(reversed(self.objects[cid].children))
        return out

    def is_ancestor(self, candidate: str, object_id: str) -> bool:
        """True if `candidate` is `object_id` itself or one of its ancestors."""
        return candidate == object_id or candidate in self.ancestors(object_id)

    # -- integrity ----------------------------------------------------------

    def check_invariants(self) -> list[str]:
        """Describe every structural violation; an empty list means consistent."""
        problems: list[str] = []
        for oid, node in self.objects.items():
            if node.id != oid:
                problems.append(f"object key {oid!r} holds node {node.id!r}")
            if node.parent is not None:
                parent = self.objects.get(node.parent)
                if parent is None:
                    problems.append(f"{oid!r} has missing parent {node.parent!r}")
                elif oid not in parent.children:
                    problems.append(f"{oid!r} missing from children of {node.parent!r}")
            if len(set(node.children)) != len(node.children):
                problems.append(f"{oid!r} has duplicate children {node.children}")
            for cid in node.children:
                child = self.objects.get(cid)
                if child is None:
                    problems.append(f"{oid!r} lists missing child {cid!r}")
                elif child.parent != oid:
                    problems.append(f"{oid!r} lists {cid!r} whose parent is {child.parent!r}")
            # Walk up; revisiting any id means the chain loops
            seen = {oid}
            current = node.parent
            while current is not None and current in self.objects:
                if current in seen:
                    problems.append(f"{oid!r} is part of a parent cycle")
                    break
                seen.add(current)
                current = self.objects[current].parent
        for cid, cam in self.cameras.items():
            if self.objects.get(cid) is not cam:
                problems.append(f"camera {cid!r} not registered as the same object")
            if not cam.is_camera:
                problems.append(f"camera map entry {cid!r} is a {cam.kind.value}")
        if self.active_camera is not None and self.active_camera not in self.cameras:
            problems.append(f"active camera {self.active_camera!r} is not a camera")
        return problems

    def dangling_references(self) -> list[DanglingReference]:
        out = []
        for aid, anim in self.animations.items():
            if anim.target_id not in self.objects:
                out.append(DanglingReference("animation", aid, anim.target_id))
        for oid, node in self.objects.items():
            if node.material_id is not None and node.material_id not in self.materials:
                out.append(DanglingReference("material", oid, node.material_id))
        return out
