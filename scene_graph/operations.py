"""Node store operations - every mutation and query on a Scene.

Each function validates everything it needs (ids exist, policies allow
the change) before touching the scene, so a raised error never leaves a
partial mutation behind. Callers are expected to hold the scene's lock
(see SceneRegistry.lock) for the duration of a call.

Policies (passed by the command catalog from Config.policy):
    allow_overwrite: creating a node under an existing id replaces it
        instead of raising AlreadyExists
    reject_cycles: reparenting a node under itself or a descendant raises
        CyclicParent instead of silently building a loop
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from scene_graph import geometry
from scene_graph.errors import AlreadyExists, CyclicParent, InvalidParameters
from scene_graph.primitives import (
    MaterialProps,
    NodeKind,
    Transform,
    check_id,
    coerce_enum,
    coerce_optional_vec3,
    color_to_wire,
)
from scene_graph.scene import Animation, Keyframe, Material, Node, Scene

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _detach(scene: Scene, node: Node):
    """Remove node.id from its current parent's child list (parent field untouched)."""
    if node.parent is None:
        return
    parent = scene.objects.get(node.parent)
    if parent is not None:
        parent.children[:] = [cid for cid in parent.children if cid != node.id]


def _attach(parent: Node, child_id: str):
    if child_id not in parent.children:
        parent.children.append(child_id)


def _forget_camera(scene: Scene, object_id: str):
    """Drop a removed/replaced camera from the camera map and active pointer."""
    if scene.cameras.pop(object_id, None) is not None and scene.active_camera == object_id:
        scene.active_camera = None
        log.info("Active camera %r of scene %r removed; no active camera", object_id, scene.id)


def _check_cycle(scene: Scene, object_id: str, parent_id: str):
    if parent_id == object_id or parent_id in scene.descendants(object_id):
        raise CyclicParent(
            f"Cannot set parent of {object_id} to {parent_id} in scene {scene.id}: "
            f"{parent_id} is {object_id} or one of its descendants"
        )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def create_node(
    scene: Scene,
    object_id: str,
    kind: NodeKind | str,
    params,
    transform: Transform | None = None,
    material: MaterialProps | None = None,
    parent_id: str | None = None,
    *,
    allow_overwrite: bool = True,
    reject_cycles: bool = True,
) -> Node:
    """Insert a typed node, optionally under an existing parent.

    Re-creating an existing id replaces that node: the replacement is
    detached from the old parent, keeps the old node's children and is
    attached to `parent_id`. Raises NotFound for a missing parent,
    AlreadyExists when overwriting is disabled, CyclicParent when the
    requested parent sits below the node being replaced.
    """
    check_id(object_id, "objectId")
    kind = coerce_enum(NodeKind, kind, "node type")
    mod = geometry.get(kind)
    if not isinstance(params, mod.Params):
        raise InvalidParameters(
            f"{kind.value} expects {mod.__name__}.Params, got {type(params).__name__}"
        )
    if material is not None and not isinstance(material, MaterialProps):
        raise InvalidParameters(f"material must be MaterialProps, got {type(material).__name__}")

    existing = scene.objects.get(object_id)
    if existing is not None and not allow_overwrite:
        raise AlreadyExists(f"Object with ID {object_id} already exists in scene {scene.id}")
    if parent_id is not None:
        scene.get_object(parent_id)
        if existing is not None and reject_cycles:
            _check_cycle(scene, object_id, parent_id)

    node = Node(
        id=object_id,
        kind=kind,
        params=params,
        transform=transform if transform is not None else Transform(),
        material=material,
    )
    if existing is not None:
        _detach(scene, existing)
        node.children = list(existing.children)
        if existing.is_camera and not node.is_camera:
            _forget_camera(scene, object_id)
        log.info("Replacing %s %r in scene %r", existing.kind.value, object_id, scene.id)

    scene.objects[object_id] = node
    if parent_id is not None:
        _attach(scene.objects[parent_id], object_id)
        node.parent = parent_id
    if node.is_camera:
        scene.cameras[object_id] = node

    log.info(
        "Created %s %r in scene %r%s",
        kind.value,
        object_id,
        scene.id,
        f" under {parent_id!r}" if parent_id is not None else "",
    )
    return node


def create_camera(
    scene: Scene,
    camera_id: str,
    params,
    transform: Transform | None = None,
    parent_id: str | None = None,
    set_as_active: bool = False,
    *,
    allow_overwrite: bool = True,
    reject_cycles: bool = True,
) -> Node:
    """Create a camera node, register it as a camera, optionally activate it.

    All preconditions are checked inside create_node before anything is
    inserted, so a failure applies none of the three effects.
    """
    node = create_node(
        scene,
        camera_id,
        NodeKind.CAMERA,
        params,
        transform=transform,
        parent_id=parent_id,
        allow_overwrite=allow_overwrite,
        reject_cycles=reject_cycles,
    )
    if set_as_active:
        scene.active_camera = camera_id
        log.info("Camera %r is now active in scene %r", camera_id, scene.id)
    return node


# ---------------------------------------------------------------------------
# Transform / material mutation
# ---------------------------------------------------------------------------


def set_transform(
    scene: Scene,
    object_id: str,
    position=None,
    rotation=None,
    scale=None,
) -> Node:
    """Overwrite only the supplied transform fields."""
    node = scene.get_object(object_id)
    position = coerce_optional_vec3(position, "position")
    rotation = coerce_optional_vec3(rotation, "rotation")
    scale = coerce_optional_vec3(scale, "scale")

    if position is not None:
        node.transform.position = position
    if rotation is not None:
        node.transform.rotation = rotation
    if scale is not None:
        node.transform.scale = scale
    log.debug("Transform of %r in scene %r: %s", object_id, scene.id, node.transform)
    return node


def set_material(scene: Scene, object_id: str, material: MaterialProps | None) -> Node:
    """Replace a node's inline material wholesale (no merge)."""
    node = scene.get_object(object_id)
    if material is not None and not isinstance(material, MaterialProps):
        raise InvalidParameters(f"material must be MaterialProps, got {type(material).__name__}")
    node.material = material
    log.info("Material of %r in scene %r replaced", object_id, scene.id)
    return node


def create_material(scene: Scene, material_id: str, material: Material) -> Material:
    """Add (or replace) an entry in the scene's material library."""
    check_id(material_id, "materialId")
    if not isinstance(material, Material):
        raise InvalidParameters(f"material must be Material, got {type(material).__name__}")
    scene.materials[material_id] = material
    log.info("Created %s material %r in scene %r", material.type.value, material_id, scene.id)
    return material


def apply_material(scene: Scene, object_id: str, material_id: str) -> Node:
    """Point a node at a library material. The inline material is kept."""
    node = scene.get_object(object_id)
    scene.get_material(material_id)
    node.material_id = material_id
    log.info("Material %r applied to %r in scene %r", material_id, object_id, scene.id)
    return node


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


def set_parent(
    scene: Scene,
    object_id: str,
    parent_id: str | None,
    *,
    reject_cycles: bool = True,
) -> Node:
    """Move a node under `parent_id`, or to the root when it is None."""
    node = scene.get_object(object_id)
    new_parent = None
    if parent_id is not None:
        new_parent = scene.get_object(parent_id)
        if reject_cycles:
            _check_cycle(scene, object_id, parent_id)

    _detach(scene, node)
    if new_parent is not None:
        _attach(new_parent, object_id)
        node.parent = parent_id
        log.info("Attached %r to %r in scene %r", object_id, parent_id, scene.id)
    else:
        node.parent = None
        log.info("Detached %r from its parent in scene %r", object_id, scene.id)
    return node


def delete_object(scene: Scene, object_id: str, recursive: bool = True) -> list[str]:
    """Delete a node and return the ids removed, in removal order.

    recursive=True removes the whole subtree, children before parents.
    recursive=False hands the node's direct children to its former parent
    (or makes them roots); deeper descendants stay with their parents.

    Animations targeting removed nodes and material references are left
    as they are. A removed camera leaves the camera map, and the active
    camera pointer is cleared if it named it.
    """
    node = scene.get_object(object_id)
    _detach(scene, node)

    if recursive:
        subtree = [object_id, *scene.descendants(object_id)]
        removed = list(reversed(subtree))
        for oid in removed:
            scene.objects.pop(oid)
            _forget_camera(scene, oid)
    else:
        grandparent_id = node.parent
        grandparent = scene.objects.get(grandparent_id) if grandparent_id is not None else None
        for cid in node.children:
            child = scene.objects.get(cid)
            if child is None:
                continue
            if grandparent is None or grandparent_id == cid:
                child.parent = None
            else:
                child.parent = grandparent_id
                _attach(grandparent, cid)
        scene.objects.pop(object_id)
        _forget_camera(scene, object_id)
        removed = [object_id]

    log.info(
        "Deleted %d object(s) from scene %r (root=%r, recursive=%s)",
        len(removed),
        scene.id,
        object_id,
        recursive,
    )
    return removed


# ---------------------------------------------------------------------------
# Cameras and animations
# ---------------------------------------------------------------------------


def set_active_camera(scene: Scene, camera_id: str) -> Node:
    camera = scene.get_camera(camera_id)
    scene.active_camera = camera_id
    log.info("Camera %r is now active in scene %r", camera_id, scene.id)
    return camera


def _as_keyframe(value: Keyframe | Mapping[str, Any]) -> Keyframe:
    if isinstance(value, Keyframe):
        return value
    if isinstance(value, Mapping) and "time" in value and "value" in value:
        return Keyframe(time=value["time"], value=value["value"], easing=value.get("easing"))
    raise InvalidParameters(f"keyframe must have time and value, got {value!r}")


def create_animation(
    scene: Scene,
    animation_id: str,
    target_id: str,
    property,
    keyframes: Iterable[Keyframe | Mapping[str, Any]],
    duration: float = 1.0,
    loop: bool = False,
) -> Animation:
    """Record a keyframe track. The target must exist now; it is not re-checked later."""
    check_id(animation_id, "animationId")
    scene.get_object(target_id)
    animation = Animation(
        target_id=target_id,
        property=property,
        keyframes=tuple(_as_keyframe(k) for k in keyframes),
        duration=duration,
        loop=loop,
    )
    scene.animations[animation_id] = animation
    log.info(
        "Created animation %r (%s of %r, %d keyframes) in scene %r",
        animation_id,
        animation.property.value,
        target_id,
        len(animation.keyframes),
        scene.id,
    )
    return animation


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


def scene_info(scene: Scene, include_objects: bool = True, include_cameras: bool = True) -> dict:
    """Read-only snapshot of a scene; nested values are independent copies."""
    info: dict[str, Any] = {
        "id": scene.id,
        "activeCamera": scene.active_camera,
        "objectCount": len(scene.objects),
        "cameraCount": len(scene.cameras),
        "materialCount": len(scene.materials),
        "animationCount": len(scene.animations),
    }
    if scene.background_color is not None:
        info["backgroundColor"] = color_to_wire(scene.background_color)
    if scene.ambient_light is not None:
        info["ambientLight"] = scene.ambient_light.to_dict()
    if include_objects:
        info["objects"] = {oid: n.to_dict() for oid, n in scene.objects.items()}
    if include_cameras:
        info["cameras"] = {cid: c.to_dict() for cid, c in scene.cameras.items()}
    log.debug("Snapshot of scene %r (%d objects)", scene.id, len(scene.objects))
    return copy.deepcopy(info)
