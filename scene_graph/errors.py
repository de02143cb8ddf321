"""Error types raised by the scene-graph core.

Core functions raise these; only the command catalog turns them into
``{"success": False, "error": ...}`` payloads.
"""

from __future__ import annotations


class SceneGraphError(Exception):
    """Base class for every failure the core reports to callers."""


class NotFound(SceneGraphError):
    """A scene, object, camera, material or animation target is missing."""


class AlreadyExists(SceneGraphError):
    """An identifier is already taken (scenes always, nodes in strict mode)."""


class CyclicParent(SceneGraphError):
    """A reparent would make a node its own ancestor."""


class InvalidParameters(SceneGraphError):
    """Geometry, vector, color or keyframe values are malformed."""


def scene_not_found(scene_id: str) -> NotFound:
    return NotFound(f"Scene with ID {scene_id} not found")


def object_not_found(object_id: str, scene_id: str) -> NotFound:
    return NotFound(f"Object with ID {object_id} not found in scene {scene_id}")


def camera_not_found(camera_id: str, scene_id: str) -> NotFound:
    return NotFound(f"Camera with ID {camera_id} not found in scene {scene_id}")


def material_not_found(material_id: str, scene_id: str) -> NotFound:
    return NotFound(f"Material with ID {material_id} not found in scene {scene_id}")
