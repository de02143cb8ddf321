"""Camera - a viewpoint node.

A camera lives in both the scene's object map and its camera map under
the same id. Only the projection is described here; position and
parenting come from the node itself.

Parameters:
    camera_type: "perspective" or "orthographic"
    look_at:     Point the camera faces, None = renderer default
    fov:         Vertical field of view in degrees (perspective)
    near, far:   Clipping distances
"""

from __future__ import annotations

from dataclasses import dataclass

from scene_graph.errors import InvalidParameters
from scene_graph.primitives import (
    CameraType,
    NodeKind,
    Vec3,
    check_dimension,
    coerce_enum,
    coerce_optional_vec3,
    vec3_to_dict,
)

KIND = NodeKind.CAMERA


@dataclass(frozen=True)
class Params:
    camera_type: CameraType
    look_at: Vec3 | None = None
    fov: float | None = None
    near: float | None = None
    far: float | None = None

    def __post_init__(self):
        object.__setattr__(self, "camera_type", coerce_enum(CameraType, self.camera_type, "camera type"))
        object.__setattr__(self, "look_at", coerce_optional_vec3(self.look_at, "lookAt"))
        if self.fov is not None and not 0 < self.fov < 180:
            raise InvalidParameters(f"fov must be within (0, 180) degrees, got {self.fov}")
        for name in ("near", "far"):
            value = getattr(self, name)
            if value is not None:
                check_dimension(value, name)
        if self.near is not None and self.far is not None and self.near >= self.far:
            raise InvalidParameters(f"near ({self.near}) must be less than far ({self.far})")


def to_wire(params: Params) -> dict:
    out: dict = {"cameraType": params.camera_type.value}
    if params.look_at is not None:
        out["lookAt"] = vec3_to_dict(params.look_at)
    for name in ("fov", "near", "far"):
        value = getattr(params, name)
        if value is not None:
            out[name] = value
    return out


def describe(params: Params) -> str:
    parts = [params.camera_type.value]
    if params.fov is not None:
        parts.append(f"fov={params.fov:g}")
    if params.look_at is not None:
        x, y, z = params.look_at
        parts.append(f"looking at ({x:+.2f}, {y:+.2f}, {z:+.2f})")
    return ", ".join(parts)
