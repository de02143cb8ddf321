"""Value types shared by every part of the scene graph.

Nothing here is computed for rendering: vectors, colors and materials are
stored exactly as described by the caller, after a shape check.

Vector convention:
    - A Vec3 is a plain (x, y, z) tuple of floats
    - Accepted inputs are any 3-sequence or a mapping with x/y/z keys
    - Wire form (payloads, snapshots) is {"x": .., "y": .., "z": ..}

Color convention:
    - Either a string token ("red", "#ff0000") or an (r, g, b) triple
    - Wire form of a triple is {"r": .., "g": .., "b": ..}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Union

import numpy as np

from scene_graph.errors import InvalidParameters

Vec3 = tuple[float, float, float]
Color = Union[str, tuple[float, float, float]]


class NodeKind(str, Enum):
    """Every kind of addressable node a scene can hold."""

    CUBE = "cube"
    SPHERE = "sphere"
    CYLINDER = "cylinder"
    PLANE = "plane"
    GLTF_MODEL = "gltfModel"
    PARAMETRIC = "parametric"
    GROUP = "group"
    CAMERA = "camera"


class MaterialStyle(str, Enum):
    """Render style tag of a material (maps to a renderer material class)."""

    BASIC = "basic"
    STANDARD = "standard"
    PHONG = "phong"
    PHYSICAL = "physical"
    LAMBERT = "lambert"
    NORMAL = "normal"
    DEPTH = "depth"
    TOON = "toon"


class CameraType(str, Enum):
    PERSPECTIVE = "perspective"
    ORTHOGRAPHIC = "orthographic"


class AnimatedProperty(str, Enum):
    POSITION = "position"
    ROTATION = "rotation"
    SCALE = "scale"
    COLOR = "color"
    OPACITY = "opacity"


class Easing(str, Enum):
    LINEAR = "linear"
    EASE_IN = "easeIn"
    EASE_OUT = "easeOut"
    EASE_IN_OUT = "easeInOut"
    BOUNCE = "bounce"


# Kinds a group component may take (components are never addressable)
COMPONENT_KINDS = frozenset(
    {NodeKind.CUBE, NodeKind.SPHERE, NodeKind.CYLINDER, NodeKind.PLANE}
)

# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def coerce_vec3(value: Any, name: str = "vector") -> Vec3:
    """Normalize a 3-sequence or {x, y, z} mapping to a tuple of floats.

    Raises InvalidParameters for wrong arity, non-numeric or non-finite
    components.
    """
    if isinstance(value, Mapping):
        try:
            value = (value["x"], value["y"], value["z"])
        except KeyError as e:
            raise InvalidParameters(f"{name} is missing component {e}") from None
    if isinstance(value, (str, bytes)):
        raise InvalidParameters(f"{name} must be 3 numbers, got {value!r}")
    try:
        arr = np.asarray(value, dtype=float)
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameters(f"{name} must be 3 numbers, got {value!r}") from None
    if arr.shape != (3,):
        raise InvalidParameters(f"{name} must have 3 components, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidParameters(f"{name} components must be finite, got {value!r}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def coerce_optional_vec3(value: Any, name: str = "vector") -> Vec3 | None:
    return None if value is None else coerce_vec3(value, name)


def coerce_color(value: Any, name: str = "color") -> Color:
    """Normalize a color token or RGB triple/mapping."""
    if isinstance(value, str):
        if not value:
            raise InvalidParameters(f"{name} token must not be empty")
        return value
    if isinstance(value, Mapping):
        try:
            value = (value["r"], value["g"], value["b"])
        except KeyError as e:
            raise InvalidParameters(f"{name} is missing channel {e}") from None
    try:
        arr = np.asarray(value, dtype=float)
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameters(f"{name} must be a string or RGB triple") from None
    if arr.shape != (3,) or not np.all(np.isfinite(arr)):
        raise InvalidParameters(f"{name} must be a string or RGB triple, got {value!r}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def check_id(value: Any, name: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidParameters(f"{name} must be a non-empty string, got {value!r}")


def coerce_enum(enum_cls, value: Any, name: str):
    """Look up an enum member by value, raising InvalidParameters if unknown."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidParameters(f"{name} must be one of {allowed}, got {value!r}") from None


def check_unit_interval(value: float | None, name: str) -> None:
    if value is not None and not 0.0 <= value <= 1.0:
        raise InvalidParameters(f"{name} must be within [0, 1], got {value}")


# Largest segment count a 32-bit index buffer can address
MAX_SEGMENTS = 2**31 - 1


def _finite_float(value: Any) -> float | None:
    """value as a finite float, None for non-numbers, overflow, inf and nan."""
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        return None
    try:
        f = float(value)
    except OverflowError:
        return None
    return f if np.isfinite(f) else None


def check_dimension(value: float, name: str) -> None:
    f = _finite_float(value)
    if f is None or f < 0:
        raise InvalidParameters(f"{name} must be a finite number >= 0, got {value!r}")


def check_segments(value: int, name: str) -> None:
    f = _finite_float(value)
    if f is None or int(value) != value or not 1 <= value <= MAX_SEGMENTS:
        raise InvalidParameters(f"{name} must be an integer in [1, {MAX_SEGMENTS}], got {value!r}")


def vec3_to_dict(v: Vec3 | None) -> dict | None:
    if v is None:
        return None
    return {"x": v[0], "y": v[1], "z": v[2]}


def color_to_wire(c: Color | None) -> str | dict | None:
    if c is None or isinstance(c, str):
        return c
    return {"r": c[0], "g": c[1], "b": c[2]}


def camel(name: str) -> str:
    """snake_case field name -> camelCase wire key."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# ---------------------------------------------------------------------------
# Transform and inline material
# ---------------------------------------------------------------------------


@dataclass
class Transform:
    """Position, rotation (radians) and scale of a node.

    Attributes:
        position: (x, y, z) relative to the parent, None = renderer default
        rotation: Euler angles (x, y, z), None = renderer default
        scale: Per-axis scale, None = renderer default
    """

    position: Vec3 | None = None
    rotation: Vec3 | None = None
    scale: Vec3 | None = None

    def __post_init__(self):
        self.position = coerce_optional_vec3(self.position, "position")
        self.rotation = coerce_optional_vec3(self.rotation, "rotation")
        self.scale = coerce_optional_vec3(self.scale, "scale")

    def to_dict(self) -> dict:
        """Wire form; unset fields are omitted."""
        out = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if v is not None:
                out[f.name] = vec3_to_dict(v)
        return out


@dataclass(frozen=True)
class MaterialProps:
    """An inline material attached directly to a node.

    Attributes:
        type: Render style tag
        color: Base color
        opacity, metalness, roughness: Values in [0, 1]
        emissive: Emissive color
        side: "front", "back" or "double"
    """

    type: MaterialStyle
    color: Color | None = None
    wireframe: bool | None = None
    transparent: bool | None = None
    opacity: float | None = None
    metalness: float | None = None
    roughness: float | None = None
    emissive: Color | None = None
    flat_shading: bool | None = None
    side: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "type", coerce_enum(MaterialStyle, self.type, "material type"))
        if self.color is not None:
            object.__setattr__(self, "color", coerce_color(self.color))
        if self.emissive is not None:
            object.__setattr__(self, "emissive", coerce_color(self.emissive, "emissive"))
        check_unit_interval(self.opacity, "opacity")
        check_unit_interval(self.metalness, "metalness")
        check_unit_interval(self.roughness, "roughness")
        if self.side is not None and self.side not in ("front", "back", "double"):
            raise InvalidParameters(f"side must be front, back or double, got {self.side!r}")

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"type": self.type.value}
        for f in fields(self):
            if f.name == "type":
                continue
            v = getattr(self, f.name)
            if v is None:
                continue
            out[camel(f.name)] = color_to_wire(v) if f.name in ("color", "emissive") else v
        return out
