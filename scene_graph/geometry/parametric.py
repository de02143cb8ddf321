"""Parametric surface - described by an equation string over (u, v).

The equation is stored verbatim; it is evaluated by whatever renders the
scene, never here.

Parameters:
    equation:   Surface equation, e.g. "x = u; y = v; z = sin(u * v)"
    u_segments: Samples along u
    v_segments: Samples along v
    u_range:    (u_min, u_max)
    v_range:    (v_min, v_max)
"""

from dataclasses import dataclass

import numpy as np

from scene_graph.errors import InvalidParameters
from scene_graph.primitives import NodeKind, check_segments

KIND = NodeKind.PARAMETRIC


def _coerce_range(value, name: str) -> tuple[float, float]:
    try:
        arr = np.asarray(value, dtype=float)
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameters(f"{name} must be two numbers, got {value!r}") from None
    if arr.shape != (2,) or not np.all(np.isfinite(arr)):
        raise InvalidParameters(f"{name} must be two finite numbers, got {value!r}")
    return (float(arr[0]), float(arr[1]))


@dataclass(frozen=True)
class Params:
    equation: str
    u_segments: int = 32
    v_segments: int = 32
    u_range: tuple[float, float] = (0.0, 1.0)
    v_range: tuple[float, float] = (0.0, 1.0)

    def __post_init__(self):
        if not isinstance(self.equation, str) or not self.equation.strip():
            raise InvalidParameters("equation must be a non-empty string")
        check_segments(self.u_segments, "uSegments")
        check_segments(self.v_segments, "vSegments")
        object.__setattr__(self, "u_range", _coerce_range(self.u_range, "uRange"))
        object.__setattr__(self, "v_range", _coerce_range(self.v_range, "vRange"))


def to_wire(params: Params) -> dict:
    return {
        "equation": params.equation,
        "uSegments": params.u_segments,
        "vSegments": params.v_segments,
        "uRange": list(params.u_range),
        "vRange": list(params.v_range),
    }


def describe(params: Params) -> str:
    (u0, u1), (v0, v1) = params.u_range, params.v_range
    return f"u in [{u0:g}, {u1:g}], v in [{v0:g}, {v1:g}]"
