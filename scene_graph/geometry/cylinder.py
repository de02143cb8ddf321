"""Cylinder - a (possibly tapered, possibly open) cylinder along Y.

Parameters:
    radius_top:      Radius of the top cap
    radius_bottom:   Radius of the bottom cap
    height:          Length along Y
    radial_segments: Segments around the circumference
    height_segments: Segments along the height
    open_ended:      True = no caps
"""

from dataclasses import dataclass

from scene_graph.primitives import NodeKind, check_dimension, check_segments

KIND = NodeKind.CYLINDER


@dataclass(frozen=True)
class Params:
    radius_top: float = 1.0
    radius_bottom: float = 1.0
    height: float = 1.0
    radial_segments: int = 32
    height_segments: int = 1
    open_ended: bool = False

    def __post_init__(self):
        check_dimension(self.radius_top, "radiusTop")
        check_dimension(self.radius_bottom, "radiusBottom")
        check_dimension(self.height, "height")
        check_segments(self.radial_segments, "radialSegments")
        check_segments(self.height_segments, "heightSegments")


def to_wire(params: Params) -> dict:
    return {
        "geometry": {
            "radiusTop": params.radius_top,
            "radiusBottom": params.radius_bottom,
            "height": params.height,
            "radialSegments": params.radial_segments,
            "heightSegments": params.height_segments,
            "openEnded": params.open_ended,
        }
    }


def describe(params: Params) -> str:
    if params.radius_top == params.radius_bottom:
        radius = f"radius={params.radius_top:g}"
    else:
        radius = f"radius={params.radius_top:g}/{params.radius_bottom:g}"
    open_str = ", open" if params.open_ended else ""
    return f"{radius}, height={params.height:g}{open_str}"
