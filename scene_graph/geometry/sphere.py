"""Sphere - a UV sphere.

Parameters:
    radius:          Sphere radius
    width_segments:  Horizontal segment count
    height_segments: Vertical segment count
"""

from dataclasses import dataclass

from scene_graph.primitives import NodeKind, check_dimension, check_segments

KIND = NodeKind.SPHERE


@dataclass(frozen=True)
class Params:
    radius: float = 1.0
    width_segments: int = 32
    height_segments: int = 16

    def __post_init__(self):
        check_dimension(self.radius, "radius")
        check_segments(self.width_segments, "widthSegments")
        check_segments(self.height_segments, "heightSegments")


def to_wire(params: Params) -> dict:
    return {
        "geometry": {
            "radius": params.radius,
            "widthSegments": params.width_segments,
            "heightSegments": params.height_segments,
        }
    }


def describe(params: Params) -> str:
    return f"radius={params.radius:g}, {params.width_segments}x{params.height_segments} segments"
