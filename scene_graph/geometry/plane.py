"""Plane - a flat rectangle in the XY plane."""

from dataclasses import dataclass

from scene_graph.primitives import NodeKind, check_dimension, check_segments

KIND = NodeKind.PLANE


@dataclass(frozen=True)
class Params:
    width: float = 1.0
    height: float = 1.0
    width_segments: int = 1
    height_segments: int = 1

    def __post_init__(self):
        check_dimension(self.width, "width")
        check_dimension(self.height, "height")
        check_segments(self.width_segments, "widthSegments")
        check_segments(self.height_segments, "heightSegments")


def to_wire(params: Params) -> dict:
    return {
        "geometry": {
            "width": params.width,
            "height": params.height,
            "widthSegments": params.width_segments,
            "heightSegments": params.height_segments,
        }
    }


def describe(params: Params) -> str:
    return f"{params.width:g} x {params.height:g}"
