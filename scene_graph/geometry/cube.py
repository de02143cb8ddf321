"""Cube - an axis-aligned box.

Parameters:
    width:  Size along X
    height: Size along Y
    depth:  Size along Z
"""

from dataclasses import dataclass

from scene_graph.primitives import NodeKind, check_dimension

KIND = NodeKind.CUBE


@dataclass(frozen=True)
class Params:
    width: float = 1.0
    height: float = 1.0
    depth: float = 1.0

    def __post_init__(self):
        check_dimension(self.width, "width")
        check_dimension(self.height, "height")
        check_dimension(self.depth, "depth")


def to_wire(params: Params) -> dict:
    return {
        "geometry": {
            "width": params.width,
            "height": params.height,
            "depth": params.depth,
        }
    }


def describe(params: Params) -> str:
    return f"{params.width:g} x {params.height:g} x {params.depth:g}"
