"""glTF model - an external asset referenced by URL, never fetched here."""

from dataclasses import dataclass

from scene_graph.errors import InvalidParameters
from scene_graph.primitives import NodeKind

KIND = NodeKind.GLTF_MODEL


@dataclass(frozen=True)
class Params:
    url: str

    def __post_init__(self):
        if not isinstance(self.url, str) or not self.url:
            raise InvalidParameters("glTF model url must be a non-empty string")


def to_wire(params: Params) -> dict:
    return {"url": params.url}


def describe(params: Params) -> str:
    return f"from {params.url}"
