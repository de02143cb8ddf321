"""In-memory 3D scene-graph store driven by a catalog of agent commands.

Scenes hold typed nodes (primitives, glTF references, parametric surfaces,
compound groups, cameras) in a parent/child hierarchy, plus a material
library and keyframe animations. Nothing is rendered or fetched: the store
only keeps descriptions and answers with structured snapshots.

Usage:
    from scene_graph import CommandCatalog

    catalog = CommandCatalog()
    catalog.execute("createScene", {"sceneId": "s1"})
    catalog.execute("createCube", {"sceneId": "s1", "objectId": "c1"})
    info = catalog.execute("getSceneInfo", {"sceneId": "s1"}).payload["sceneInfo"]
"""

from scene_graph.commands import CommandCatalog, CommandResult
from scene_graph.config import Config
from scene_graph.describe import describe_scene, hierarchy_tree
from scene_graph.errors import (
    AlreadyExists,
    CyclicParent,
    InvalidParameters,
    NotFound,
    SceneGraphError,
)
from scene_graph.registry import SceneRegistry
from scene_graph.scene import Node, Scene

__all__ = [
    "CommandCatalog",
    "CommandResult",
    "Config",
    "SceneRegistry",
    "Scene",
    "Node",
    "describe_scene",
    "hierarchy_tree",
    "SceneGraphError",
    "NotFound",
    "AlreadyExists",
    "CyclicParent",
    "InvalidParameters",
]
