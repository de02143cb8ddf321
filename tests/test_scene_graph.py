"""Tests for the scene registry and the node-store operations.

Validates that:
- Scenes are created once, looked up, locked and reset
- Creation, overwrite, reparenting and both delete modes keep the
  parent/child links consistent
- Cameras, materials and animations follow their lookup rules
- Random create/reparent/delete sequences never break check_invariants()
"""

import threading

import numpy as np
import pytest

from scene_graph import operations as ops
from scene_graph.config import Config
from scene_graph.describe import describe_scene, hierarchy_tree
from scene_graph.errors import AlreadyExists, CyclicParent, InvalidParameters, NotFound
from scene_graph.geometry import camera, cube, group, sphere
from scene_graph.primitives import MaterialProps, NodeKind, Transform
from scene_graph.registry import SceneRegistry
from scene_graph.scene import DanglingReference, Keyframe, Material


@pytest.fixture
def registry():
    return SceneRegistry()


@pytest.fixture
def scene(registry):
    return registry.create_scene("s1")


def _cube(scene, oid, parent=None, **kwargs):
    return ops.create_node(scene, oid, NodeKind.CUBE, cube.Params(), parent_id=parent, **kwargs)


def _camera(scene, cid, parent=None, active=False, **kwargs):
    params = camera.Params("perspective", fov=60)
    return ops.create_camera(scene, cid, params, parent_id=parent, set_as_active=active, **kwargs)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_first_scene_becomes_active(self, registry):
        registry.create_scene("a")
        registry.create_scene("b")
        assert registry.active_scene == "a"
        assert registry.list_scenes() == ["a", "b"]
        assert "b" in registry and len(registry) == 2

    def test_duplicate_scene(self, registry):
        registry.create_scene("s1")
        with pytest.raises(AlreadyExists, match="Scene with ID s1 already exists"):
            registry.create_scene("s1")

    def test_missing_scene(self, registry):
        with pytest.raises(NotFound, match="Scene with ID s2 not found"):
            registry.get_scene("s2")
        with pytest.raises(NotFound):
            with registry.lock("s2"):
                pass

    def test_empty_scene_id(self, registry):
        with pytest.raises(InvalidParameters):
            registry.create_scene("")

    def test_set_active_scene(self, registry):
        registry.create_scene("a")
        registry.create_scene("b")
        registry.set_active_scene("b")
        assert registry.active_scene == "b"
        with pytest.raises(NotFound):
            registry.set_active_scene("c")
        assert registry.active_scene == "b"

    def test_background_color(self, registry):
        s = registry.create_scene("s", background_color={"r": 0, "g": 0, "b": 0})
        assert s.background_color == (0.0, 0.0, 0.0)

    def test_reset(self, registry):
        registry.create_scene("a")
        registry.reset()
        assert len(registry) == 0
        assert registry.active_scene is None

    def test_waiting_lock_survives_reset(self, registry):
        scene = registry.create_scene("s1")
        got, errors = [], []

        def waiter():
            try:
                with registry.lock("s1") as s:
                    got.append(s)
            except Exception as e:  # surfaced by the assertion below
                errors.append(e)

        with registry.lock("s1"):
            t = threading.Thread(target=waiter)
            t.start()
            # Waiter is now blocked on the scene lock, past the lookup
            t.join(timeout=0.2)
            assert t.is_alive()
            registry.reset()
        t.join()
        assert errors == []
        assert got == [scene]

    def test_lock_serializes_writers(self, registry):
        registry.create_scene("s1")
        errors = []

        def writer(prefix):
            try:
                for i in range(50):
                    with registry.lock("s1") as s:
                        _cube(s, f"{prefix}{i}")
            except Exception as e:  # surfaced by the assertion below
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert not errors
        scene = registry.get_scene("s1")
        assert len(scene.objects) == 200
        assert scene.check_invariants() == []


# ---------------------------------------------------------------------------
# Creation and overwrite
# ---------------------------------------------------------------------------


class TestCreate:
    def test_root_node(self, scene):
        node = _cube(scene, "c1")
        assert node.parent is None and node.children == []
        assert [n.id for n in scene.roots()] == ["c1"]

    def test_child_node(self, scene):
        _cube(scene, "table")
        _cube(scene, "lamp", parent="table")
        assert scene.objects["table"].children == ["lamp"]
        assert scene.objects["lamp"].parent == "table"

    def test_missing_parent_inserts_nothing(self, scene):
        with pytest.raises(NotFound, match="Object with ID nope not found in scene s1"):
            _cube(scene, "c1", parent="nope")
        assert scene.objects == {}

    def test_wrong_params_type(self, scene):
        with pytest.raises(InvalidParameters):
            ops.create_node(scene, "c1", "cube", sphere.Params())

    def test_overwrite_keeps_children_and_moves(self, scene):
        _cube(scene, "a")
        _cube(scene, "b")
        _cube(scene, "x", parent="a")
        _cube(scene, "kid", parent="x")
        ops.create_node(scene, "x", NodeKind.SPHERE, sphere.Params(radius=2), parent_id="b")
        x = scene.objects["x"]
        assert x.kind is NodeKind.SPHERE
        assert x.children == ["kid"]
        assert x.parent == "b"
        assert scene.objects["a"].children == []
        assert scene.objects["b"].children == ["x"]
        assert scene.check_invariants() == []

    def test_overwrite_under_own_descendant_rejected(self, scene):
        _cube(scene, "x")
        _cube(scene, "kid", parent="x")
        with pytest.raises(CyclicParent):
            _cube(scene, "x", parent="kid")
        assert scene.objects["x"].parent is None

    def test_strict_overwrite(self, scene):
        _cube(scene, "c1")
        with pytest.raises(AlreadyExists):
            _cube(scene, "c1", allow_overwrite=False)

    def test_camera_replaced_by_cube(self, scene):
        _camera(scene, "cam", active=True)
        _cube(scene, "cam")
        assert "cam" not in scene.cameras
        assert scene.active_camera is None
        assert scene.check_invariants() == []

    def test_group_components_are_not_nodes(self, scene):
        parts = (group.Component("cube"), group.Component("sphere", Transform(position=(0, 1, 0))))
        ops.create_node(scene, "g", NodeKind.GROUP, group.Params(parts))
        assert list(scene.objects) == ["g"]
        assert len(scene.objects["g"].to_dict()["components"]) == 2


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


class TestHierarchy:
    @pytest.fixture
    def chain(self, scene):
        _cube(scene, "a")
        _cube(scene, "b", parent="a")
        _cube(scene, "c", parent="b")
        return scene

    def test_reparent(self, chain):
        ops.set_parent(chain, "c", "a")
        assert chain.objects["a"].children == ["b", "c"]
        assert chain.objects["b"].children == []

    def test_detach(self, chain):
        ops.set_parent(chain, "b", None)
        assert chain.objects["b"].parent is None
        assert chain.objects["a"].children == []
        assert chain.objects["b"].children == ["c"]

    def test_reparent_same_parent_no_duplicate(self, chain):
        ops.set_parent(chain, "b", "a")
        assert chain.objects["a"].children == ["b"]

    @pytest.mark.parametrize("target", ["a", "b", "c"])
    def test_cycle_rejected(self, chain, target):
        with pytest.raises(CyclicParent):
            ops.set_parent(chain, "a", target)
        assert chain.objects["a"].parent is None
        assert chain.check_invariants() == []

    def test_cycle_allowed_when_permissive(self, chain):
        ops.set_parent(chain, "a", "c", reject_cycles=False)
        problems = chain.check_invariants()
        assert any("cycle" in p for p in problems)
        # Traversals terminate
        assert sorted(chain.descendants("a")) == ["b", "c"]
        assert "a" in describe_scene(chain)

    def test_missing_parent(self, chain):
        with pytest.raises(NotFound):
            ops.set_parent(chain, "c", "zzz")
        assert chain.objects["c"].parent == "b"

    def test_ancestors(self, chain):
        assert list(chain.ancestors("c")) == ["b", "a"]
        assert chain.is_ancestor("a", "c")
        assert not chain.is_ancestor("c", "a")


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


class TestDelete:
    @pytest.fixture
    def tree(self, scene):
        _cube(scene, "root")
        _cube(scene, "a", parent="root")
        _cube(scene, "a1", parent="a")
        _cube(scene, "a2", parent="a")
        _cube(scene, "a1x", parent="a1")
        return scene

    def test_recursive(self, tree):
        removed = ops.delete_object(tree, "a")
        assert removed == ["a2", "a1x", "a1", "a"]
        assert list(tree.objects) == ["root"]
        assert tree.objects["root"].children == []

    def test_non_recursive_promotes_to_grandparent(self, tree):
        assert ops.delete_object(tree, "a", recursive=False) == ["a"]
        assert tree.objects["root"].children == ["a1", "a2"]
        assert tree.objects["a1"].parent == "root"
        assert tree.objects["a1"].children == ["a1x"]
        assert tree.check_invariants() == []

    def test_non_recursive_root_makes_roots(self, tree):
        ops.delete_object(tree, "root", recursive=False)
        assert tree.objects["a"].parent is None
        assert [n.id for n in tree.roots()] == ["a"]

    def test_missing(self, tree):
        with pytest.raises(NotFound):
            ops.delete_object(tree, "ghost")
        assert len(tree.objects) == 5

    def test_deleting_active_camera(self, scene):
        _cube(scene, "rig")
        _camera(scene, "cam", parent="rig", active=True)
        ops.delete_object(scene, "rig")
        assert scene.cameras == {}
        assert scene.active_camera is None


# ---------------------------------------------------------------------------
# Cameras, materials, animations
# ---------------------------------------------------------------------------


class TestCameras:
    def test_camera_in_both_maps(self, scene):
        node = _camera(scene, "cam")
        assert scene.objects["cam"] is node
        assert scene.cameras["cam"] is node
        assert scene.active_camera is None

    def test_set_active(self, scene):
        _camera(scene, "cam")
        ops.set_active_camera(scene, "cam")
        assert scene.active_camera == "cam"

    def test_non_camera_cannot_be_active(self, scene):
        _cube(scene, "c1")
        with pytest.raises(NotFound, match="Camera with ID c1 not found in scene s1"):
            ops.set_active_camera(scene, "c1")


class TestMaterials:
    def test_apply_keeps_inline(self, scene):
        inline = MaterialProps(type="basic", color="red")
        ops.create_node(scene, "c1", NodeKind.CUBE, cube.Params(), material=inline)
        ops.create_material(scene, "wood", Material(type="standard", texture_url="https://x.test/wood.png"))
        ops.apply_material(scene, "c1", "wood")
        node = scene.objects["c1"]
        assert node.material == inline
        assert node.material_id == "wood"
        assert scene.resolve_material(node).texture_url == "https://x.test/wood.png"

    def test_apply_missing_material(self, scene):
        _cube(scene, "c1")
        with pytest.raises(NotFound, match="Material with ID m not found in scene s1"):
            ops.apply_material(scene, "c1", "m")

    def test_set_material_replaces(self, scene):
        _cube(scene, "c1")
        ops.set_material(scene, "c1", MaterialProps(type="phong", opacity=0.3))
        ops.set_material(scene, "c1", MaterialProps(type="basic"))
        assert scene.objects["c1"].material.to_dict() == {"type": "basic"}

    def test_dangling_material(self, scene):
        _cube(scene, "c1")
        ops.create_material(scene, "m", Material(type="basic"))
        ops.apply_material(scene, "c1", "m")
        del scene.materials["m"]
        assert scene.dangling_references() == [DanglingReference("material", "c1", "m")]
        assert "(missing)" in describe_scene(scene)


class TestAnimations:
    def test_create(self, scene):
        _cube(scene, "c1")
        anim = ops.create_animation(
            scene,
            "spin",
            "c1",
            "rotation",
            [{"time": 0, "value": [0, 0, 0]}, Keyframe(1, [0, 3.14, 0], "easeInOut")],
            duration=2,
            loop=True,
        )
        assert len(anim.keyframes) == 2
        assert anim.to_dict()["keyframes"][1]["easing"] == "easeInOut"

    def test_missing_target(self, scene):
        with pytest.raises(NotFound):
            ops.create_animation(scene, "spin", "ghost", "rotation", [])
        assert scene.animations == {}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"property": "size"},
            {"duration": -1},
            {"duration": float("nan")},
            {"keyframes": [{"time": 0}]},
            {"keyframes": [{"time": 0, "value": 1, "easing": "wobble"}]},
        ],
    )
    def test_invalid(self, scene, kwargs):
        _cube(scene, "c1")
        args = {"property": "position", "keyframes": [], "duration": 1.0, **kwargs}
        with pytest.raises(InvalidParameters):
            ops.create_animation(scene, "a", "c1", **args)
        assert scene.animations == {}

    def test_target_deleted_leaves_dangling(self, scene):
        _cube(scene, "c1")
        ops.create_animation(scene, "fade", "c1", "opacity", [{"time": 0, "value": 1}])
        ops.delete_object(scene, "c1")
        assert "fade" in scene.animations
        assert scene.dangling_references() == [DanglingReference("animation", "fade", "c1")]


# ---------------------------------------------------------------------------
# Snapshots and descriptions
# ---------------------------------------------------------------------------


class TestSnapshot:
    def test_scene_info_is_independent(self, scene):
        _cube(scene, "a")
        _cube(scene, "b", parent="a")
        info = ops.scene_info(scene)
        info["objects"]["a"]["children"].append("zzz")
        assert scene.objects["a"].children == ["b"]

    def test_scene_info_filters(self, scene):
        _cube(scene, "a")
        _camera(scene, "cam", active=True)
        info = ops.scene_info(scene, include_objects=False)
        assert "objects" not in info
        assert info["cameraCount"] == 1
        assert info["objectCount"] == 2
        assert info["activeCamera"] == "cam"
        assert info["cameras"]["cam"]["cameraType"] == "perspective"

    def test_partial_transform_update(self, scene):
        ops.create_node(
            scene, "c1", NodeKind.CUBE, cube.Params(), transform=Transform(position=(1, 2, 3))
        )
        ops.set_transform(scene, "c1", scale=(2, 2, 2))
        snap = scene.objects["c1"].to_dict()
        assert snap["position"] == {"x": 1.0, "y": 2.0, "z": 3.0}
        assert snap["scale"] == {"x": 2.0, "y": 2.0, "z": 2.0}
        assert "rotation" not in snap

    def test_bad_transform_changes_nothing(self, scene):
        _cube(scene, "c1")
        with pytest.raises(InvalidParameters):
            ops.set_transform(scene, "c1", position=(1, 2, 3), scale=(1, 2))
        assert scene.objects["c1"].transform.position is None

    def test_describe_and_tree(self, scene):
        _cube(scene, "table")
        _cube(scene, "lamp", parent="table")
        _camera(scene, "cam", active=True)
        text = describe_scene(scene)
        assert text.splitlines()[0] == 'Scene "s1"  3 objects, 1 camera (active: cam)'
        assert "    lamp  cube 1 x 1 x 1" in text
        tree = hierarchy_tree(scene)
        assert len(tree.children) == 2


# ---------------------------------------------------------------------------
# Randomized sequences
# ---------------------------------------------------------------------------


class TestRandomSequences:
    """Random create/reparent/delete sequences keep the structure consistent."""

    @pytest.mark.parametrize("seed", range(10))
    def test_invariants_hold(self, seed):
        rng = np.random.default_rng(seed)
        policy = Config().policy
        scene = SceneRegistry().create_scene("r")
        pool = [f"n{i}" for i in range(12)]

        for _ in range(200):
            op = rng.integers(4)
            oid = str(rng.choice(pool))
            existing = list(scene.objects)
            parent = str(rng.choice(existing)) if existing and rng.random() < 0.7 else None
            try:
                if op == 0:
                    _cube(scene, oid, parent=parent, allow_overwrite=policy.allow_overwrite)
                elif op == 1 and oid in scene.objects:
                    ops.set_parent(scene, oid, parent)
                elif op == 2 and oid in scene.objects:
                    before = set(scene.objects)
                    removed = ops.delete_object(scene, oid, recursive=bool(rng.integers(2)))
                    assert set(removed) == before - set(scene.objects)
                elif op == 3:
                    _camera(scene, oid, parent=parent, active=bool(rng.integers(2)))
            except CyclicParent:
                pass
            assert scene.check_invariants() == [], f"seed={seed}"
