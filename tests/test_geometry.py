"""Fast tests for the geometry registry and value types.

Validates that:
- Every node kind has a discovered module with Params, to_wire, describe
- Documented defaults are applied
- Malformed dimensions, vectors, colors and materials raise InvalidParameters
"""

import math

import pytest

from scene_graph import geometry
from scene_graph.errors import InvalidParameters
from scene_graph.geometry import camera, cube, cylinder, group, parametric, plane, sphere
from scene_graph.primitives import (
    MaterialProps,
    MaterialStyle,
    NodeKind,
    Transform,
    camel,
    coerce_color,
    coerce_vec3,
)

# Kinds whose Params have required fields
_REQUIRED = {
    NodeKind.GLTF_MODEL: {"url": "https://example.com/chair.glb"},
    NodeKind.PARAMETRIC: {"equation": "x = u; y = v; z = 0"},
    NodeKind.CAMERA: {"camera_type": "perspective"},
}


def _sample_params(kind):
    mod = geometry.get(kind)
    return mod.Params(**_REQUIRED.get(NodeKind(kind), {}))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    """Every NodeKind must have a discovered module."""

    @pytest.fixture(params=geometry.list_kinds())
    def kind(self, request):
        return request.param

    def test_every_node_kind_registered(self):
        assert set(geometry.list_kinds()) == {k.value for k in NodeKind}

    def test_module_interface(self, kind):
        mod = geometry.get(kind)
        assert mod.KIND == NodeKind(kind)
        assert callable(mod.to_wire), f"{kind} missing to_wire()"
        assert callable(mod.describe), f"{kind} missing describe()"

    def test_sample_params_serialize(self, kind):
        mod = geometry.get(kind)
        params = _sample_params(kind)
        wire = mod.to_wire(params)
        assert isinstance(wire, dict)
        assert isinstance(mod.describe(params), str)

    def test_params_frozen(self, kind):
        params = _sample_params(kind)
        field_name = next(iter(params.__dataclass_fields__))
        with pytest.raises(AttributeError):
            setattr(params, field_name, None)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            geometry.get("torus")


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_cube(self):
        assert cube.to_wire(cube.Params()) == {"geometry": {"width": 1.0, "height": 1.0, "depth": 1.0}}

    def test_sphere(self):
        p = sphere.Params()
        assert (p.radius, p.width_segments, p.height_segments) == (1.0, 32, 16)

    def test_cylinder(self):
        wire = cylinder.to_wire(cylinder.Params())["geometry"]
        assert wire == {
            "radiusTop": 1.0,
            "radiusBottom": 1.0,
            "height": 1.0,
            "radialSegments": 32,
            "heightSegments": 1,
            "openEnded": False,
        }

    def test_plane(self):
        p = plane.Params()
        assert (p.width, p.height, p.width_segments, p.height_segments) == (1.0, 1.0, 1, 1)

    def test_parametric(self):
        wire = parametric.to_wire(parametric.Params("z = u * v"))
        assert wire["uSegments"] == 32 and wire["vSegments"] == 32
        assert wire["uRange"] == [0.0, 1.0]
        assert wire["vRange"] == [0.0, 1.0]

    def test_empty_group(self):
        assert group.to_wire(group.Params()) == {"components": []}
        assert group.describe(group.Params()) == "0 components"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    @pytest.mark.parametrize(
        "factory",
        [
            lambda: cube.Params(width=-1),
            lambda: cube.Params(depth=math.nan),
            lambda: cube.Params(height="tall"),
            lambda: sphere.Params(radius=math.inf),
            lambda: sphere.Params(width_segments=0),
            lambda: cylinder.Params(radial_segments=2.5),
            lambda: plane.Params(height_segments=True),
            lambda: sphere.Params(width_segments=10**30),
            lambda: cylinder.Params(radial_segments=10**400),
            lambda: cube.Params(width=10**400),
            lambda: parametric.Params("z = u", u_range=(0, 10**400)),
            lambda: parametric.Params(""),
            lambda: parametric.Params("z = u", u_range=(0, 1, 2)),
            lambda: camera.Params("fisheye"),
            lambda: camera.Params("perspective", fov=180),
            lambda: camera.Params("perspective", near=10, far=1),
            lambda: group.Component(kind="camera"),
            lambda: group.Params(components=({"type": "cube"},)),
        ],
    )
    def test_rejected(self, factory):
        with pytest.raises(InvalidParameters):
            factory()

    def test_zero_dimension_allowed(self):
        assert cube.Params(width=0).width == 0

    def test_orthographic_camera(self):
        p = camera.Params("orthographic", look_at={"x": 0, "y": 0, "z": 0}, near=0.1, far=100)
        wire = camera.to_wire(p)
        assert wire["cameraType"] == "orthographic"
        assert wire["lookAt"] == {"x": 0.0, "y": 0.0, "z": 0.0}
        assert "fov" not in wire


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------


class TestValueTypes:
    def test_vec3_forms(self):
        assert coerce_vec3([1, 2, 3]) == (1.0, 2.0, 3.0)
        assert coerce_vec3({"x": 1, "y": 2, "z": 3}) == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize("bad", [[1, 2], "xyz", {"x": 1, "y": 2}, [1, math.nan, 0], None])
    def test_vec3_rejected(self, bad):
        with pytest.raises(InvalidParameters):
            coerce_vec3(bad)

    def test_color_forms(self):
        assert coerce_color("red") == "red"
        assert coerce_color({"r": 1, "g": 0, "b": 0}) == (1.0, 0.0, 0.0)
        with pytest.raises(InvalidParameters):
            coerce_color("")

    def test_transform_omits_unset(self):
        t = Transform(position=(1, 2, 3))
        assert t.to_dict() == {"position": {"x": 1.0, "y": 2.0, "z": 3.0}}

    def test_material_props_wire(self):
        m = MaterialProps(type="standard", color=(1, 0, 0), flat_shading=True, opacity=0.5)
        assert m.type is MaterialStyle.STANDARD
        assert m.to_dict() == {
            "type": "standard",
            "color": {"r": 1.0, "g": 0.0, "b": 0.0},
            "opacity": 0.5,
            "flatShading": True,
        }

    @pytest.mark.parametrize("kwargs", [{"opacity": 1.5}, {"side": "inside"}, {"type": "glossy"}])
    def test_material_props_rejected(self, kwargs):
        with pytest.raises(InvalidParameters):
            MaterialProps(**{"type": "basic", **kwargs})

    def test_camel(self):
        assert camel("normal_map_url") == "normalMapUrl"
        assert camel("fov") == "fov"
