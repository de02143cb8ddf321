"""Command catalog - the boundary agents talk to.

Every tool takes a flat parameter mapping (camelCase keys), validates it
against its pydantic model, runs the matching operation under the target
scene's lock, and returns a CommandResult:

    payload  {"success": True, ...operation fields} or
             {"success": False, "error": "<message>"}
    text     one-line confirmation of what happened, for the agent

Nothing raises past CommandCatalog.execute(): unknown tools, malformed
parameters and every SceneGraphError become failure payloads. Because all
existence and policy checks run before a mutation starts, a failed call
leaves the scene exactly as it was.

Usage:
    catalog = CommandCatalog()
    catalog.execute("createScene", {"sceneId": "s1"})
    result = catalog.execute("createCube", {"sceneId": "s1", "objectId": "c1"})
    result.payload   # {"success": True, "objectId": "c1", "geometry": "cube", ...}
    result.text      # 'Cube "c1" created successfully in scene "s1".'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from scene_graph import operations as ops
from scene_graph import schemas
from scene_graph.config import Config
from scene_graph.describe import describe_scene
from scene_graph.errors import SceneGraphError
from scene_graph.geometry import camera, cube, cylinder, gltf_model, group, parametric, plane, sphere
from scene_graph.primitives import NodeKind
from scene_graph.registry import SceneRegistry
from scene_graph.scene import AmbientLight, Keyframe, Material, Scene

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    payload: dict
    text: str

    @property
    def success(self) -> bool:
        return bool(self.payload.get("success"))


@dataclass(frozen=True)
class Tool:
    """A catalog entry.

    Attributes:
        name: Wire name of the tool
        schema: Pydantic model for its parameters
        handler: fn(catalog, params, scene) -> (payload fields, text)
        description: One-line summary shown to agents
        scoped: True = runs under the lock of params.sceneId
    """

    name: str
    schema: type[BaseModel]
    handler: Callable
    description: str
    scoped: bool = True


_TOOLS: dict[str, Tool] = {}


def tool(name: str, schema: type[BaseModel], description: str, scoped: bool = True):
    """Register a handler in the catalog under `name`."""

    def register(fn):
        _TOOLS[name] = Tool(name, schema, fn, description, scoped)
        return fn

    return register


def _format_validation(name: str, err: ValidationError) -> str:
    problems = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e["loc"]) or "params"
        problems.append(f"{loc}: {e['msg']}")
    return f"Invalid parameters for {name}: " + "; ".join(problems)


class CommandCatalog:
    """Validates, dispatches and reports every tool call."""

    def __init__(self, registry: SceneRegistry | None = None, config: Config | None = None):
        self.registry = registry if registry is not None else SceneRegistry()
        self.config = config if config is not None else Config()

    @staticmethod
    def tools() -> list[tuple[str, str]]:
        """(name, description) for every tool, sorted by name."""
        return sorted((t.name, t.description) for t in _TOOLS.values())

    @staticmethod
    def json_schema(name: str) -> dict:
        """JSON schema of a tool's parameters. KeyError for unknown tools."""
        return _TOOLS[name].schema.model_json_schema()

    @property
    def _policy(self) -> dict:
        p = self.config.policy
        return {"allow_overwrite": p.allow_overwrite, "reject_cycles": p.reject_cycles}

    def execute(self, name: str, params: dict[str, Any] | None = None) -> CommandResult:
        entry = _TOOLS.get(name)
        if entry is None:
            return self._failure(name, f"Unknown tool: {name}")
        try:
            p = entry.schema.model_validate(params or {})
        except ValidationError as e:
            return self._failure(name, _format_validation(name, e))

        try:
            if entry.scoped:
                with self.registry.lock(p.sceneId) as scene:
                    fields, text = entry.handler(self, p, scene)
            else:
                fields, text = entry.handler(self, p, None)
        except SceneGraphError as e:
            return self._failure(name, str(e))

        log.debug("%s ok: %s", name, text)
        return CommandResult({"success": True, **fields}, text)

    def _failure(self, name: str, message: str) -> CommandResult:
        log.warning("%s failed: %s", name, message)
        return CommandResult({"success": False, "error": message}, f"Error: {message}")

    def _create(self, scene: Scene, p: schemas._NodeParams, kind: NodeKind, params):
        return ops.create_node(
            scene,
            p.objectId,
            kind,
            params,
            transform=p.transform(),
            material=p.material_props(),
            parent_id=p.parentId,
            **self._policy,
        )


# ---------------------------------------------------------------------------
# Scenes
# ---------------------------------------------------------------------------


@tool("createScene", schemas.CreateScene, "Create a new empty scene", scoped=False)
def _create_scene(cat: CommandCatalog, p: schemas.CreateScene, _scene):
    ambient = None
    if p.ambientLightColor is not None:
        intensity = p.ambientLightIntensity if p.ambientLightIntensity is not None else 1.0
        ambient = AmbientLight(schemas.to_color(p.ambientLightColor), intensity)
    cat.registry.create_scene(
        p.sceneId,
        background_color=schemas.to_color(p.backgroundColor),
        ambient_light=ambient,
    )
    return (
        {"sceneId": p.sceneId, "message": "Scene created successfully"},
        f'Scene "{p.sceneId}" created successfully.',
    )


@tool("setActiveScene", schemas.SetActiveScene, "Make a scene the default target", scoped=False)
def _set_active_scene(cat: CommandCatalog, p: schemas.SetActiveScene, _scene):
    cat.registry.set_active_scene(p.sceneId)
    return (
        {"sceneId": p.sceneId, "message": "Active scene set successfully"},
        f'Scene "{p.sceneId}" is now the active scene.',
    )


@tool("listScenes", schemas.ListScenes, "List scene ids and the active scene", scoped=False)
def _list_scenes(cat: CommandCatalog, p: schemas.ListScenes, _scene):
    ids = cat.registry.list_scenes()
    active = cat.registry.active_scene
    text = f"{len(ids)} scene{'s' if len(ids) != 1 else ''}"
    if ids:
        text += ": " + ", ".join(ids) + f" (active: {active})"
    return {"scenes": ids, "activeScene": active}, text + "."


@tool("getSceneInfo", schemas.GetSceneInfo, "Snapshot of a scene's objects and cameras")
def _get_scene_info(cat: CommandCatalog, p: schemas.GetSceneInfo, scene: Scene):
    info = ops.scene_info(scene, p.includeObjects, p.includeCameras)
    return (
        {"sceneInfo": info, "message": "Scene info retrieved successfully"},
        f'Scene information retrieved for "{p.sceneId}".\n{describe_scene(scene)}',
    )


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


@tool("createCube", schemas.CreateCube, "Create a box")
def _create_cube(cat: CommandCatalog, p: schemas.CreateCube, scene: Scene):
    cat._create(scene, p, NodeKind.CUBE, cube.Params(p.width, p.height, p.depth))
    return (
        {"objectId": p.objectId, "geometry": "cube", "message": "Cube created successfully"},
        f'Cube "{p.objectId}" created successfully in scene "{p.sceneId}".',
    )


@tool("createSphere", schemas.CreateSphere, "Create a UV sphere")
def _create_sphere(cat: CommandCatalog, p: schemas.CreateSphere, scene: Scene):
    params = sphere.Params(p.radius, p.widthSegments, p.heightSegments)
    cat._create(scene, p, NodeKind.SPHERE, params)
    return (
        {"objectId": p.objectId, "geometry": "sphere", "message": "Sphere created successfully"},
        f'Sphere "{p.objectId}" created successfully in scene "{p.sceneId}".',
    )


@tool("createCylinder", schemas.CreateCylinder, "Create a (tapered) cylinder")
def _create_cylinder(cat: CommandCatalog, p: schemas.CreateCylinder, scene: Scene):
    params = cylinder.Params(
        radius_top=p.radiusTop,
        radius_bottom=p.radiusBottom,
        height=p.height,
        radial_segments=p.radialSegments,
        height_segments=p.heightSegments,
        open_ended=p.openEnded,
    )
    cat._create(scene, p, NodeKind.CYLINDER, params)
    return (
        {"objectId": p.objectId, "geometry": "cylinder", "message": "Cylinder created successfully"},
        f'Cylinder "{p.objectId}" created successfully in scene "{p.sceneId}".',
    )


@tool("createPlane", schemas.CreatePlane, "Create a flat rectangle")
def _create_plane(cat: CommandCatalog, p: schemas.CreatePlane, scene: Scene):
    params = plane.Params(p.width, p.height, p.widthSegments, p.heightSegments)
    cat._create(scene, p, NodeKind.PLANE, params)
    return (
        {"objectId": p.objectId, "geometry": "plane", "message": "Plane created successfully"},
        f'Plane "{p.objectId}" created successfully in scene "{p.sceneId}".',
    )


@tool("loadGLTFModel", schemas.LoadGLTFModel, "Reference a glTF model by URL")
def _load_gltf(cat: CommandCatalog, p: schemas.LoadGLTFModel, scene: Scene):
    url = str(p.url)
    cat._create(scene, p, NodeKind.GLTF_MODEL, gltf_model.Params(url))
    return (
        {"objectId": p.objectId, "type": "gltfModel", "message": "GLTF model loaded successfully"},
        f'GLTF model "{p.objectId}" loaded from "{url}" in scene "{p.sceneId}".',
    )


@tool(
    "createParametricGeometry",
    schemas.CreateParametricGeometry,
    "Create a parametric surface from an equation",
)
def _create_parametric(cat: CommandCatalog, p: schemas.CreateParametricGeometry, scene: Scene):
    params = parametric.Params(p.equation, p.uSegments, p.vSegments, p.uRange, p.vRange)
    cat._create(scene, p, NodeKind.PARAMETRIC, params)
    return (
        {"objectId": p.objectId, "type": "parametric", "message": "Parametric geometry created successfully"},
        f'Parametric geometry "{p.objectId}" created in scene "{p.sceneId}" with equation: {p.equation}',
    )


@tool("createCompoundObject", schemas.CreateCompoundObject, "Create a group of embedded components")
def _create_compound(cat: CommandCatalog, p: schemas.CreateCompoundObject, scene: Scene):
    components = tuple(c.to_component() for c in p.components)
    cat._create(scene, p, NodeKind.GROUP, group.Params(components))
    n = len(components)
    return (
        {
            "objectId": p.objectId,
            "type": "group",
            "componentsCount": n,
            "message": "Compound object created successfully",
        },
        f'Compound object "{p.objectId}" with {n} components created in scene "{p.sceneId}".',
    )


# ---------------------------------------------------------------------------
# Cameras
# ---------------------------------------------------------------------------


@tool("createCamera", schemas.CreateCamera, "Create a camera, optionally making it active")
def _create_camera(cat: CommandCatalog, p: schemas.CreateCamera, scene: Scene):
    params = camera.Params(
        camera_type=p.type,
        look_at=p.lookAt.as_tuple() if p.lookAt else None,
        fov=p.fov,
        near=p.near,
        far=p.far,
    )
    ops.create_camera(
        scene,
        p.cameraId,
        params,
        transform=p.transform(),
        parent_id=p.parentId,
        set_as_active=p.setAsActive,
        **cat._policy,
    )
    kind = p.type.value
    return (
        {
            "cameraId": p.cameraId,
            "type": kind,
            "isActive": p.setAsActive,
            "message": "Camera created successfully",
        },
        f'{kind.capitalize()} camera "{p.cameraId}" created in scene "{p.sceneId}"'
        f'{" and set as active" if p.setAsActive else ""}.',
    )


@tool("setActiveCamera", schemas.SetActiveCamera, "Make a camera the scene's active camera")
def _set_active_camera(cat: CommandCatalog, p: schemas.SetActiveCamera, scene: Scene):
    ops.set_active_camera(scene, p.cameraId)
    return (
        {"cameraId": p.cameraId, "message": "Active camera set successfully"},
        f'Camera "{p.cameraId}" set as active in scene "{p.sceneId}".',
    )


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


@tool("setObjectTransform", schemas.SetObjectTransform, "Update position, rotation and/or scale")
def _set_transform(cat: CommandCatalog, p: schemas.SetObjectTransform, scene: Scene):
    t = p.transform()
    ops.set_transform(scene, p.objectId, t.position, t.rotation, t.scale)
    return (
        {"objectId": p.objectId, "message": "Object transform updated successfully"},
        f'Object "{p.objectId}" transform updated in scene "{p.sceneId}".',
    )


@tool("setObjectMaterial", schemas.SetObjectMaterial, "Replace an object's inline material")
def _set_material(cat: CommandCatalog, p: schemas.SetObjectMaterial, scene: Scene):
    ops.set_material(scene, p.objectId, p.material.to_props())
    return (
        {"objectId": p.objectId, "message": "Object material updated successfully"},
        f'Object "{p.objectId}" material updated in scene "{p.sceneId}".',
    )


@tool("setObjectParent", schemas.SetObjectParent, "Attach an object to a parent, or detach it (null)")
def _set_parent(cat: CommandCatalog, p: schemas.SetObjectParent, scene: Scene):
    ops.set_parent(scene, p.objectId, p.parentId, reject_cycles=cat.config.policy.reject_cycles)
    if p.parentId is None:
        text = f'Object "{p.objectId}" detached from parent in scene "{p.sceneId}".'
    else:
        text = f'Object "{p.objectId}" attached to parent "{p.parentId}" in scene "{p.sceneId}".'
    return (
        {"objectId": p.objectId, "parentId": p.parentId, "message": "Object parent updated successfully"},
        text,
    )


@tool("deleteObject", schemas.DeleteObject, "Delete an object, with or without its children")
def _delete_object(cat: CommandCatalog, p: schemas.DeleteObject, scene: Scene):
    removed = ops.delete_object(scene, p.objectId, p.recursive)
    return (
        {
            "objectId": p.objectId,
            "recursive": p.recursive,
            "deleted": removed,
            "message": "Object deleted successfully",
        },
        f'Object "{p.objectId}" {"and its children " if p.recursive else ""}'
        f'deleted from scene "{p.sceneId}".',
    )


# ---------------------------------------------------------------------------
# Materials and animation
# ---------------------------------------------------------------------------


@tool("createTextureMaterial", schemas.CreateTextureMaterial, "Add a textured material to the library")
def _create_texture_material(cat: CommandCatalog, p: schemas.CreateTextureMaterial, scene: Scene):

    def url(value):
        return str(value) if value is not None else None

    material = Material(
        type=p.type,
        color=schemas.to_color(p.color),
        texture_url=url(p.textureUrl),
        normal_map_url=url(p.normalMapUrl),
        bump_map_url=url(p.bumpMapUrl),
        roughness_map_url=url(p.roughnessMapUrl),
        metalness_map_url=url(p.metalnessMapUrl),
        emissive_map_url=url(p.emissiveMapUrl),
        properties=p.properties or {},
    )
    ops.create_material(scene, p.materialId, material)
    return (
        {"materialId": p.materialId, "type": p.type.value, "message": "Texture material created successfully"},
        f'Texture material "{p.materialId}" created in scene "{p.sceneId}".',
    )


@tool("applyMaterialToObject", schemas.ApplyMaterialToObject, "Reference a library material from an object")
def _apply_material(cat: CommandCatalog, p: schemas.ApplyMaterialToObject, scene: Scene):
    ops.apply_material(scene, p.objectId, p.materialId)
    return (
        {
            "objectId": p.objectId,
            "materialId": p.materialId,
            "message": "Material applied to object successfully",
        },
        f'Material "{p.materialId}" applied to object "{p.objectId}" in scene "{p.sceneId}".',
    )


@tool("createAnimation", schemas.CreateAnimation, "Record a keyframe animation on an object property")
def _create_animation(cat: CommandCatalog, p: schemas.CreateAnimation, scene: Scene):
    keyframes = [Keyframe(k.time, k.value, k.easing) for k in p.keyframes]
    ops.create_animation(
        scene,
        p.animationId,
        p.targetId,
        p.property,
        keyframes,
        duration=p.duration,
        loop=p.loop,
    )
    prop = p.property.value
    return (
        {
            "animationId": p.animationId,
            "targetId": p.targetId,
            "property": prop,
            "message": "Animation created successfully",
        },
        f'Animation "{p.animationId}" created for {prop} of object "{p.targetId}" in scene "{p.sceneId}".',
    )
