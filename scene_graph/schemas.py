"""Parameter shapes of every catalog tool.

Field names are the camelCase names agents send over the wire. Each
model only checks shape and types; semantic checks (dimensions >= 0,
ids that must exist, cycles) happen in the core, so direct Python callers
get the same guarantees.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AnyUrl, BaseModel, ConfigDict, Field

from scene_graph.geometry.group import Component
from scene_graph.primitives import (
    AnimatedProperty,
    CameraType,
    Color,
    Easing,
    MaterialProps,
    MaterialStyle,
    Transform,
    Vec3,
)

Id = Annotated[str, Field(min_length=1)]
Segments = Annotated[int, Field(ge=1)]
Unit = Annotated[float, Field(ge=0, le=1)]


class _Params(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Shared shapes
# ---------------------------------------------------------------------------


class Vector3(_Params):
    x: float
    y: float
    z: float

    def as_tuple(self) -> Vec3:
        return (self.x, self.y, self.z)


class RGB(_Params):
    r: float
    g: float
    b: float


ColorSpec = Union[str, RGB]


def to_color(spec: ColorSpec | None) -> Color | None:
    if spec is None or isinstance(spec, str):
        return spec
    return (spec.r, spec.g, spec.b)


class MaterialSpec(_Params):
    type: MaterialStyle
    color: Optional[ColorSpec] = None
    wireframe: Optional[bool] = None
    transparent: Optional[bool] = None
    opacity: Optional[Unit] = None
    metalness: Optional[Unit] = None
    roughness: Optional[Unit] = None
    emissive: Optional[ColorSpec] = None
    flatShading: Optional[bool] = None
    side: Optional[Literal["front", "back", "double"]] = None

    def to_props(self) -> MaterialProps:
        return MaterialProps(
            type=self.type,
            color=to_color(self.color),
            wireframe=self.wireframe,
            transparent=self.transparent,
            opacity=self.opacity,
            metalness=self.metalness,
            roughness=self.roughness,
            emissive=to_color(self.emissive),
            flat_shading=self.flatShading,
            side=self.side,
        )


class _Placed(_Params):
    position: Optional[Vector3] = None
    rotation: Optional[Vector3] = None
    scale: Optional[Vector3] = None

    def transform(self) -> Transform:
        return Transform(
            position=self.position.as_tuple() if self.position else None,
            rotation=self.rotation.as_tuple() if self.rotation else None,
            scale=self.scale.as_tuple() if self.scale else None,
        )


class _NodeParams(_Placed):
    sceneId: Id
    objectId: Id
    material: Optional[MaterialSpec] = None
    parentId: Optional[Id] = None

    def material_props(self) -> MaterialProps | None:
        return self.material.to_props() if self.material is not None else None


# ---------------------------------------------------------------------------
# Scenes
# ---------------------------------------------------------------------------


class CreateScene(_Params):
    sceneId: Id
    backgroundColor: Optional[ColorSpec] = None
    ambientLightColor: Optional[ColorSpec] = None
    ambientLightIntensity: Optional[float] = None


class SetActiveScene(_Params):
    sceneId: Id


class ListScenes(_Params):
    pass


class GetSceneInfo(_Params):
    sceneId: Id
    includeObjects: bool = True
    includeCameras: bool = True


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class CreateCube(_NodeParams):
    width: float = 1.0
    height: float = 1.0
    depth: float = 1.0


class CreateSphere(_NodeParams):
    radius: float = 1.0
    widthSegments: Segments = 32
    heightSegments: Segments = 16


class CreateCylinder(_NodeParams):
    radiusTop: float = 1.0
    radiusBottom: float = 1.0
    height: float = 1.0
    radialSegments: Segments = 32
    heightSegments: Segments = 1
    openEnded: bool = False


class CreatePlane(_NodeParams):
    width: float = 1.0
    height: float = 1.0
    widthSegments: Segments = 1
    heightSegments: Segments = 1


class LoadGLTFModel(_NodeParams):
    url: AnyUrl


class CreateParametricGeometry(_NodeParams):
    equation: Annotated[str, Field(min_length=1)]
    uSegments: Segments = 32
    vSegments: Segments = 32
    uRange: tuple[float, float] = (0.0, 1.0)
    vRange: tuple[float, float] = (0.0, 1.0)


class ComponentSpec(_Placed):
    type: Literal["cube", "sphere", "cylinder", "plane"]
    material: Optional[MaterialSpec] = None
    geometry: Optional[dict[str, Any]] = None

    def to_component(self) -> Component:
        return Component(
            kind=self.type,
            transform=self.transform(),
            material=self.material.to_props() if self.material is not None else None,
            geometry=self.geometry or {},
        )


class CreateCompoundObject(_NodeParams):
    components: list[ComponentSpec]


class CreateCamera(_Placed):
    sceneId: Id
    cameraId: Id
    type: CameraType
    lookAt: Optional[Vector3] = None
    fov: Optional[float] = None
    near: Optional[float] = None
    far: Optional[float] = None
    parentId: Optional[Id] = None
    setAsActive: bool = False


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


class SetObjectTransform(_Placed):
    sceneId: Id
    objectId: Id


class SetObjectMaterial(_Params):
    sceneId: Id
    objectId: Id
    material: MaterialSpec


class SetObjectParent(_Params):
    sceneId: Id
    objectId: Id
    parentId: Optional[Id]  # required; null detaches


class DeleteObject(_Params):
    sceneId: Id
    objectId: Id
    recursive: bool = True


class SetActiveCamera(_Params):
    sceneId: Id
    cameraId: Id


# ---------------------------------------------------------------------------
# Materials and animation
# ---------------------------------------------------------------------------


class CreateTextureMaterial(_Params):
    sceneId: Id
    materialId: Id
    type: MaterialStyle
    textureUrl: AnyUrl
    color: Optional[ColorSpec] = None
    normalMapUrl: Optional[AnyUrl] = None
    bumpMapUrl: Optional[AnyUrl] = None
    roughnessMapUrl: Optional[AnyUrl] = None
    metalnessMapUrl: Optional[AnyUrl] = None
    emissiveMapUrl: Optional[AnyUrl] = None
    properties: Optional[dict[str, Any]] = None


class ApplyMaterialToObject(_Params):
    sceneId: Id
    objectId: Id
    materialId: Id


class KeyframeSpec(_Params):
    time: float
    value: Any
    easing: Optional[Easing] = None


class CreateAnimation(_Params):
    sceneId: Id
    animationId: Id
    targetId: Id
    property: AnimatedProperty
    keyframes: list[KeyframeSpec]
    duration: Annotated[float, Field(ge=0)] = 1.0
    loop: bool = False
