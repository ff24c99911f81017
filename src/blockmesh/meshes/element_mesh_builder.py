"""
Builds per-element triangle meshes for a resolved block-state.

Vertex format per vertex: 8 floats
  x, y, z      (float32) - position in model units, relative to the element offset
  nx, ny, nz   (float32) - unit normal
  u, v         (float32) - atlas coordinates
Indices: uint32, one quad per face as two triangles (0,1,2,2,3,0).

Transform order per vertex: element rotation about its origin, then block-state
rotation about the block center (X first, then Y), then the rotated element
center is subtracted and kept as the mesh offset. UV-lock only touches UVs.
"""

import logging
from dataclasses import dataclass, field

import glm
import numpy as np

from blockmesh.errors import NotFoundError
from blockmesh.models import resolve_texture
from blockmesh.settings import BLOCK_CENTER, MODEL_UNITS
from blockmesh.tint import TintColor

logger = logging.getLogger(__name__)

FLOATS_PER_VERTEX = 8
VERTEX_FORMAT = '3f 3f 2f'
VERTEX_ATTRS = ('in_position', 'in_normal', 'in_uv')
QUAD_INDICES = (0, 1, 2, 2, 3, 0)

# Emission order of faces within an element
FACE_ORDER = ('up', 'down', 'east', 'west', 'south', 'north')

# face -> (4 x (corner, default uv), normal, vertical)
# corner picks per axis: 0 = element 'from', 1 = element 'to'
_FACE_INFO = {
    'up': ((((1, 1, 0), (1, 0)), ((0, 1, 0), (0, 0)), ((0, 1, 1), (0, 1)), ((1, 1, 1), (1, 1))),
           (0, 1, 0), True),
    'down': ((((1, 0, 1), (0, 0)), ((0, 0, 1), (1, 0)), ((0, 0, 0), (1, 1)), ((1, 0, 0), (0, 1))),
             (0, -1, 0), True),
    'east': ((((1, 0, 0), (1, 1)), ((1, 1, 0), (1, 0)), ((1, 1, 1), (0, 0)), ((1, 0, 1), (0, 1))),
             (1, 0, 0), False),
    'west': ((((0, 0, 1), (1, 1)), ((0, 1, 1), (1, 0)), ((0, 1, 0), (0, 0)), ((0, 0, 0), (0, 1))),
             (-1, 0, 0), False),
    'south': ((((0, 0, 1), (0, 1)), ((1, 0, 1), (1, 1)), ((1, 1, 1), (1, 0)), ((0, 1, 1), (0, 0))),
              (0, 0, 1), False),
    'north': ((((0, 1, 0), (0, 0)), ((1, 1, 0), (1, 0)), ((1, 0, 0), (1, 1)), ((0, 0, 0), (0, 1))),
              (0, 0, -1), False),
}

_AXES = {'x': glm.vec3(1, 0, 0), 'y': glm.vec3(0, 1, 0), 'z': glm.vec3(0, 0, 1)}


def axis_rotation(axis: str, degrees: float) -> glm.mat3:
    """Right-handed rotation: positive angles turn counter-clockwise looking down the axis."""
    return glm.mat3(glm.rotate(glm.radians(degrees), _AXES[axis]))


def model_rotation(x: int, y: int) -> glm.mat3:
    # block-state rotations are clockwise, so both angles are negated
    return axis_rotation('y', -y) * axis_rotation('x', -x)


def rotate_about(point, rotation: glm.mat3, origin) -> glm.vec3:
    o = glm.vec3(*origin)
    return rotation * (glm.vec3(*point) - o) + o


def rotate_uv(u: float, v: float, degrees: float) -> tuple[float, float]:
    """Rotate a 0-1 texture coordinate about (0.5, 0.5)."""
    if not degrees:
        return u, v
    p = rotate_about((u, 0.0, v), axis_rotation('y', degrees), (0.5, 0.0, 0.5))
    return p.x, p.z


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@dataclass
class ElementMesh:
    positions: np.ndarray   # (n, 3) float32
    normals: np.ndarray     # (n, 3) float32
    uvs: np.ndarray         # (n, 2) float32
    indices: np.ndarray     # (m,) uint32
    has_transparency: bool
    offset: tuple[float, float, float]

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    def vertex_data(self) -> np.ndarray:
        """Interleaved float32 rows laid out as VERTEX_FORMAT."""
        return np.hstack((self.positions, self.normals, self.uvs)).astype('f4')

    def vertex_content(self, buffer) -> tuple:
        """(buffer, format, *attribute names) entry for a vertex array built over vertex_data()."""
        return (buffer, VERTEX_FORMAT, *VERTEX_ATTRS)


@dataclass
class BlockMeshSet:
    meshes: list[ElementMesh] = field(default_factory=list)
    tint: TintColor | None = None

    @property
    def has_transparency(self) -> bool:
        return any(m.has_transparency for m in self.meshes)


class ElementMeshBuilder:
    """Accumulates the faces of one element in element space, then places them."""

    def __init__(self, atlas, textures: dict, model: str | None = None, uv_rotation=(0.0, 0.0)):
        self.atlas = atlas
        self.textures = textures
        self.model = model
        self.uv_rotation = uv_rotation  # (x, y) degrees, zero unless uv-locked
        self.positions = []
        self.normals = []
        self.uvs = []
        self.indices = []
        self.has_transparency = False

    @property
    def is_empty(self) -> bool:
        return not self.positions

    def append_face(self, face_name: str, face, from_, to) -> bool:
        """Emit one quad. Returns False (face skipped) if its texture variable is undefined."""
        try:
            texture = resolve_texture(self.textures, face.texture, self.model)
        except NotFoundError as err:
            logger.warning('could not resolve texture variable %s on %s face: %s',
                           face.texture, face_name, err)
            return False
        if not texture:
            logger.warning('%s face of %s has no texture', face_name, self.model)
            return False

        try:
            tile = self.atlas.lookup(texture)
        except NotFoundError as err:
            err.path = err.path or self.model
            raise
        if tile.has_transparency:
            self.has_transparency = True

        corners, normal, vertical = _FACE_INFO[face_name]
        uv_degrees = self.uv_rotation[1] if vertical else self.uv_rotation[0]

        base = len(self.positions)
        self.indices.extend(base + i for i in QUAD_INDICES)
        for corner, (u, v) in corners:
            self.positions.append(tuple(to[i] if corner[i] else from_[i] for i in range(3)))
            self.normals.append(normal)
            if face.uv is not None:
                u1, v1, u2, v2 = face.uv
                u = _lerp(u1 / MODEL_UNITS, u2 / MODEL_UNITS, u)
                v = _lerp(v1 / MODEL_UNITS, v2 / MODEL_UNITS, v)
            u, v = rotate_uv(u, v, uv_degrees)
            self.uvs.append(tile.atlas_uv(u, v))
        return True

    def build(self, element_rotation: glm.mat3, element_origin, block_rotation: glm.mat3,
              center) -> ElementMesh:
        def place(p):
            p = rotate_about(p, element_rotation, element_origin)
            return rotate_about(p, block_rotation, BLOCK_CENTER)

        offset = place(center)
        normal_matrix = glm.transpose(glm.inverse(block_rotation * element_rotation))

        positions = [tuple(place(p) - offset) for p in self.positions]
        normals = [tuple(glm.normalize(normal_matrix * glm.vec3(*n))) for n in self.normals]

        return ElementMesh(
            positions=np.array(positions, dtype='f4').reshape(-1, 3),
            normals=np.array(normals, dtype='f4').reshape(-1, 3),
            uvs=np.array(self.uvs, dtype='f4').reshape(-1, 2),
            indices=np.array(self.indices, dtype='u4'),
            has_transparency=self.has_transparency,
            offset=tuple(offset),
        )


def build_element_mesh(element, instance, atlas) -> ElementMesh | None:
    """Mesh one element of a resolved model instance; None if none of its faces resolved."""
    uv_rotation = (-instance.x, -instance.y) if instance.uvlock else (0.0, 0.0)
    builder = ElementMeshBuilder(atlas, instance.textures, instance.location, uv_rotation)
    for face_name in FACE_ORDER:
        face = element.faces.get(face_name)
        if face is not None:
            builder.append_face(face_name, face, element.from_, element.to)
    if builder.is_empty:
        return None

    if element.rotation is not None:
        element_rotation = axis_rotation(element.rotation.axis, element.rotation.angle)
        element_origin = element.rotation.origin
    else:
        element_rotation = glm.mat3(1.0)
        element_origin = tuple(BLOCK_CENTER)

    return builder.build(element_rotation, element_origin,
                         model_rotation(instance.x, instance.y), element.center)


def build_block_meshes(instances, atlas, tint: TintColor | None = None) -> BlockMeshSet:
    meshes = []
    for instance in instances:
        for element in instance.elements:
            mesh = build_element_mesh(element, instance, atlas)
            if mesh is not None:
                meshes.append(mesh)
    return BlockMeshSet(meshes, tint)
