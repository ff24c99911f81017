"""
Block model definitions and their resolution.

A model reference is resolved by loading its parent chain, merging it from the
most basic ancestor toward the requested model (textures overwrite key by key,
element lists concatenate), then following '#variable' texture references until
every entry is a literal texture path.
"""

import logging
from dataclasses import dataclass, field

from blockmesh.blockstate import ModelRef
from blockmesh.errors import BlockMeshError, CycleError, NotFoundError, ParseError
from blockmesh.locations import normalize_location
from blockmesh.settings import DEFAULT_NAMESPACE, ELEMENT_ANGLES

logger = logging.getLogger(__name__)

FACE_NAMES = ('up', 'down', 'east', 'west', 'south', 'north')
AXES = ('x', 'y', 'z')


def _vec3(value, what: str) -> tuple[float, float, float]:
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError) as err:
        raise ParseError(f'{what} must be three numbers, got {value!r}') from err
    return (x, y, z)


@dataclass(frozen=True)
class ElementFace:
    texture: str
    uv: tuple[float, float, float, float] | None = None
    cullface: str | None = None
    tintindex: int | None = None

    @classmethod
    def from_json(cls, data: dict) -> 'ElementFace':
        uv = data.get('uv')
        if uv is not None:
            try:
                u1, v1, u2, v2 = (float(c) for c in uv)
            except (TypeError, ValueError) as err:
                raise ParseError(f'face uv must be four numbers, got {uv!r}') from err
            uv = (u1, v1, u2, v2)
        return cls(str(data.get('texture', '')), uv, data.get('cullface'), data.get('tintindex'))


@dataclass(frozen=True)
class ElementRotation:
    origin: tuple[float, float, float] = (8.0, 8.0, 8.0)
    axis: str = 'y'
    angle: float = 0.0

    @classmethod
    def from_json(cls, data: dict) -> 'ElementRotation':
        axis = data.get('axis', 'y')
        if axis not in AXES:
            raise ParseError(f'element rotation axis must be one of {AXES}, got {axis!r}')
        try:
            angle = float(data.get('angle', 0.0))
        except (TypeError, ValueError) as err:
            raise ParseError(f'element rotation angle must be a number, got {data.get("angle")!r}') from err
        if angle not in ELEMENT_ANGLES:
            raise ParseError(f'element rotation angle must be one of {ELEMENT_ANGLES}, got {angle}')
        return cls(_vec3(data.get('origin', (8, 8, 8)), 'rotation origin'), axis, angle)


@dataclass(frozen=True)
class Element:
    from_: tuple[float, float, float]
    to: tuple[float, float, float]
    faces: dict = field(default_factory=dict)
    rotation: ElementRotation | None = None

    @classmethod
    def from_json(cls, data: dict) -> 'Element':
        faces = {}
        for face_name, face_data in (data.get('faces') or {}).items():
            if face_name not in FACE_NAMES:
                raise ParseError(f'unknown face direction {face_name!r}')
            faces[face_name] = ElementFace.from_json(face_data)
        rotation = data.get('rotation')
        return cls(
            _vec3(data.get('from', (0, 0, 0)), 'element from'),
            _vec3(data.get('to', (16, 16, 16)), 'element to'),
            faces,
            ElementRotation.from_json(rotation) if rotation else None,
        )

    @property
    def center(self) -> tuple[float, float, float]:
        return tuple((a + b) / 2.0 for a, b in zip(self.from_, self.to))


@dataclass
class ModelDefinition:
    location: str
    parent: str | None = None
    textures: dict[str, str] | None = None
    elements: list[Element] | None = None

    @classmethod
    def from_json(cls, location: str, data, namespace: str = DEFAULT_NAMESPACE) -> 'ModelDefinition':
        try:
            if not isinstance(data, dict):
                raise ParseError('model file must hold an object')
            parent = data.get('parent')
            textures = data.get('textures')
            elements = data.get('elements')
            return cls(
                location,
                normalize_location(parent, namespace) if parent else None,
                {k: str(v) for k, v in textures.items()} if textures is not None else None,
                [Element.from_json(e) for e in elements] if elements is not None else None,
            )
        except (AttributeError, TypeError) as err:
            raise ParseError(f'malformed model file: {err}', path=location) from err
        except BlockMeshError as err:
            err.path = err.path or location
            raise


@dataclass
class ModelInstance:
    location: str
    textures: dict[str, str]
    elements: list[Element]
    x: int = 0
    y: int = 0
    uvlock: bool = False


def resolve_texture(textures: dict, ref: str, path: str | None = None) -> str:
    """Follow '#name' indirections in `textures` until a literal path remains."""
    seen = []
    while ref.startswith('#'):
        name = ref[1:]
        if name in seen:
            chain = ' -> '.join(f'#{n}' for n in seen + [name])
            raise CycleError(f'texture variable cycle {chain}', path=path)
        seen.append(name)
        if name not in textures:
            raise NotFoundError(f'undefined texture variable #{name}', path=path)
        ref = textures[name]
    return ref


def resolve_textures_completely(textures: dict, path: str | None = None) -> dict[str, str]:
    return {name: resolve_texture(textures, value, path) for name, value in textures.items()}


def merge_chain(chain: list[ModelDefinition]) -> tuple[dict, list]:
    """`chain` is [requested, parent, ..., root]; merge from the root down."""
    textures = {}
    elements = []
    for model in reversed(chain):
        if model.textures:
            textures.update(model.textures)
        if model.elements:
            elements.extend(model.elements)
    return textures, elements


def resolve_model(source, ref: ModelRef) -> ModelInstance:
    chain = source.load_block_model_recursive(ref.model)
    textures, elements = merge_chain(chain)
    textures = resolve_textures_completely(textures, ref.model)
    logger.debug('resolved %s: %d textures, %d elements (parents: %s)',
                 ref.model, len(textures), len(elements),
                 ', '.join(m.location for m in chain[1:]) or 'none')
    return ModelInstance(ref.model, textures, elements, ref.x, ref.y, ref.uvlock)


def resolve_models(source, refs: list[ModelRef]) -> list[ModelInstance]:
    return [resolve_model(source, ref) for ref in refs]
