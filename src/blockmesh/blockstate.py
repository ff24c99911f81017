"""
Parses block-state keys and matches them against a blockstate file's cases.

Produces, for a key such as 'minecraft:redstone_wire[east=side,power=5]':
  - the ordered list of model references of every matching case
    (first candidate of each case, never a weighted random pick)
  - an optional tint request for blocks colored by a rule instead of the atlas

Blockstate files in the 'variants' form are converted to multipart cases, one
case per variant key.
"""

import logging
from dataclasses import dataclass, field

from blockmesh.errors import BlockMeshError, ParseError
from blockmesh.locations import normalize_location
from blockmesh.settings import DEFAULT_NAMESPACE, MODEL_ROTATIONS
from blockmesh.tint import TintRequest, tint_request_for

logger = logging.getLogger(__name__)


@dataclass
class BlockStateKey:
    name: str
    properties: dict[str, str]
    raw: str


def parse_block_state(raw: str, namespace: str = DEFAULT_NAMESPACE) -> BlockStateKey:
    if '[' in raw:
        name, props = raw.split('[', 1)
        props = props.rstrip(']')
    else:
        name, props = raw, ''

    name = name.strip()
    if not name:
        raise ParseError('empty block name', block_state=raw)

    properties = {}
    if props.strip():
        for prop in props.split(','):
            if '=' not in prop:
                raise ParseError(f'malformed property {prop!r}, expected key=value', block_state=raw)
            k, v = prop.split('=', 1)
            properties[k.strip()] = v.strip()

    return BlockStateKey(normalize_location(name, namespace), properties, raw)


def _state_value(value) -> str:
    # JSON booleans compare as the strings used in block-state keys
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


@dataclass
class PropertyPredicate:
    """property -> accepted values. Unlisted properties pass; listed but missing ones fail."""
    constraints: dict[str, frozenset] = field(default_factory=dict)

    def matches(self, properties: dict) -> bool:
        for prop, accepted in self.constraints.items():
            if properties.get(prop) not in accepted:
                return False
        return True


@dataclass
class AnyOf:
    predicates: tuple

    def matches(self, properties: dict) -> bool:
        return any(p.matches(properties) for p in self.predicates)


@dataclass
class AllOf:
    predicates: tuple

    def matches(self, properties: dict) -> bool:
        return all(p.matches(properties) for p in self.predicates)


def parse_predicate(when) -> PropertyPredicate | AnyOf | AllOf:
    """Parse a multipart 'when' clause. None (no clause) always matches."""
    if when is None:
        return PropertyPredicate()
    if not isinstance(when, dict):
        raise ParseError(f'predicate must be an object, got {type(when).__name__}')

    for combinator, cls in (('OR', AnyOf), ('AND', AllOf)):
        if combinator in when:
            terms = when[combinator]
            if not isinstance(terms, list) or len(when) != 1:
                raise ParseError(f'{combinator} predicate must be the only key and hold a list')
            return cls(tuple(parse_predicate(term) for term in terms))

    constraints = {}
    for prop, value in when.items():
        if isinstance(value, (dict, list)) or value is None:
            raise ParseError(f'unsupported predicate value for {prop!r}: {value!r}')
        constraints[prop] = frozenset(_state_value(value).split('|'))
    return PropertyPredicate(constraints)


def predicate_from_variant_key(variant_key: str) -> PropertyPredicate:
    """'facing=east,half=bottom' -> predicate on exactly those properties; '' matches anything."""
    constraints = {}
    for prop in variant_key.split(','):
        if not prop.strip():
            continue
        if '=' not in prop:
            raise ParseError(f'malformed variant key {variant_key!r}')
        k, v = prop.split('=', 1)
        constraints[k.strip()] = frozenset((v.strip(),))
    return PropertyPredicate(constraints)


@dataclass(frozen=True)
class ModelRef:
    model: str
    x: int = 0
    y: int = 0
    uvlock: bool = False
    weight: int = 1

    @classmethod
    def from_json(cls, data, namespace: str = DEFAULT_NAMESPACE) -> 'ModelRef':
        if not isinstance(data, dict) or not isinstance(data.get('model'), str):
            raise ParseError(f'model reference must be an object with a "model" string, got {data!r}')
        try:
            x = int(data.get('x', 0))
            y = int(data.get('y', 0))
            weight = int(data.get('weight', 1))
        except (TypeError, ValueError) as err:
            raise ParseError(f'bad numeric field in model reference {data!r}') from err
        if x not in MODEL_ROTATIONS or y not in MODEL_ROTATIONS:
            raise ParseError(f'model rotation must be one of {MODEL_ROTATIONS}, got x={x} y={y}')
        return cls(normalize_location(data['model'], namespace), x, y,
                   bool(data.get('uvlock', False)), weight)


@dataclass
class MultipartCase:
    predicate: PropertyPredicate | AnyOf | AllOf
    candidates: list[ModelRef]

    def applies(self, properties: dict) -> bool:
        return self.predicate.matches(properties)

    def choose(self) -> ModelRef:
        # Deterministic: always the first declared candidate, weights are ignored.
        return self.candidates[0]


def _parse_apply(apply, namespace: str) -> list[ModelRef]:
    entries = apply if isinstance(apply, list) else [apply]
    if not entries:
        raise ParseError('case has no candidate models')
    return [ModelRef.from_json(entry, namespace) for entry in entries]


def parse_blockstate_json(data, path: str | None = None,
                          namespace: str = DEFAULT_NAMESPACE) -> list[MultipartCase]:
    try:
        if not isinstance(data, dict):
            raise ParseError('blockstate file must hold an object')
        if 'multipart' in data:
            return [
                MultipartCase(parse_predicate(item.get('when')), _parse_apply(item.get('apply'), namespace))
                for item in data['multipart']
            ]
        if 'variants' in data:
            return [
                MultipartCase(predicate_from_variant_key(key), _parse_apply(apply, namespace))
                for key, apply in data['variants'].items()
            ]
        raise ParseError('blockstate file has neither "variants" nor "multipart"')
    except (AttributeError, TypeError) as err:
        raise ParseError(f'malformed blockstate file: {err}', path=path) from err
    except BlockMeshError as err:
        err.path = err.path or path
        raise


@dataclass
class BlockStateResolution:
    key: BlockStateKey
    models: list[ModelRef]
    tint: TintRequest | None = None


def resolve_block_state(source, raw: str) -> BlockStateResolution:
    """Match `raw` against the cases of its blockstate file. All matching cases contribute."""
    try:
        key = parse_block_state(raw, source.namespace)
        cases = source.load_blockstates(key.name)
    except BlockMeshError as err:
        err.block_state = err.block_state or raw
        raise

    models = [case.choose() for case in cases if case.applies(key.properties)]
    if not models:
        logger.debug('no case of %s matches %s', key.name, raw)

    return BlockStateResolution(key, models, tint_request_for(key.name, key.properties))
