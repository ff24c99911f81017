"""
Per-block solid-color overrides.

Only the power wire has a color rule. Every other request is classified as
UNSUPPORTED, logged, and answered with opaque white.
"""

import enum
import logging
from typing import NamedTuple

from blockmesh.errors import UnsupportedTint
from blockmesh.settings import REDSTONE_WIRE

logger = logging.getLogger(__name__)


class TintColor(NamedTuple):
    r: float
    g: float
    b: float
    a: float = 1.0

    def as_rgba_u32(self) -> int:
        """Pack to 0xRRGGBBAA, used to deduplicate tinted materials."""
        value = 0
        for channel in self:
            value = (value << 8) | int(round(max(0.0, min(1.0, channel)) * 255))
        return value


WHITE = TintColor(1.0, 1.0, 1.0)


class TintKind(enum.Enum):
    REDSTONE_WIRE = 'redstone_wire'
    UNSUPPORTED = 'unsupported'


class TintRequest(NamedTuple):
    block_name: str
    tint_index: int
    properties: dict

    @property
    def kind(self) -> TintKind:
        return classify_tint(self.block_name, self.tint_index)


def classify_tint(block_name: str, tint_index: int = 0) -> TintKind:
    if block_name == REDSTONE_WIRE and tint_index == 0:
        return TintKind.REDSTONE_WIRE
    return TintKind.UNSUPPORTED


def tint_request_for(block_name: str, properties: dict) -> TintRequest | None:
    """Blocks whose appearance is a solid color get a request; the rest render from the atlas."""
    if block_name == REDSTONE_WIRE:
        return TintRequest(block_name, 0, dict(properties))
    return None


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _power(properties: dict) -> int:
    try:
        power = int(properties.get('power', 0))
    except (TypeError, ValueError):
        return 0
    return max(0, min(15, power))


def redstone_wire_color(properties: dict) -> TintColor:
    f = _power(properties) / 15.0
    r = f * 0.6 + (0.4 if f > 0.0 else 0.3)
    g = _clamp01(f * f * 0.7 - 0.5)
    b = _clamp01(f * f * 0.6 - 0.7)
    return TintColor(r, g, b)


_TINT_RULES = {
    TintKind.REDSTONE_WIRE: redstone_wire_color,
}


def tint_color(request: TintRequest) -> TintColor:
    rule = _TINT_RULES.get(request.kind)
    if rule is None:
        raise UnsupportedTint(
            f'unknown tint with block {request.block_name} and idx {request.tint_index}')
    return rule(request.properties)


def resolve_tint(request: TintRequest) -> TintColor:
    """Never fails: unsupported requests degrade to white."""
    try:
        return tint_color(request)
    except UnsupportedTint as err:
        logger.warning('%s, using white', err)
        return WHITE
