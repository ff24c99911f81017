import logging

import pytest

from blockmesh.errors import UnsupportedTint
from blockmesh.tint import (
    WHITE, TintColor, TintKind, TintRequest, classify_tint, redstone_wire_color, resolve_tint,
    tint_color, tint_request_for,
)


def test_classify():
    assert classify_tint('minecraft:redstone_wire', 0) is TintKind.REDSTONE_WIRE
    assert classify_tint('minecraft:redstone_wire', 1) is TintKind.UNSUPPORTED
    assert classify_tint('minecraft:grass_block', 0) is TintKind.UNSUPPORTED


def test_only_power_wire_requests_tint():
    assert tint_request_for('minecraft:stone', {}) is None
    req = tint_request_for('minecraft:redstone_wire', {'power': '3'})
    assert req == TintRequest('minecraft:redstone_wire', 0, {'power': '3'})


@pytest.mark.parametrize('power, expected', [
    ('0', (0.3, 0.0, 0.0)),
    ('15', (1.0, 0.2, 0.0)),
    (None, (0.3, 0.0, 0.0)),
    ('junk', (0.3, 0.0, 0.0)),
    ('99', (1.0, 0.2, 0.0)),
])
def test_redstone_wire_color(power, expected):
    props = {} if power is None else {'power': power}
    color = redstone_wire_color(props)
    assert color[:3] == pytest.approx(expected)
    assert color.a == 1.0


def test_color_brightens_with_power():
    reds = [redstone_wire_color({'power': str(p)}).r for p in range(16)]
    assert reds == sorted(reds)


def test_unsupported_request():
    req = TintRequest('minecraft:grass_block', 0, {})
    with pytest.raises(UnsupportedTint):
        tint_color(req)


def test_resolve_tint_falls_back_to_white(caplog):
    with caplog.at_level(logging.WARNING, logger='blockmesh'):
        color = resolve_tint(TintRequest('minecraft:grass_block', 0, {}))
    assert color == WHITE
    assert 'unknown tint with block minecraft:grass_block and idx 0' in caplog.text


def test_rgba_packing():
    assert WHITE.as_rgba_u32() == 0xFFFFFFFF
    assert TintColor(1.0, 0.2, 0.0).as_rgba_u32() == 0xFF3300FF
