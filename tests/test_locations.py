import logging

from blockmesh import settings
from blockmesh.errors import NotFoundError, ParseError
from blockmesh.locations import (
    blockstate_file, model_file, normalize_location, split_location, texture_location,
)


def test_locations():
    assert split_location('block/stone') == ('minecraft', 'block/stone')
    assert split_location('mymod:block/ore') == ('mymod', 'block/ore')
    assert normalize_location(':block/stone') == 'minecraft:block/stone'
    assert model_file('block/stone') == 'assets/minecraft/models/block/stone.json'
    assert blockstate_file('mymod:ore') == 'assets/mymod/blockstates/ore.json'


def test_texture_location():
    assert texture_location('assets/minecraft/textures/block/stone.png') == 'minecraft:block/stone'
    assert texture_location('assets/minecraft/textures/block/fire.png.mcmeta') is None
    assert texture_location('assets/minecraft/models/block/stone.json') is None


def test_error_message_context():
    err = ParseError('bad value', path='a.json', block_state='minecraft:stone')
    assert str(err) == 'bad value | asset: a.json | block state: minecraft:stone'
    assert str(NotFoundError('missing')) == 'missing'


def test_configure_logging():
    assert settings.configure_logging('debug') == logging.DEBUG
    assert logging.getLogger('blockmesh').level == logging.DEBUG
    settings.configure_logging(logging.WARNING)
    assert logging.getLogger('blockmesh').level == logging.WARNING
