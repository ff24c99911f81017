import json
import os

os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', '1')

import pygame as pg
import pytest

from blockmesh.asset_source import DirectoryAssetSource
from blockmesh.atlas import TextureAtlas

FACES = ('up', 'down', 'north', 'south', 'west', 'east')

CUBE_ELEMENT = {
    'from': [0, 0, 0],
    'to': [16, 16, 16],
    'faces': {face: {'texture': f'#{face}', 'cullface': face} for face in FACES},
}

MODELS = {
    'block/block': {},
    'block/cube': {'parent': 'block/block', 'elements': [CUBE_ELEMENT]},
    'block/cube_all': {
        'parent': 'block/cube',
        'textures': {'particle': '#all', **{face: '#all' for face in FACES}},
    },
    'block/stone': {'parent': 'minecraft:block/cube_all', 'textures': {'all': 'minecraft:block/stone'}},
    'block/glass': {'parent': 'block/cube_all', 'textures': {'all': 'block/glass'}},
    'block/leaves': {'parent': 'block/cube_all', 'textures': {'all': 'block/leaves'}},
    'block/fire': {'parent': 'block/cube_all', 'textures': {'all': 'block/fire'}},
    'block/furnace': {
        'parent': 'block/cube',
        'textures': {
            'up': 'block/furnace_top', 'down': 'block/furnace_top', 'north': 'block/furnace_front',
            'south': 'block/furnace_side', 'east': 'block/furnace_side', 'west': 'block/furnace_side',
        },
    },
    'block/slab': {
        'parent': 'block/block',
        'textures': {'bottom': '#top', 'top': 'block/stone', 'side': 'block/stone'},
        'elements': [{
            'from': [0, 0, 0], 'to': [16, 8, 16],
            'faces': {
                'up': {'texture': '#top'},
                'down': {'texture': '#bottom'},
                'north': {'texture': '#side', 'uv': [0, 8, 16, 16]},
                'south': {'texture': '#side', 'uv': [0, 8, 16, 16]},
                'west': {'texture': '#side', 'uv': [0, 8, 16, 16]},
                'east': {'texture': '#side', 'uv': [0, 8, 16, 16]},
            },
        }],
    },
    'block/redstone_dust_dot': {
        'textures': {'line': 'block/redstone_dust_dot'},
        'elements': [{
            'from': [0, 0.25, 0], 'to': [16, 0.25, 16],
            'faces': {
                'up': {'texture': '#line', 'tintindex': 0},
                'down': {'texture': '#line', 'tintindex': 0},
            },
        }],
    },
    'block/redstone_dust_side': {
        'textures': {'line': 'block/redstone_dust_line'},
        'elements': [{
            'from': [0, 0.25, 0], 'to': [16, 0.25, 8],
            'faces': {'up': {'texture': '#line', 'tintindex': 0}},
        }],
    },
    'block/broken': {
        'textures': {'bottom': 'block/stone'},
        'elements': [{
            'from': [0, 0, 0], 'to': [16, 16, 16],
            'faces': {'up': {'texture': '#missing'}, 'down': {'texture': '#bottom'}},
        }],
    },
    'block/orphan': {'parent': 'block/does_not_exist', 'textures': {'all': 'block/stone'}},
    'block/loop_a': {'parent': 'block/loop_b'},
    'block/loop_b': {'parent': 'block/loop_a'},
}

BLOCKSTATES = {
    'stone': {'variants': {'': {'model': 'minecraft:block/stone'}}},
    'glass': {'variants': {'': {'model': 'block/glass'}}},
    'oak_leaves': {'variants': {'': {'model': 'block/leaves'}}},
    'fire': {'variants': {'': [{'model': 'block/fire'}, {'model': 'block/stone', 'weight': 10}]}},
    'stone_slab': {'variants': {
        'type=bottom': {'model': 'block/slab'},
        'type=top': {'model': 'block/slab', 'x': 180},
    }},
    'furnace': {'variants': {
        'facing=north': {'model': 'block/furnace'},
        'facing=east': {'model': 'block/furnace', 'y': 90},
        'facing=south': {'model': 'block/furnace', 'y': 180},
        'facing=west': {'model': 'block/furnace', 'y': 270, 'uvlock': True},
    }},
    'redstone_wire': {'multipart': [
        {'apply': {'model': 'block/redstone_dust_dot'}},
        {'when': {'OR': [{'north': 'side|up'}, {'south': 'side|up'}]},
         'apply': {'model': 'block/redstone_dust_side'}},
        {'when': {'east': 'side|up'},
         'apply': [{'model': 'block/redstone_dust_side', 'y': 90}, {'model': 'block/redstone_dust_dot'}]},
    ]},
    'broken': {'variants': {'': {'model': 'block/broken'}}},
    'orphan': {'variants': {'': {'model': 'block/orphan'}}},
    'loop': {'variants': {'': {'model': 'block/loop_a'}}},
}


def make_surface(size=(16, 16), color=(120, 120, 120, 255)) -> pg.Surface:
    surf = pg.Surface(size, pg.SRCALPHA)
    surf.fill(color)
    return surf


def make_cutout(size=(16, 16), color=(255, 255, 255)) -> pg.Surface:
    """Left half opaque, right half fully clear."""
    surf = make_surface(size, (*color, 0))
    surf.fill((*color, 255), (0, 0, size[0] // 2, size[1]))
    return surf


def make_strip(frames=2, size=16) -> pg.Surface:
    """Animation strip: opaque red first frame, half-transparent frames below it."""
    surf = make_surface((size, size * frames), (0, 0, 255, 100))
    surf.fill((255, 0, 0, 255), (0, 0, size, size))
    return surf


TEXTURES = {
    'block/stone': lambda: make_surface(color=(120, 120, 120, 255)),
    'block/glass': lambda: make_surface(color=(200, 220, 255, 128)),
    'block/leaves': lambda: make_cutout(color=(40, 160, 40)),
    'block/furnace_top': lambda: make_surface(color=(90, 90, 90, 255)),
    'block/furnace_front': lambda: make_surface(color=(60, 60, 60, 255)),
    'block/furnace_side': lambda: make_surface(color=(100, 100, 100, 255)),
    'block/redstone_dust_dot': lambda: make_cutout(),
    'block/redstone_dust_line': lambda: make_cutout(),
    'block/fire': make_strip,
}


def write_json(root, rel, data):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def write_png(root, rel, surf):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    pg.image.save(surf, str(path))
    return path


@pytest.fixture
def pack_root(tmp_path):
    root = tmp_path / 'pack'
    for name, data in MODELS.items():
        write_json(root, f'assets/minecraft/models/{name}.json', data)
    for name, data in BLOCKSTATES.items():
        write_json(root, f'assets/minecraft/blockstates/{name}.json', data)
    for name, make in TEXTURES.items():
        write_png(root, f'assets/minecraft/textures/{name}.png', make())
    write_json(root, 'assets/minecraft/textures/block/fire.png.mcmeta', {'animation': {'frametime': 2}})
    # not a block texture, must stay out of the atlas
    write_png(root, 'assets/minecraft/textures/item/stick.png', make_surface())
    return root


@pytest.fixture
def source(pack_root):
    return DirectoryAssetSource(str(pack_root))


@pytest.fixture
def atlas(source):
    return TextureAtlas.from_source(source)


@pytest.fixture
def stone_atlas():
    """Single full-size tile, so atlas uvs equal texture uvs."""
    return TextureAtlas.build({'block/stone': make_surface()})
