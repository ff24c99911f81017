import logging
import os

import glm

# package folder path
ROOT_DIR = os.path.dirname(os.path.abspath(__file__))

# asset source (directory holding assets/<namespace>/..., or a client jar)
ASSETS_DIR = os.environ.get(
    'BLOCKMESH_ASSETS_DIR',
    os.path.normpath(os.path.join(ROOT_DIR, '..', '..', 'assets')),
)
DEFAULT_NAMESPACE = os.environ.get('BLOCKMESH_NAMESPACE', 'minecraft')

# texture folders packed into the atlas
TEXTURE_FOLDERS = ('block',)
ANIMATION_SIDECAR_EXT = '.mcmeta'

# model space
MODEL_UNITS = 16.0
BLOCK_CENTER = glm.vec3(8.0, 8.0, 8.0)
BLOCK_SCALE = 1.0 / MODEL_UNITS
MODEL_ROTATIONS = (0, 90, 180, 270)
ELEMENT_ANGLES = (-45.0, -22.5, 0.0, 22.5, 45.0)

# well-known blocks
AIR = 'minecraft:air'
REDSTONE_WIRE = 'minecraft:redstone_wire'

# materials
ALPHA_MASK_CUTOFF = 0.5

# logging
LOG_LEVEL = os.environ.get('BLOCKMESH_LOG_LEVEL', 'INFO')
LOG_FORMAT = '[%(name)s] %(levelname)s: %(message)s'


def configure_logging(level=None):
    """Install a basic handler for hosts that have not set up logging."""
    level = level or LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('blockmesh').setLevel(level)
    return level
