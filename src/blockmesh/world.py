"""
Scans a voxel grid into palette indices and hands meshes to a renderer.

The atlas is built before anything is meshed. Every distinct block-state is
resolved during the scan so missing or broken assets fail before rendering
starts; meshes are built lazily through the cache.
"""

import logging
from typing import NamedTuple

import glm
import numpy as np

from blockmesh.atlas import TextureAtlas
from blockmesh.block_cache import AIR_INDEX, BlockMeshCache, BlockPalette
from blockmesh.materials import BlockMaterial, MaterialTable
from blockmesh.meshes.element_mesh_builder import BlockMeshSet, ElementMesh
from blockmesh.settings import BLOCK_SCALE

logger = logging.getLogger(__name__)


def block_transform(pos) -> glm.mat4:
    """Model units (0-16) of the block at `pos` -> world units."""
    return glm.translate(glm.vec3(*pos)) * glm.scale(glm.vec3(BLOCK_SCALE))


class Drawable(NamedTuple):
    position: tuple[int, int, int]
    block: int
    mesh: ElementMesh
    material: BlockMaterial
    transform: glm.mat4


class BlockWorld:
    def __init__(self, grid, source, atlas: TextureAtlas | None = None,
                 palette: BlockPalette | None = None, materials: MaterialTable | None = None):
        self.grid = grid
        self.source = source
        self.atlas = atlas if atlas is not None else TextureAtlas.from_source(source)
        self.cache = BlockMeshCache(source, self.atlas, palette)
        self.palette = self.cache.palette
        self.materials = materials if materials is not None else MaterialTable()
        self.blocks = np.zeros(grid.size(), dtype=np.uint32)
        self._scan()

    def _scan(self):
        sx, sy, sz = self.grid.size()
        for x in range(sx):
            for y in range(sy):
                for z in range(sz):
                    block = self.grid.get_block_at(x, y, z)
                    is_new = block not in self.palette
                    idx = self.palette.get_or_add(block)
                    if is_new and idx != AIR_INDEX:
                        self.cache.resolve(block)
                    self.blocks[x, y, z] = idx

        solid = int(np.count_nonzero(self.blocks))
        logger.info('scanned %dx%dx%d grid: %d blocks, %d distinct block states',
                    sx, sy, sz, solid, len(self.palette) - 1)

    def mesh_set(self, idx: int) -> BlockMeshSet:
        return self.cache.get(idx)

    def mesh_sets(self) -> dict[int, BlockMeshSet]:
        return {idx: self.cache.get(idx) for idx in range(1, len(self.palette))}

    def drawables(self):
        """One Drawable per element mesh of every non-air voxel, in x, y, z order."""
        for x, y, z in np.argwhere(self.blocks != AIR_INDEX):
            pos = (int(x), int(y), int(z))
            idx = int(self.blocks[pos])
            mesh_set = self.cache.get(idx)
            base = block_transform(pos)
            for mesh in mesh_set.meshes:
                yield Drawable(
                    pos, idx, mesh,
                    self.materials.select(mesh_set, mesh),
                    base * glm.translate(glm.vec3(*mesh.offset)),
                )
