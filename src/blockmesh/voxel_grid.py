"""
Voxel grid query interface, plus an in-memory grid.

The binary schematic reader lives outside this package; anything exposing
size() and get_block_at(x, y, z) can be meshed. ArrayVoxelGrid can also load a
JSON dump:
  {"size": [sx, sy, sz], "palette": ["minecraft:air", ...], "blocks": [0, 3, ...]}
where "blocks" holds palette indices in x-major, then y, then z order.
"""

import json
from typing import Protocol

import numpy as np

from blockmesh.errors import ParseError
from blockmesh.settings import AIR


class VoxelGrid(Protocol):
    def size(self) -> tuple[int, int, int]:
        ...

    def get_block_at(self, x: int, y: int, z: int) -> str:
        ...


class ArrayVoxelGrid:
    def __init__(self, palette: list[str], indices: np.ndarray):
        if indices.ndim != 3:
            raise ValueError(f'indices must be a 3D array, got shape {indices.shape}')
        if indices.size and int(indices.max()) >= len(palette):
            raise ValueError('indices reference entries past the end of the palette')
        self.palette = list(palette)
        self.indices = indices

    @classmethod
    def from_blocks(cls, blocks: dict, size: tuple[int, int, int]) -> 'ArrayVoxelGrid':
        """`blocks`: (x, y, z) -> block-state string; everything else is air."""
        palette = [AIR]
        lookup = {AIR: 0}
        indices = np.zeros(size, dtype=np.uint32)
        for pos, block in blocks.items():
            if block not in lookup:
                lookup[block] = len(palette)
                palette.append(block)
            indices[pos] = lookup[block]
        return cls(palette, indices)

    @classmethod
    def load_json(cls, path: str) -> 'ArrayVoxelGrid':
        with open(path) as f:
            data = json.load(f)
        try:
            size = tuple(int(c) for c in data['size'])
            palette = [str(b) for b in data['palette']]
            indices = np.asarray(data['blocks'], dtype=np.uint32).reshape(size)
        except (KeyError, TypeError, ValueError) as err:
            raise ParseError(f'malformed voxel grid: {err}', path=path) from err
        try:
            return cls(palette, indices)
        except ValueError as err:
            raise ParseError(str(err), path=path) from err

    def size(self) -> tuple[int, int, int]:
        sx, sy, sz = self.indices.shape
        return (sx, sy, sz)

    def get_block_at(self, x: int, y: int, z: int) -> str:
        return self.palette[self.indices[x, y, z]]
