"""
Palette of block-state strings and the mesh cache keyed by palette index.

Index 0 is always air and never gets geometry. Every other index gets its mesh
set built on first request (blockstate -> models -> meshes -> tint) and kept for
the lifetime of the cache. Builds are guarded per key, so concurrent readers of
the same index wait for a single build instead of racing.
"""

import logging
import threading
from dataclasses import dataclass

from blockmesh.blockstate import BlockStateResolution, resolve_block_state
from blockmesh.errors import BlockMeshError
from blockmesh.meshes.element_mesh_builder import BlockMeshSet, build_block_meshes
from blockmesh.models import ModelInstance, resolve_models
from blockmesh.settings import AIR
from blockmesh.tint import resolve_tint

logger = logging.getLogger(__name__)

AIR_INDEX = 0


@dataclass
class ResolvedBlock:
    resolution: BlockStateResolution
    models: list[ModelInstance]


class BlockPalette:
    def __init__(self):
        self.blocks: list[str] = [AIR]
        self._index: dict[str, int] = {AIR: AIR_INDEX}
        self._lock = threading.Lock()

    def get_or_add(self, block_state: str) -> int:
        idx = self._index.get(block_state)
        if idx is not None:
            return idx
        with self._lock:
            idx = self._index.get(block_state)
            if idx is None:
                idx = len(self.blocks)
                self._index[block_state] = idx
                self.blocks.append(block_state)
        return idx

    def index_of(self, block_state: str) -> int | None:
        return self._index.get(block_state)

    def name_of(self, idx: int) -> str:
        return self.blocks[idx]

    def items(self):
        return list(enumerate(self.blocks))

    def __contains__(self, block_state: str) -> bool:
        return block_state in self._index

    def __len__(self):
        return len(self.blocks)


class BlockMeshCache:
    def __init__(self, source, atlas, palette: BlockPalette | None = None):
        self.source = source
        self.atlas = atlas
        self.palette = palette if palette is not None else BlockPalette()
        self._resolved: dict[str, ResolvedBlock] = {}
        self._meshes: dict[int, BlockMeshSet] = {AIR_INDEX: BlockMeshSet()}
        self._locks: dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def resolve(self, block_state: str) -> ResolvedBlock:
        """Blockstate cases and model chains for `block_state`, memoized per string."""
        resolved = self._resolved.get(block_state)
        if resolved is None:
            try:
                resolution = resolve_block_state(self.source, block_state)
                models = resolve_models(self.source, resolution.models)
            except BlockMeshError as err:
                err.block_state = err.block_state or block_state
                raise
            resolved = self._resolved[block_state] = ResolvedBlock(resolution, models)
        return resolved

    def _lock_for(self, idx: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(idx)
            if lock is None:
                lock = self._locks[idx] = threading.Lock()
            return lock

    def get(self, idx: int) -> BlockMeshSet:
        mesh_set = self._meshes.get(idx)
        if mesh_set is not None:
            return mesh_set
        with self._lock_for(idx):
            mesh_set = self._meshes.get(idx)
            if mesh_set is None:
                mesh_set = self._build(idx)
                self._meshes[idx] = mesh_set
        return mesh_set

    def get_for(self, block_state: str) -> BlockMeshSet:
        return self.get(self.palette.get_or_add(block_state))

    def _build(self, idx: int) -> BlockMeshSet:
        block_state = self.palette.name_of(idx)
        resolved = self.resolve(block_state)
        try:
            mesh_set = build_block_meshes(resolved.models, self.atlas)
        except BlockMeshError as err:
            err.block_state = err.block_state or block_state
            raise

        if resolved.resolution.tint is not None:
            mesh_set.tint = resolve_tint(resolved.resolution.tint)

        logger.debug('built %d element meshes for [%d] %s', len(mesh_set.meshes), idx, block_state)
        return mesh_set

    def __contains__(self, idx: int) -> bool:
        return idx in self._meshes

    def __len__(self):
        return len(self._meshes)
