"""
Block-model resolution and mesh generation for voxel grids.

Pipeline: grid scan -> blockstate cases -> model chains -> element meshes
(+ tint), with a texture atlas built once up front.
"""

from blockmesh.asset_source import AssetSource, DirectoryAssetSource, ZipAssetSource, open_asset_source
from blockmesh.atlas import AtlasTile, TextureAtlas
from blockmesh.block_cache import BlockMeshCache, BlockPalette
from blockmesh.blockstate import parse_block_state, resolve_block_state
from blockmesh.errors import BlockMeshError, CycleError, NotFoundError, ParseError, UnsupportedTint
from blockmesh.materials import MaterialKind, MaterialTable
from blockmesh.meshes.element_mesh_builder import BlockMeshSet, ElementMesh, build_block_meshes
from blockmesh.models import resolve_model
from blockmesh.tint import TintColor, resolve_tint
from blockmesh.voxel_grid import ArrayVoxelGrid, VoxelGrid
from blockmesh.world import BlockWorld

__version__ = '0.1.0'

__all__ = [
    'AssetSource', 'DirectoryAssetSource', 'ZipAssetSource', 'open_asset_source',
    'AtlasTile', 'TextureAtlas',
    'BlockMeshCache', 'BlockPalette',
    'parse_block_state', 'resolve_block_state',
    'BlockMeshError', 'CycleError', 'NotFoundError', 'ParseError', 'UnsupportedTint',
    'MaterialKind', 'MaterialTable',
    'BlockMeshSet', 'ElementMesh', 'build_block_meshes',
    'resolve_model',
    'TintColor', 'resolve_tint',
    'ArrayVoxelGrid', 'VoxelGrid',
    'BlockWorld',
]
