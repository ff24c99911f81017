import enum
from dataclasses import dataclass

from blockmesh.settings import ALPHA_MASK_CUTOFF
from blockmesh.tint import TintColor, WHITE


class MaterialKind(enum.Enum):
    OPAQUE = 'opaque'      # atlas, alpha-masked cutout
    BLENDED = 'blended'    # atlas, alpha blended
    TINTED = 'tinted'      # solid tint color, alpha blended


@dataclass(frozen=True)
class BlockMaterial:
    kind: MaterialKind
    base_color: TintColor = WHITE
    alpha_cutoff: float | None = None

    @property
    def uses_atlas(self) -> bool:
        return self.kind is not MaterialKind.TINTED


class MaterialTable:
    """Shared materials: one opaque, one blended, one per distinct tint color."""

    def __init__(self):
        self.opaque = BlockMaterial(MaterialKind.OPAQUE, alpha_cutoff=ALPHA_MASK_CUTOFF)
        self.blended = BlockMaterial(MaterialKind.BLENDED)
        self.tints: dict[int, BlockMaterial] = {}

    def get_or_add_tint(self, tint: TintColor) -> BlockMaterial:
        key = tint.as_rgba_u32()
        material = self.tints.get(key)
        if material is None:
            material = self.tints[key] = BlockMaterial(MaterialKind.TINTED, tint)
        return material

    def select(self, mesh_set, mesh) -> BlockMaterial:
        if mesh_set.tint is not None:
            return self.get_or_add_tint(mesh_set.tint)
        if mesh.has_transparency:
            return self.blended
        return self.opaque
