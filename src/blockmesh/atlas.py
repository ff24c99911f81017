"""
Packs every block texture of an asset source into one RGBA atlas.

Produces:
  - the atlas pixels (numpy uint8, shape (height, width, 4)), also available as a
    pygame Surface or raw RGBA bytes for upload
  - per texture name: pixel rect, normalized uv rect (v grows downward, image
    space) and a transparency flag

A tile is transparent iff some pixel has 0 < alpha < 255. Fully opaque tiles and
tiles whose only non-opaque pixels are fully clear (cutouts) are not.
Animated textures are packed as their first frame.
"""

import io
import logging
import math
from dataclasses import dataclass
from types import MappingProxyType

import numpy as np
import pygame as pg

from blockmesh.errors import NotFoundError, ParseError
from blockmesh.locations import normalize_location
from blockmesh.settings import DEFAULT_NAMESPACE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AtlasTile:
    rect: tuple[int, int, int, int]          # x, y, w, h in atlas pixels
    uv: tuple[float, float, float, float]    # u0, v0, u1, v1 in 0-1
    has_transparency: bool

    def atlas_uv(self, u: float, v: float) -> tuple[float, float]:
        """Map a 0-1 coordinate inside the texture to atlas coordinates."""
        u0, v0, u1, v1 = self.uv
        return (u0 + (u1 - u0) * u, v0 + (v1 - v0) * v)


def load_texture_surface(data: bytes) -> pg.Surface:
    """Decode a PNG. Animation strips (anything taller than wide) keep their first square frame."""
    surf = pg.image.load(io.BytesIO(data), 'texture.png')
    w, h = surf.get_size()
    if h > w:
        surf = surf.subsurface((0, 0, w, w)).copy()
    return surf


def surface_to_rgba(surf: pg.Surface) -> np.ndarray:
    w, h = surf.get_size()
    return np.frombuffer(pg.image.tobytes(surf, 'RGBA'), dtype=np.uint8).reshape(h, w, 4)


def has_partial_alpha(alpha: np.ndarray) -> bool:
    return bool(np.any((alpha > 0) & (alpha < 255)))


def _next_pow2(n: int) -> int:
    return 1 << max(0, int(n) - 1).bit_length()


def pack_rects(sizes: dict[str, tuple[int, int]]) -> tuple[int, int, dict[str, tuple[int, int]]]:
    """Shelf packing. Tallest first, then widest, then by name, so the layout is deterministic."""
    if not sizes:
        return 1, 1, {}

    total_area = sum(w * h for w, h in sizes.values())
    widest = max(w for w, _ in sizes.values())
    width = _next_pow2(max(widest, math.ceil(math.sqrt(total_area))))

    order = sorted(sizes, key=lambda n: (-sizes[n][1], -sizes[n][0], n))
    positions = {}
    x = y = shelf_h = 0
    for name in order:
        w, h = sizes[name]
        if x + w > width:
            y += shelf_h
            x = shelf_h = 0
        positions[name] = (x, y)
        x += w
        shelf_h = max(shelf_h, h)

    return width, _next_pow2(y + shelf_h), positions


class TextureAtlas:
    def __init__(self, pixels: np.ndarray, tiles: dict, namespace: str = DEFAULT_NAMESPACE):
        pixels.setflags(write=False)
        self.pixels = pixels
        self.tiles = MappingProxyType(dict(tiles))
        self.namespace = namespace

    @classmethod
    def build(cls, surfaces, namespace: str = DEFAULT_NAMESPACE) -> 'TextureAtlas':
        """`surfaces`: texture name -> pygame Surface."""
        images = {normalize_location(name, namespace): surface_to_rgba(surf)
                  for name, surf in surfaces.items()}
        sizes = {name: (img.shape[1], img.shape[0]) for name, img in images.items()}
        width, height, positions = pack_rects(sizes)

        pixels = np.zeros((height, width, 4), dtype=np.uint8)
        tiles = {}
        for name, (x, y) in positions.items():
            img = images[name]
            h, w = img.shape[:2]
            pixels[y:y + h, x:x + w] = img
            tiles[name] = AtlasTile(
                rect=(x, y, w, h),
                uv=(x / width, y / height, (x + w) / width, (y + h) / height),
                has_transparency=has_partial_alpha(img[:, :, 3]),
            )

        n_trans = sum(t.has_transparency for t in tiles.values())
        logger.info('packed %d textures into %dx%d atlas (%d with transparency)',
                    len(tiles), width, height, n_trans)
        return cls(pixels, tiles, namespace)

    @classmethod
    def from_source(cls, source) -> 'TextureAtlas':
        surfaces = {}
        for name, data, animated in source.iter_textures():
            try:
                surfaces[name] = load_texture_surface(data)
            except pg.error as err:
                raise ParseError(f'cannot decode texture {name}: {err}', path=name) from err
            if animated:
                logger.debug('%s is animated, packing its first frame', name)
        return cls.build(surfaces, source.namespace)

    def lookup(self, name: str) -> AtlasTile:
        tile = self.tiles.get(normalize_location(name, self.namespace))
        if tile is None:
            raise NotFoundError(f'texture {name} is not in the atlas')
        return tile

    def __contains__(self, name: str) -> bool:
        return normalize_location(name, self.namespace) in self.tiles

    def __len__(self):
        return len(self.tiles)

    @property
    def size(self) -> tuple[int, int]:
        h, w = self.pixels.shape[:2]
        return (w, h)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_surface(self) -> pg.Surface:
        return pg.image.frombytes(self.to_bytes(), self.size, 'RGBA')
