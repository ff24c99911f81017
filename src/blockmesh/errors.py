"""
Error taxonomy for block-state and model resolution.

ParseError, NotFoundError and CycleError are fatal for the block-state being
resolved. UnsupportedTint never escapes the tint resolver.
"""


class BlockMeshError(Exception):
    """Base class. Carries the asset path and block-state that were being resolved."""

    def __init__(self, message: str, path: str | None = None, block_state: str | None = None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.block_state = block_state

    def __str__(self):
        parts = [self.message]
        if self.path:
            parts.append(f'asset: {self.path}')
        if self.block_state:
            parts.append(f'block state: {self.block_state}')
        return ' | '.join(parts)


class ParseError(BlockMeshError):
    """Malformed block-state string, predicate, or asset file."""


class NotFoundError(BlockMeshError):
    """Missing blockstate, model, parent, texture variable, or atlas texture."""


class CycleError(BlockMeshError):
    """Looping parent chain or texture-variable chain."""


class UnsupportedTint(BlockMeshError):
    """A tint request with no known color rule."""
