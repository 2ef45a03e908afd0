"""GPU texture lifecycle: upload, mip population and disposal.

A TextureManager holds at most one live texture. Uploading a new canonical
buffer always releases the previous texture before the new one is created.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import OpenGL.GL as gl

from mipview.constants import (
    DEFAULT_FILTER_MODE, DEFAULT_MIP_STRATEGY, DEFAULT_TEXTURE_UNIT,
    FILTER_NEAREST, MIP_STRATEGIES, MIP_STRATEGY_CPU,
)
from mipview.models.texture_data import CanonicalBuffer, MipChain
from mipview.utils.gl_utility import GLUtility

logger = logging.getLogger(__name__)


@dataclass
class GpuTexture:
    """Handle to a GPU texture built from a canonical buffer."""

    handle: int
    side: int
    power: int
    level_count: int = 1
    disposed: bool = False

    @property
    def live(self) -> bool:
        return not self.disposed


class TextureManager:
    """Owns the single texture of a pipeline.
    
    Args:
        gl_api: OpenGL API module
        strategy: 'cpu' uploads every level of a MipChain, 'hardware'
            lets the driver generate the chain from the base level
        filter_mode: 'linear' (trilinear) or 'nearest'
        texture_unit: Unit the texture is bound to while drawing
    """

    def __init__(self, gl_api=gl, strategy=DEFAULT_MIP_STRATEGY,
                 filter_mode=DEFAULT_FILTER_MODE, texture_unit=DEFAULT_TEXTURE_UNIT):
        if strategy not in MIP_STRATEGIES:
            raise ValueError(f"Unknown mip strategy: {strategy}")
        self.gl = gl_api
        self.strategy = strategy
        self.filter_mode = filter_mode
        self.texture_unit = texture_unit
        self.texture: Optional[GpuTexture] = None

    def _filters(self, mipmapped):
        g = self.gl
        if self.filter_mode == FILTER_NEAREST:
            min_filter = g.GL_NEAREST_MIPMAP_NEAREST if mipmapped else g.GL_NEAREST
            return min_filter, g.GL_NEAREST
        min_filter = g.GL_LINEAR_MIPMAP_LINEAR if mipmapped else g.GL_LINEAR
        return min_filter, g.GL_LINEAR

    def upload(self, buffer: CanonicalBuffer) -> GpuTexture:
        """Create a texture from the base level of a canonical buffer.
        
        Any texture held before is disposed first.
        """
        self.dispose(self.texture)

        min_filter, mag_filter = self._filters(mipmapped=False)
        handle = GLUtility.create_texture(buffer.pixels, self.gl, min_filter, mag_filter)
        self.texture = GpuTexture(handle=int(handle), side=buffer.side, power=buffer.power)
        logger.debug("Uploaded texture %s (%dx%d)", self.texture.handle, buffer.side, buffer.side)
        return self.texture

    def populate_mips(self, texture: GpuTexture, chain: Optional[MipChain] = None):
        """Fill mip levels 1..power of a texture.
        
        Args:
            texture: Texture returned by upload()
            chain: Pre-computed levels, required by the 'cpu' strategy
        
        Raises:
            ValueError: If the chain is missing or does not match the texture
        """
        if texture is None or texture.disposed:
            return

        g = self.gl
        g.glBindTexture(g.GL_TEXTURE_2D, texture.handle)

        if self.strategy == MIP_STRATEGY_CPU:
            if chain is None:
                raise ValueError("The 'cpu' mip strategy needs a mip chain")
            if len(chain) != texture.power + 1 or chain.side(0) != texture.side:
                raise ValueError(
                    f"Mip chain of {len(chain)} levels does not match a {texture.side}px texture"
                )
            for level in range(1, len(chain)):
                GLUtility.upload_level(level, chain[level], g)
        else:
            g.glGenerateMipmap(g.GL_TEXTURE_2D)

        g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_BASE_LEVEL, 0)
        g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_MAX_LEVEL, texture.power)
        min_filter, mag_filter = self._filters(mipmapped=True)
        g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_MIN_FILTER, min_filter)
        g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_MAG_FILTER, mag_filter)

        texture.level_count = texture.power + 1
        logger.debug("Populated %d mip levels (%s)", texture.level_count, self.strategy)

    def bind(self, texture: GpuTexture):
        """Bind a texture to the configured texture unit."""
        g = self.gl
        g.glActiveTexture(g.GL_TEXTURE0 + self.texture_unit)
        g.glBindTexture(g.GL_TEXTURE_2D, texture.handle)

    def dispose(self, texture: Optional[GpuTexture]):
        """Unbind and delete a texture. No-op for None or disposed textures."""
        if texture is None or texture.disposed:
            return

        g = self.gl
        g.glBindTexture(g.GL_TEXTURE_2D, 0)
        g.glDeleteTextures([texture.handle])
        texture.disposed = True
        if texture is self.texture:
            self.texture = None
        logger.debug("Disposed texture %s", texture.handle)

    def release(self):
        """Dispose the texture currently held, if any."""
        self.dispose(self.texture)
