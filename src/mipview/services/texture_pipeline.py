"""Texture pipeline context.

A TexturePipeline owns everything derived from one loaded image: the source,
its canonical square buffer, the mip chain, the GPU texture and the render
parameters. Independent pipelines share no state.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from mipview.config import PipelineConfig
from mipview.constants import MIP_STRATEGY_CPU
from mipview.models.render_parameters import RenderParameters, preview_transform
from mipview.models.texture_data import CanonicalBuffer, ExportArtifact, SourceImage
from mipview.services.canvas_resampler import build_mip_chain, resample
from mipview.services.export_controller import ExportController
from mipview.services.image_loader import ImageLoader, load_source_image
from mipview.services.render_pipeline import RenderPipeline
from mipview.services.texture_manager import TextureManager

logger = logging.getLogger(__name__)


class TexturePipeline:
    """Load -> resample -> upload -> render -> export, for one image at a time.
    
    Args:
        config: PipelineConfig (defaults used if None)
        gl_api: OpenGL API module. None uses PyOpenGL.
        render_pipeline: Pre-built RenderPipeline (built from config if None)
        texture_manager: Pre-built TextureManager (built from config if None)
        sink: Output sink for exported artifacts
    
    All GL work happens on the calling thread, which must have a current
    OpenGL context whenever an image is loaded, rendered or exported.
    """

    def __init__(self, config: Optional[PipelineConfig] = None, gl_api=None,
                 render_pipeline: Optional[RenderPipeline] = None,
                 texture_manager: Optional[TextureManager] = None,
                 sink=None):
        if gl_api is None:
            import OpenGL.GL as gl_api

        self.config = config or PipelineConfig()
        self.params = RenderParameters()
        self.source: Optional[SourceImage] = None
        self.canonical: Optional[CanonicalBuffer] = None
        self.mip_chain = None

        self.texture_manager = texture_manager or TextureManager(
            gl_api,
            strategy=self.config.mip_strategy,
            filter_mode=self.config.filter_mode,
            texture_unit=self.config.texture_unit,
        )
        if render_pipeline is None:
            render_pipeline = RenderPipeline(
                gl_api,
                texture_manager=self.texture_manager,
                clear_color=self.config.clear_color,
            )
        else:
            # The pipeline's texture manager decides which unit is bound and sampled
            render_pipeline.texture_manager = self.texture_manager
        self.render_pipeline = render_pipeline
        self.exporter = ExportController(self.config.export_format, sink)
        self.loader = ImageLoader(timeout=self.config.load_timeout)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def texture(self):
        return self.texture_manager.texture

    @property
    def power(self) -> int:
        """Exponent of the canonical side (0 before any load)."""
        return self.canonical.power if self.canonical is not None else 0

    @property
    def side(self) -> int:
        return self.canonical.side if self.canonical is not None else 0

    @property
    def max_level(self) -> int:
        """Highest mip level reachable by mip_bias."""
        if self.canonical is None:
            return self.config.max_power
        return self.canonical.power

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_file(self, path: Union[str, Path]) -> CanonicalBuffer:
        """Read, decode and install an image file (blocking)."""
        return self.load_image(load_source_image(path))

    async def load_file_async(self, path: Union[str, Path],
                              timeout: Optional[float] = None) -> CanonicalBuffer:
        """Load an image file without blocking the event loop.
        
        Starting another load before this one finishes supersedes it
        (LoadSuperseded is raised here and the newer image is kept).
        """
        source = await self.loader.load(path, timeout)
        return self.load_image(source)

    def load_image(self, source: SourceImage) -> CanonicalBuffer:
        """Replace the current image and rebuild the canonical buffer and texture."""
        canonical = resample(source, self.config.max_power)
        chain = build_mip_chain(canonical) if self.config.mip_strategy == MIP_STRATEGY_CPU else None

        self.source = source
        self.canonical = canonical
        self.mip_chain = chain

        texture = self.texture_manager.upload(canonical)
        self.texture_manager.populate_mips(texture, chain)

        if self.params.mip_bias > canonical.power:
            self.params.mip_bias = float(canonical.power)

        logger.info("Loaded %s as %dx%d (%d mip levels)",
                    source.name, canonical.side, canonical.side, canonical.power + 1)
        return canonical

    # ------------------------------------------------------------------
    # Parameters / rendering
    # ------------------------------------------------------------------

    def set_parameter(self, name: str, value) -> bool:
        """Apply a render parameter update. Returns False if rejected."""
        return self.params.set_parameter(name, value, self.max_level)

    def render(self):
        """Render one frame and read it back.
        
        Returns:
            numpy.ndarray (S x S x 4 uint8) or None if no image is loaded
        """
        if self.source is None:
            return None
        if not self.render_pipeline.draw(self.texture, self.params):
            return None
        return self.render_pipeline.read_pixels()

    def preview_transform(self, window_height: int):
        """(scale, translate_y) for showing the rendered frame on screen."""
        return preview_transform(self.side, window_height, self.params.preview_scale)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_at(self, level: Optional[int] = None) -> Optional[ExportArtifact]:
        return self.exporter.export_at(self, level)

    def export_all_levels(self) -> List[ExportArtifact]:
        """Export one artifact per mip level, 0..power."""
        artifacts = []
        if self.source is None:
            return artifacts
        for level in range(self.power + 1):
            artifact = self.export_at(level)
            if artifact is not None:
                artifacts.append(artifact)
        return artifacts

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def close(self):
        """Release the texture and all GL objects (safe to call repeatedly)."""
        self.loader.cancel()
        self.texture_manager.release()
        self.render_pipeline.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
