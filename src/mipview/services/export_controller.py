"""Per-level frame export.

export_at() renders the current frame (optionally at an explicit mip level),
encodes it with Pillow and hands the artifact to an output sink.
"""

import io
import logging
import os
from pathlib import Path
from typing import Callable, Optional

import numpy as np
from PIL import Image

from mipview.constants import DEFAULT_EXPORT_FORMAT, LEVEL_SUFFIX_WIDTH
from mipview.models.texture_data import ExportArtifact

logger = logging.getLogger(__name__)

# Extension -> Pillow format name where they differ
_PIL_FORMATS = {
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'tif': 'TIFF',
}

# Formats without an alpha channel
_RGB_ONLY = {'JPEG', 'BMP'}


def level_label(stem: str, level: Optional[int] = None) -> str:
    """Build an artifact label: 'photo' or 'photo-03' for level 3."""
    if level is None:
        return stem
    return f"{stem}-{level:0{LEVEL_SUFFIX_WIDTH}d}"


def encode_frame(pixels: np.ndarray, export_format: str = DEFAULT_EXPORT_FORMAT) -> bytes:
    """Encode an H x W x 4 uint8 frame as an image file payload."""
    pil_format = _PIL_FORMATS.get(export_format.lower(), export_format.upper())
    img = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    if pil_format in _RGB_ONLY:
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format=pil_format)
    return buf.getvalue()


class FileSink:
    """Output sink writing artifacts into a directory."""

    def __init__(self, output_dir):
        self.output_dir = Path(output_dir)

    def __call__(self, artifact: ExportArtifact) -> Path:
        os.makedirs(self.output_dir, exist_ok=True)
        path = self.output_dir / artifact.filename
        path.write_bytes(artifact.payload)
        logger.info("Exported %s", path)
        return path


class ExportController:
    """Renders and encodes frames for a texture pipeline.
    
    Args:
        export_format: File extension / format of the artifacts
        sink: Callable receiving each artifact (e.g. FileSink). None only
            returns the artifacts.
    """

    def __init__(self, export_format: str = DEFAULT_EXPORT_FORMAT,
                 sink: Optional[Callable[[ExportArtifact], object]] = None):
        self.export_format = export_format.lower().lstrip('.')
        self.sink = sink

    def export_at(self, pipeline, level: Optional[int] = None) -> Optional[ExportArtifact]:
        """Render and emit one artifact.
        
        Args:
            pipeline: TexturePipeline to render
            level: Mip level to export. None keeps the current mip bias and
                labels the artifact with the bare source name. A level is
                clamped to [0, power], written to the pipeline's mip bias,
                and appended to the label as a two-digit suffix.
        
        Returns:
            ExportArtifact, or None if no image is loaded
        """
        if pipeline.source is None:
            logger.debug("Export skipped: no source image")
            return None

        if level is not None:
            level = min(max(int(level), 0), pipeline.power)
            pipeline.params.mip_bias = float(level)

        pixels = pipeline.render()
        if pixels is None:
            return None

        artifact = ExportArtifact(
            label=level_label(pipeline.source.stem, level),
            extension=self.export_format,
            payload=encode_frame(pixels, self.export_format),
            level=level,
        )
        if self.sink is not None:
            self.sink(artifact)
        return artifact
