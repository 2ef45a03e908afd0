"""Data models for the texture pipeline."""

from mipview.models.render_parameters import RenderParameters, preview_transform
from mipview.models.texture_data import (
    CanonicalBuffer,
    ExportArtifact,
    MipChain,
    SourceImage,
)

__all__ = [
    "CanonicalBuffer",
    "ExportArtifact",
    "MipChain",
    "RenderParameters",
    "SourceImage",
    "preview_transform",
]
