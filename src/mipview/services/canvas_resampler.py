"""Resampling of source images into canonical square buffers and mip chains."""

import logging

import numpy as np
from PIL import Image

from mipview.constants import SQUARE_MAX_POWER
from mipview.models.texture_data import CanonicalBuffer, MipChain, SourceImage
from mipview.services.size_quantizer import quantize

logger = logging.getLogger(__name__)


def _to_rgba(image: Image.Image) -> Image.Image:
    if image.mode != "RGBA":
        return image.convert("RGBA")
    return image


def resample(source: SourceImage, max_power: int = SQUARE_MAX_POWER) -> CanonicalBuffer:
    """Stretch a source image over a square power-of-two buffer.
    
    Aspect ratio is not preserved: the whole image is drawn into the full
    S x S square with a bilinear scaled draw.
    """
    side, power = quantize(source.width, source.height, max_power)
    rgba = _to_rgba(source.image)
    if rgba.size != (side, side):
        rgba = rgba.resize((side, side), resample=Image.Resampling.BILINEAR)
    pixels = np.array(rgba, dtype=np.uint8)

    logger.debug(
        "Resampled %s from %dx%d to %dx%d (power %d)",
        source.name, source.width, source.height, side, side, power,
    )
    return CanonicalBuffer(pixels=pixels, power=power)


def build_mip_chain(buffer: CanonicalBuffer) -> MipChain:
    """Build the full mip chain by repeatedly redrawing the base at half size.
    
    Every level is drawn from the canonical buffer (not from the previous
    level), giving sides S, S/2, ..., 1.
    """
    base = buffer.to_image()
    levels = [buffer.pixels]
    for i in range(1, buffer.power + 1):
        size = buffer.side >> i
        level = base.resize((size, size), resample=Image.Resampling.BILINEAR)
        levels.append(np.array(level, dtype=np.uint8))
    return MipChain(levels=levels)
