"""Mutable render parameters read by the pipeline every frame."""

import logging
import math
from dataclasses import dataclass

from mipview.constants import (
    DEFAULT_GEOMETRY_SCALE, DEFAULT_MIP_BIAS, DEFAULT_PREVIEW_SCALE,
    MAX_GEOMETRY_SCALE, MAX_PREVIEW_SCALE, MIN_PREVIEW_SCALE,
    PARAMETER_ALIASES,
)

logger = logging.getLogger(__name__)


@dataclass
class RenderParameters:
    """User-adjustable values applied at draw time.
    
    preview_scale only affects how the rendered frame is displayed.
    geometry_scale shrinks the drawn quad. mip_bias selects the sampled
    mip level (fractional values blend adjacent levels).
    """

    preview_scale: float = DEFAULT_PREVIEW_SCALE
    geometry_scale: float = DEFAULT_GEOMETRY_SCALE
    mip_bias: float = DEFAULT_MIP_BIAS

    def set_parameter(self, name: str, value, max_bias: int) -> bool:
        """Validate and apply a single parameter update.
        
        Args:
            name: Parameter name (snake_case or camelCase).
            value: New numeric value.
            max_bias: Highest mip level currently available.
        
        Returns:
            bool: True if the value was applied, False if it was rejected.
        """
        attr = PARAMETER_ALIASES.get(name)
        if attr is None:
            logger.warning("Unknown render parameter: %s", name)
            return False

        # Only real numbers: bools and numeric strings are rejected
        if isinstance(value, (bool, str, bytes)):
            logger.warning("Rejected non-numeric %s: %r", attr, value)
            return False
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning("Rejected non-numeric %s: %r", attr, value)
            return False
        if not math.isfinite(number):
            return False

        if attr == 'preview_scale':
            valid = MIN_PREVIEW_SCALE <= number <= MAX_PREVIEW_SCALE
        elif attr == 'geometry_scale':
            valid = 0.0 < number <= MAX_GEOMETRY_SCALE
        else:
            valid = 0.0 <= number <= max_bias

        if not valid:
            logger.debug("Rejected out-of-range %s=%s", attr, number)
            return False

        setattr(self, attr, number)
        logger.debug("Set %s: %s", attr, number)
        return True


def preview_transform(canvas_side: int, window_height: int, preview_scale: float):
    """Compute the on-screen transform for the preview.
    
    The frame is scaled by preview_scale and shifted up so that a canvas
    taller than the window stays vertically centred in it.
    
    Returns:
        tuple: (scale, translate_y) with translate_y in unscaled pixels
    """
    translate = 0.0
    if canvas_side > window_height:
        translate = (canvas_side - window_height) * (0.5 / preview_scale)
    return preview_scale, translate
