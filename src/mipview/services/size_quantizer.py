"""Power-of-two size quantization for canonical square buffers."""

from typing import Tuple

from mipview.constants import SQUARE_MAX_POWER


def is_power_of_two(v: int) -> bool:
    """Return True if v is a positive power of two."""
    if v == 0:
        return False
    return (v & (v - 1)) == 0


def quantize(width: int, height: int, max_power: int = SQUARE_MAX_POWER) -> Tuple[int, int]:
    """Compute the canonical square side for an image.
    
    The side is the smallest power of two strictly greater than the larger
    dimension, with a minimum power of 1 (a 1x1 image gives side 2). Sources
    whose side would exceed 2**max_power are clamped to it.
    
    Args:
        width: Natural image width (> 0)
        height: Natural image height (> 0)
        max_power: Exponent of the largest allowed side
    
    Returns:
        tuple: (side, power) with side == 2 ** power
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if max_power < 1:
        raise ValueError(f"max_power must be at least 1, got {max_power}")

    # 2**p > target  <=>  p >= target.bit_length()
    target = max(int(width), int(height))
    power = max(1, target.bit_length())

    if power > max_power:
        power = max_power
    return 2 ** power, power
