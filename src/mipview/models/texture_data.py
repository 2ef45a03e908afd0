"""Core data structures passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image


@dataclass(frozen=True)
class SourceImage:
    """Decoded raster input. Replaced wholesale on every load."""

    name: str
    image: Image.Image
    source_path: Optional[Path] = None

    def __post_init__(self):
        width, height = self.image.size
        if width <= 0 or height <= 0:
            raise ValueError(f"Source image must have positive size, got {width}x{height}")

    @property
    def width(self) -> int:
        return self.image.size[0]

    @property
    def height(self) -> int:
        return self.image.size[1]

    @property
    def stem(self) -> str:
        """File name without extension ("photo.JPG" -> "photo")."""
        return Path(self.name).stem


@dataclass(frozen=True)
class CanonicalBuffer:
    """Square RGBA buffer with side 2**power."""

    pixels: np.ndarray
    power: int

    def __post_init__(self):
        side = 2 ** self.power
        if self.pixels.shape != (side, side, 4):
            raise ValueError(
                f"Canonical buffer must be {side}x{side}x4, got {self.pixels.shape}"
            )

    @property
    def side(self) -> int:
        return self.pixels.shape[0]

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)


@dataclass
class MipChain:
    """Level 0 is the canonical buffer, level i has side S >> i down to 1."""

    levels: List[np.ndarray] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.levels)

    def __getitem__(self, index: int) -> np.ndarray:
        return self.levels[index]

    def __iter__(self):
        return iter(self.levels)

    @property
    def power(self) -> int:
        return len(self.levels) - 1

    def side(self, level: int) -> int:
        return self.levels[level].shape[0]


@dataclass(frozen=True)
class ExportArtifact:
    """Encoded frame captured at one mip bias, ready for an output sink."""

    label: str
    extension: str
    payload: bytes
    level: Optional[int] = None

    @property
    def filename(self) -> str:
        return f"{self.label}.{self.extension}"
