"""Source image loading.

Synchronous helpers decode straight away. ImageLoader wraps the same work in
an asyncio task with a timeout and a single in-flight load: starting a new
load cancels the previous one (last started wins).
"""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from mipview.errors import ImageLoadError, ImageLoadTimeout, LoadSuperseded
from mipview.models.texture_data import SourceImage

logger = logging.getLogger(__name__)

# Oversized sources are clamped to the canonical ceiling after decoding
Image.MAX_IMAGE_PIXELS = None


def load_source_image_bytes(data: bytes, name: str, source_path: Optional[Path] = None) -> SourceImage:
    """Decode an in-memory raster file into a SourceImage.
    
    EXIF orientation is applied, so a camera photo tagged as rotated is
    returned upright with its displayed width and height.
    
    Raises:
        ImageLoadError: If the data is not a decodable image.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageLoadError(f"Could not decode {name}: {e}") from e
    try:
        return SourceImage(name=name, image=img.convert("RGBA"), source_path=source_path)
    except ValueError as e:
        raise ImageLoadError(str(e)) from e


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageLoadError(f"Could not read {path}: {e}") from e


def load_source_image(path: Union[str, Path]) -> SourceImage:
    """Read and decode a raster file."""
    path = Path(path)
    return load_source_image_bytes(_read_file(path), path.name, source_path=path)


class ImageLoader:
    """Asynchronous loader enforcing one in-flight load at a time."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._current: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self._current is not None and not self._current.done()

    async def _load(self, path: Path) -> SourceImage:
        data = await asyncio.to_thread(_read_file, path)
        return await asyncio.to_thread(load_source_image_bytes, data, path.name, path)

    async def load(self, path: Union[str, Path], timeout: Optional[float] = None) -> SourceImage:
        """Load a source image, superseding any load still in flight.
        
        Args:
            path: Image file to load.
            timeout: Seconds to wait; defaults to the loader timeout.
                None waits indefinitely.
        
        Raises:
            ImageLoadError: If the file cannot be read or decoded.
            ImageLoadTimeout: If loading takes longer than the timeout.
            LoadSuperseded: If another load started before this one finished.
        """
        path = Path(path)
        timeout = self.timeout if timeout is None else timeout

        if self.busy:
            logger.info("Superseding in-flight load with %s", path.name)
            self._current.cancel()

        self._generation += 1
        generation = self._generation
        task = asyncio.ensure_future(self._load(path))
        self._current = task

        try:
            return await asyncio.wait_for(task, timeout)
        except asyncio.TimeoutError as e:
            raise ImageLoadTimeout(f"Loading {path.name} timed out after {timeout}s") from e
        except asyncio.CancelledError:
            if generation != self._generation:
                raise LoadSuperseded(f"Load of {path.name} superseded by a newer load") from None
            raise
        finally:
            if self._current is task:
                self._current = None

    def cancel(self):
        """Cancel the in-flight load, if any."""
        if self.busy:
            self._current.cancel()
