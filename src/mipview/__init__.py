"""mipview - square power-of-two textures, mip previews and per-level export."""

from mipview.version import get_version

__version__ = get_version()

__all__ = ["__version__", "get_version"]
