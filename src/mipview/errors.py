"""Exception hierarchy for mipview."""


class MipviewError(Exception):
    """Base class for all mipview errors."""


class ConfigError(MipviewError):
    """Configuration file could not be read or holds invalid values."""


class ImageLoadError(MipviewError):
    """Source image could not be read or decoded."""


class ImageLoadTimeout(ImageLoadError):
    """Source image did not finish loading within the allowed time."""


class LoadSuperseded(ImageLoadError):
    """A newer load was started before this one completed."""


class GLResourceError(MipviewError):
    """OpenGL context, shader or framebuffer setup failed."""
