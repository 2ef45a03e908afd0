"""Headless OpenGL context.

Creates a QOffscreenSurface + QOpenGLContext (OpenGL 3.3 Core) so that the
render pipeline can run without a window.
"""

import logging
import os
import sys

import OpenGL.GL as gl
from PyQt5.QtGui import QOffscreenSurface, QOpenGLContext, QSurfaceFormat
from PyQt5.QtWidgets import QApplication

from mipview.errors import GLResourceError

logger = logging.getLogger(__name__)


def ensure_qapp():
    """Return existing QApplication or create a headless one."""
    app = QApplication.instance()
    if app is None:
        # Without a display server Qt aborts unless the offscreen platform is used
        if sys.platform.startswith('linux') and not (
                os.environ.get('DISPLAY') or os.environ.get('WAYLAND_DISPLAY')):
            os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
        app = QApplication(sys.argv[:1])
    return app


def default_surface_format():
    """RGBA8, no depth/stencil, OpenGL 3.3 Core."""
    fmt = QSurfaceFormat()
    fmt.setVersion(3, 3)
    fmt.setProfile(QSurfaceFormat.CoreProfile)
    fmt.setRenderableType(QSurfaceFormat.OpenGL)
    fmt.setDepthBufferSize(0)
    fmt.setStencilBufferSize(0)
    fmt.setRedBufferSize(8)
    fmt.setGreenBufferSize(8)
    fmt.setBlueBufferSize(8)
    fmt.setAlphaBufferSize(8)
    return fmt


class OffscreenGLContext:
    """Owns a current GL context backed by an offscreen surface."""

    def __init__(self):
        self._app = ensure_qapp()
        fmt = default_surface_format()

        self._surface = QOffscreenSurface()
        self._surface.setFormat(fmt)
        self._surface.create()
        if not self._surface.isValid():
            raise GLResourceError("Failed to create QOffscreenSurface")

        self._gl_context = QOpenGLContext()
        self._gl_context.setFormat(fmt)
        if not self._gl_context.create():
            raise GLResourceError("Failed to create QOpenGLContext")

        self.make_current()

        version = gl.glGetString(gl.GL_VERSION)
        logger.info("Headless GL context ready: %s", version.decode() if version else "unknown")

    def make_current(self):
        if not self._gl_context.makeCurrent(self._surface):
            raise GLResourceError("Failed to make OpenGL context current")

    def done_current(self):
        self._gl_context.doneCurrent()

    def __enter__(self):
        self.make_current()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.done_current()
        return False
