"""
Shared fixtures for mipview tests.

Provides sample images on disk, a recording stand-in for the OpenGL API and a
stand-in shader program, so that the texture lifecycle and render logic can be
tested without a GL context.
"""
import os
import sys

import numpy as np
import pytest
from PIL import Image

# Ensure src is on the path when running from a checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

# Qt must not look for a display server in CI
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')


# ── Recording GL API ────────────────────────────────────────────────────

class FakeGL:
    """Records GL calls. GL_* names resolve to stable integer constants.
    
    Tracks texture handles so tests can check the lifecycle:
        live_textures   handles created and not yet deleted
        texture_levels  handle -> {mip level: uploaded width}
    """

    def __init__(self):
        self.calls = []
        self._constants = {}
        self._next_handle = 1
        self.bound_texture = 0
        self.live_textures = set()
        self.texture_levels = {}
        self.max_live_textures = 0

    def __getattr__(self, name):
        if name.startswith('GL_'):
            constants = self.__dict__['_constants']
            if name not in constants:
                constants[name] = 0x8000 + len(constants)
            return constants[name]
        if name.startswith('gl'):
            def record(*args):
                self.calls.append((name, args))
            return record
        raise AttributeError(name)

    def _handle(self):
        handle = self._next_handle
        self._next_handle += 1
        return handle

    # -- object creation ---------------------------------------------------

    def glGenTextures(self, n):
        handle = self._handle()
        self.calls.append(('glGenTextures', (n,)))
        self.live_textures.add(handle)
        self.max_live_textures = max(self.max_live_textures, len(self.live_textures))
        return handle

    def glDeleteTextures(self, handles):
        self.calls.append(('glDeleteTextures', (list(handles),)))
        for handle in handles:
            self.live_textures.discard(handle)
            self.texture_levels.pop(handle, None)

    def glGenBuffers(self, n):
        self.calls.append(('glGenBuffers', (n,)))
        return self._handle()

    def glGenVertexArrays(self, n):
        self.calls.append(('glGenVertexArrays', (n,)))
        return self._handle()

    def glGenFramebuffers(self, n):
        self.calls.append(('glGenFramebuffers', (n,)))
        return self._handle()

    # -- state -------------------------------------------------------------

    def glBindTexture(self, target, handle):
        self.calls.append(('glBindTexture', (target, handle)))
        self.bound_texture = handle

    def glTexImage2D(self, target, level, internal, width, height, border, fmt, kind, data):
        self.calls.append(('glTexImage2D', (target, level, internal, width, height, border, fmt, kind, data)))
        if data is not None:
            self.texture_levels.setdefault(self.bound_texture, {})[level] = width

    def glCheckFramebufferStatus(self, target):
        self.calls.append(('glCheckFramebufferStatus', (target,)))
        return self.GL_FRAMEBUFFER_COMPLETE

    def glReadPixels(self, x, y, width, height, fmt, kind):
        self.calls.append(('glReadPixels', (x, y, width, height, fmt, kind)))
        # Row r (counted bottom-up, as GL returns it) is filled with value r
        rows = np.repeat((np.arange(height) % 256).astype(np.uint8), width * 4)
        return rows.tobytes()

    # -- inspection --------------------------------------------------------

    def names(self):
        return [name for name, _ in self.calls]

    def calls_named(self, name):
        return [args for call, args in self.calls if call == name]

    def reset_calls(self):
        self.calls = []


class FakeShaderProgram:
    """Stand-in for ShaderProgram recording what the pipeline sets."""

    def __init__(self):
        self.bound = False
        self.use_count = 0
        self.attributes = []
        self.uniforms = []

    def use(self):
        self.bound = True
        self.use_count += 1

    def release(self):
        self.bound = False

    def set_attribute(self, vbos, ibo=None):
        self.attributes.append((list(vbos), ibo))

    def set_uniform(self, values):
        self.uniforms.append(list(values))


# ── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def fake_gl():
    """Fresh recording GL API"""
    return FakeGL()


@pytest.fixture
def fake_program():
    """Fresh stand-in shader program"""
    return FakeShaderProgram()


@pytest.fixture
def make_pipeline(fake_gl, fake_program):
    """Factory for TexturePipelines running against the recording GL API"""
    from mipview.config import PipelineConfig
    from mipview.services.render_pipeline import RenderPipeline
    from mipview.services.texture_pipeline import TexturePipeline

    def factory(config=None, sink=None):
        config = config or PipelineConfig()
        renderer = RenderPipeline(fake_gl, program=fake_program,
                                  clear_color=config.clear_color)
        return TexturePipeline(config, gl_api=fake_gl, render_pipeline=renderer, sink=sink)

    return factory


def write_image(path, size, color=(200, 40, 40, 255), mode="RGBA"):
    """Write a solid-colour image and return its path"""
    img = Image.new(mode, size, color[:len(mode)])
    img.save(path)
    return path


@pytest.fixture
def photo_path(tmp_path):
    """300x200 JPEG named like a camera file"""
    return write_image(tmp_path / "photo.JPG", (300, 200), (10, 120, 240), mode="RGB")


@pytest.fixture
def small_png(tmp_path):
    """20x10 PNG"""
    return write_image(tmp_path / "small.png", (20, 10))


@pytest.fixture
def gradient_image():
    """64x32 RGBA image with a horizontal red gradient"""
    pixels = np.zeros((32, 64, 4), dtype=np.uint8)
    pixels[..., 0] = np.linspace(0, 255, 64, dtype=np.uint8)[None, :]
    pixels[..., 3] = 255
    return Image.fromarray(pixels)
