"""Per-frame rendering of the canonical texture into the render target.

The pipeline starts Uninitialized. The first initialize() (or draw()) compiles
the shader program, builds the full-screen quad and sets the clear colour.
After that it stays Ready until close().
"""

import enum
import logging

import OpenGL.GL as gl

from mipview.components.shader_program import MAIN_PROGRAM_OPTION, ShaderProgram
from mipview.constants import DEFAULT_CLEAR_COLOR, QUAD_INDEX_COUNT
from mipview.errors import GLResourceError
from mipview.services.framebuffer_rtt import FramebufferRTT
from mipview.services.texture_manager import TextureManager
from mipview.utils.quad_renderer import QuadRenderer

logger = logging.getLogger(__name__)


class RenderState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class RenderPipeline:
    """Draws a texture on a quad, parameterized by RenderParameters.
    
    Args:
        gl_api: OpenGL API module
        texture_manager: TextureManager that binds the sampled texture. Its
            texture unit is also the unit passed to the shader.
        program: Pre-built ShaderProgram. None compiles main.vert/main.frag
            through ShaderManager on initialize().
        shader_manager: ShaderManager used when no program is given
        clear_color: RGBA clear colour
        framebuffer: Render target. None creates a FramebufferRTT.
    """

    def __init__(self, gl_api=gl, texture_manager=None, program=None, shader_manager=None,
                 clear_color=DEFAULT_CLEAR_COLOR, framebuffer=None):
        self.gl = gl_api
        self.texture_manager = texture_manager if texture_manager is not None else TextureManager(gl_api)
        self.program = program
        self.shader_manager = shader_manager
        self.clear_color = tuple(clear_color)
        self.framebuffer = framebuffer if framebuffer is not None else FramebufferRTT(gl_api)

        self.vao = None
        self.vbo = None
        self.ibo = None
        self.state = RenderState.UNINITIALIZED

    @property
    def ready(self) -> bool:
        return self.state is RenderState.READY

    @property
    def texture_unit(self) -> int:
        return self.texture_manager.texture_unit

    @property
    def size(self) -> int:
        """Current side of the render target (0 before the first draw)."""
        return self.framebuffer.size

    def _build_program(self):
        if self.shader_manager is None:
            from mipview.components.shader_manager import ShaderManager
            self.shader_manager = ShaderManager()
        qprogram = self.shader_manager.create_main_program()
        if qprogram is None:
            raise GLResourceError("Shader compilation failed")
        return ShaderProgram(qprogram, MAIN_PROGRAM_OPTION, self.gl)

    def initialize(self):
        """One-time setup: shader program, quad geometry and clear colour."""
        if self.ready:
            return

        if self.program is None:
            self.program = self._build_program()

        self.program.use()
        self.vao, self.vbo, self.ibo = QuadRenderer.create_full_screen_quad(self.program, self.gl)
        self.program.release()

        self.gl.glClearColor(*self.clear_color)
        self.state = RenderState.READY
        logger.debug("Render pipeline ready")

    def resize(self, side):
        """Resize the render target (and viewport) to the canonical side."""
        self.framebuffer.resize(side)

    def draw(self, texture, params) -> bool:
        """Render one frame.
        
        Args:
            texture: GpuTexture to sample, or None
            params: RenderParameters (geometry_scale, mip_bias)
        
        Returns:
            bool: False if there was nothing to draw
        """
        if texture is None or texture.disposed:
            logger.debug("Draw skipped: no texture loaded")
            return False

        if not self.ready:
            self.initialize()

        g = self.gl
        self.resize(texture.side)
        self.framebuffer.bind()

        g.glClearColor(*self.clear_color)
        g.glClear(g.GL_COLOR_BUFFER_BIT)

        self.texture_manager.bind(texture)

        self.program.use()
        self.program.set_uniform([
            params.geometry_scale,
            self.texture_unit,
            params.mip_bias,
        ])

        g.glBindVertexArray(self.vao)
        g.glDrawElements(g.GL_TRIANGLES, QUAD_INDEX_COUNT, g.GL_UNSIGNED_SHORT, None)
        g.glBindVertexArray(0)

        self.program.release()
        g.glFlush()
        self.framebuffer.unbind()
        return True

    def read_pixels(self):
        """Read the last rendered frame (top-down S x S x 4 uint8)."""
        return self.framebuffer.read_pixels()

    def close(self):
        """Release geometry and render target; back to Uninitialized."""
        if self.vao is not None:
            QuadRenderer.destroy_quad(self.vao, self.vbo, self.ibo, self.gl)
            self.vao = self.vbo = self.ibo = None
        self.framebuffer.cleanup()
        self.state = RenderState.UNINITIALIZED
