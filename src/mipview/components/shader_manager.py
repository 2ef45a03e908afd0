"""GLSL loading and program linking for the render pipeline."""

import logging
from pathlib import Path

from PyQt5.QtGui import QOpenGLShader, QOpenGLShaderProgram

from mipview.constants import MAIN_FRAGMENT_SHADER, MAIN_VERTEX_SHADER
from mipview.utils.path_resolver import get_shader_dir

logger = logging.getLogger(__name__)

_STAGE_NAMES = {
    QOpenGLShader.Vertex: 'vertex',
    QOpenGLShader.Fragment: 'fragment',
}


class ShaderManager:
    """Reads shader sources from a directory and links programs from them.
    
    Args:
        shader_dir: Directory holding *.vert / *.frag files. None uses the
            shaders bundled with the package.
    """

    def __init__(self, shader_dir=None):
        self.shader_dir = Path(shader_dir) if shader_dir is not None else get_shader_dir()

    def load_source(self, filename):
        """Return the text of a shader file, or None if it cannot be read."""
        path = self.shader_dir / filename
        try:
            return path.read_text(encoding='utf-8')
        except OSError as e:
            logger.error("Cannot read shader %s: %s", path, e)
            return None

    def create_program(self, vertex_file, fragment_file, parent=None, program_name="Shader"):
        """Compile a vertex/fragment pair and link it.
        
        Returns:
            QOpenGLShaderProgram, or None if a source is missing or
            compilation/linking failed (the GL log is written to the logger)
        """
        program = QOpenGLShaderProgram(parent)

        for stage, filename in ((QOpenGLShader.Vertex, vertex_file),
                                (QOpenGLShader.Fragment, fragment_file)):
            source = self.load_source(filename)
            if source is None:
                return None
            if not program.addShaderFromSourceCode(stage, source):
                logger.error("%s %s shader (%s) failed to compile: %s",
                             program_name, _STAGE_NAMES[stage], filename, program.log())
                return None

        if not program.link():
            logger.error("%s program failed to link: %s", program_name, program.log())
            return None

        logger.debug("Linked %s program (%s + %s)", program_name, vertex_file, fragment_file)
        return program

    def create_main_program(self, parent=None):
        """Program drawing the textured quad at a given mip level."""
        return self.create_program(MAIN_VERTEX_SHADER, MAIN_FRAGMENT_SHADER, parent, 'Main')
