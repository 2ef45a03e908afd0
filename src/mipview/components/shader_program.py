"""Shader program wrapper with declarative attribute and uniform tables."""

import logging

import OpenGL.GL as gl

logger = logging.getLogger(__name__)

# Vertex/fragment pair used to draw the textured quad
MAIN_PROGRAM_OPTION = {
    'attribute': [
        'position',
    ],
    'stride': [
        2,
    ],
    'uniform': [
        'geometryScale',
        'textureUnit',
        'textureBias',
    ],
    'type': [
        'uniform1f',
        'uniform1i',
        'uniform1f',
    ],
}


class ShaderProgram:
    """Linked program plus the attribute/uniform layout it is driven with.
    
    Args:
        program: Linked QOpenGLShaderProgram
        option: Dict with 'attribute', 'stride', 'uniform' and 'type' lists
        gl_api: OpenGL API module used for vertex attribute setup
    """

    def __init__(self, program, option, gl_api=gl):
        if len(option['attribute']) != len(option['stride']):
            raise ValueError("Each attribute needs a stride")
        if len(option['uniform']) != len(option['type']):
            raise ValueError("Each uniform needs a type")

        self.program = program
        self.gl = gl_api
        self.attributes = list(option['attribute'])
        self.strides = list(option['stride'])
        self.uniforms = list(option['uniform'])
        self.types = list(option['type'])
        self.attribute_locations = [program.attributeLocation(name) for name in self.attributes]

    def use(self):
        self.program.bind()

    def release(self):
        self.program.release()

    def set_attribute(self, vbos, ibo=None):
        """Point each attribute at its vertex buffer and bind the index buffer."""
        gl_api = self.gl
        for location, stride, vbo in zip(self.attribute_locations, self.strides, vbos):
            if location < 0:
                continue
            gl_api.glBindBuffer(gl_api.GL_ARRAY_BUFFER, vbo)
            gl_api.glEnableVertexAttribArray(location)
            gl_api.glVertexAttribPointer(location, stride, gl_api.GL_FLOAT, gl_api.GL_FALSE, 0, None)
        if ibo is not None:
            gl_api.glBindBuffer(gl_api.GL_ELEMENT_ARRAY_BUFFER, ibo)

    def set_uniform(self, values):
        """Set every uniform, in declaration order.
        
        Args:
            values: One value per entry of the 'uniform' list
        """
        if len(values) != len(self.uniforms):
            raise ValueError(f"Expected {len(self.uniforms)} uniform values, got {len(values)}")
        for name, kind, value in zip(self.uniforms, self.types, values):
            if kind == 'uniform1i':
                self.program.setUniformValue(name, int(value))
            elif kind == 'uniform1f':
                self.program.setUniformValue(name, float(value))
            else:
                raise ValueError(f"Unsupported uniform type: {kind}")
