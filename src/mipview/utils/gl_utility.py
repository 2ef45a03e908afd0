"""Low-level OpenGL object creation.

Every helper takes the GL API as an argument (defaults to PyOpenGL) so that
callers can run against a recording stand-in without a live context.
"""

import OpenGL.GL as gl
import numpy as np


class GLUtility:
    """Buffer, vertex array and texture creation helpers."""

    @staticmethod
    def create_vao(gl_api=gl):
        """Create a vertex array object (unbound)."""
        return gl_api.glGenVertexArrays(1)

    @staticmethod
    def create_vbo(data, gl_api=gl):
        """Create a static vertex buffer from a flat float sequence.
        
        Returns:
            int: OpenGL buffer ID (left unbound)
        """
        array = np.asarray(data, dtype=np.float32)
        vbo = gl_api.glGenBuffers(1)
        gl_api.glBindBuffer(gl_api.GL_ARRAY_BUFFER, vbo)
        gl_api.glBufferData(gl_api.GL_ARRAY_BUFFER, array.nbytes, array, gl_api.GL_STATIC_DRAW)
        gl_api.glBindBuffer(gl_api.GL_ARRAY_BUFFER, 0)
        return vbo

    @staticmethod
    def create_ibo(indices, gl_api=gl):
        """Create a static 16-bit index buffer.
        
        The buffer stays bound so that it is captured by the current VAO.
        """
        array = np.asarray(indices, dtype=np.uint16)
        ibo = gl_api.glGenBuffers(1)
        gl_api.glBindBuffer(gl_api.GL_ELEMENT_ARRAY_BUFFER, ibo)
        gl_api.glBufferData(gl_api.GL_ELEMENT_ARRAY_BUFFER, array.nbytes, array, gl_api.GL_STATIC_DRAW)
        return ibo

    @staticmethod
    def create_texture(pixels, gl_api=gl, min_filter=None, mag_filter=None):
        """Create a 2D RGBA texture from an H x W x 4 uint8 array (level 0 only).
        
        Returns:
            int: OpenGL texture ID (left bound to GL_TEXTURE_2D)
        """
        min_filter = gl_api.GL_LINEAR if min_filter is None else min_filter
        mag_filter = gl_api.GL_LINEAR if mag_filter is None else mag_filter

        texture_id = gl_api.glGenTextures(1)
        gl_api.glBindTexture(gl_api.GL_TEXTURE_2D, texture_id)

        gl_api.glTexParameteri(gl_api.GL_TEXTURE_2D, gl_api.GL_TEXTURE_WRAP_S, gl_api.GL_CLAMP_TO_EDGE)
        gl_api.glTexParameteri(gl_api.GL_TEXTURE_2D, gl_api.GL_TEXTURE_WRAP_T, gl_api.GL_CLAMP_TO_EDGE)
        gl_api.glTexParameteri(gl_api.GL_TEXTURE_2D, gl_api.GL_TEXTURE_MIN_FILTER, min_filter)
        gl_api.glTexParameteri(gl_api.GL_TEXTURE_2D, gl_api.GL_TEXTURE_MAG_FILTER, mag_filter)

        GLUtility.upload_level(0, pixels, gl_api)
        return texture_id

    @staticmethod
    def upload_level(level, pixels, gl_api=gl):
        """Upload one RGBA image to a mip level of the bound texture."""
        height, width = pixels.shape[:2]
        gl_api.glPixelStorei(gl_api.GL_UNPACK_ALIGNMENT, 1)
        gl_api.glTexImage2D(gl_api.GL_TEXTURE_2D, level, gl_api.GL_RGBA8, width, height,
                            0, gl_api.GL_RGBA, gl_api.GL_UNSIGNED_BYTE,
                            np.ascontiguousarray(pixels, dtype=np.uint8).tobytes())

    @staticmethod
    def delete_buffers(buffers, gl_api=gl):
        """Delete vertex/index buffers, skipping empty handles."""
        for buffer in buffers:
            if buffer:
                gl_api.glDeleteBuffers(1, [buffer])
