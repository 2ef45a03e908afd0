"""OpenGL quad geometry.

Provides the static full-screen quad drawn by the render pipeline.
"""

import OpenGL.GL as gl

from mipview.constants import QUAD_INDICES, QUAD_POSITIONS
from mipview.utils.gl_utility import GLUtility


class QuadRenderer:
	"""Utility for building quad geometry in OpenGL."""
	
	@staticmethod
	def create_full_screen_quad(program, gl_api=gl):
		"""Create the static full-screen quad (two triangles, -1 to 1).
		
		Args:
			program: ShaderProgram whose attributes are bound to the quad
			gl_api: OpenGL API module
		
		Returns:
			tuple: (vao, vbo, ibo) - OpenGL objects for the quad
		"""
		vao = GLUtility.create_vao(gl_api)
		gl_api.glBindVertexArray(vao)
		
		vbo = GLUtility.create_vbo(QUAD_POSITIONS, gl_api)
		ibo = GLUtility.create_ibo(QUAD_INDICES, gl_api)
		
		# Attribute pointers and the index buffer are recorded in the VAO
		program.set_attribute([vbo], ibo)
		
		gl_api.glBindVertexArray(0)
		
		return vao, vbo, ibo
	
	@staticmethod
	def destroy_quad(vao, vbo, ibo, gl_api=gl):
		"""Release the objects created by create_full_screen_quad."""
		GLUtility.delete_buffers([vbo, ibo], gl_api)
		if vao:
			gl_api.glDeleteVertexArrays(1, [vao])
