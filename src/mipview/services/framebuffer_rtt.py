"""
Render-to-Texture (RTT) Framebuffer Manager

Manages the OpenGL framebuffer object every frame is rendered into. The
colour attachment always matches the canonical side of the loaded image, so
that rendered frames can be read back pixel for pixel for export and preview.

Architecture:
1. Create FBO with RGBA texture attachment sized S x S
2. Reallocate the attachment whenever S changes
3. Render the textured quad into the FBO
4. Read the frame back (top-down rows) for export or on-screen display
"""

import logging

import numpy as np
import OpenGL.GL as gl

from mipview.errors import GLResourceError

logger = logging.getLogger(__name__)


class FramebufferRTT:
	"""
	Manages an offscreen framebuffer for render-to-texture operations.
	
	The framebuffer contains a single RGBA texture whose side tracks the
	canonical buffer side.
	"""
	
	def __init__(self, gl_api=gl):
		"""Initialize framebuffer (lazy - actual creation on first use)."""
		self.gl = gl_api
		self.fbo = None
		self.texture = None
		self.size = 0
		self.initialized = False
	
	def initialize(self, size):
		"""Create framebuffer and texture attachment of size x size pixels."""
		if self.initialized:
			self.resize(size)
			return
		
		g = self.gl
		self.fbo = g.glGenFramebuffers(1)
		self.texture = g.glGenTextures(1)
		self.initialized = True
		self._allocate(size)
	
	def _allocate(self, size):
		"""(Re)allocate the colour attachment and check completeness."""
		g = self.gl
		g.glBindFramebuffer(g.GL_FRAMEBUFFER, self.fbo)
		g.glBindTexture(g.GL_TEXTURE_2D, self.texture)
		
		g.glTexImage2D(
			g.GL_TEXTURE_2D, 0, g.GL_RGBA8,
			size, size, 0,
			g.GL_RGBA, g.GL_UNSIGNED_BYTE, None
		)
		
		# Texture parameters (no mipmaps, nearest for exact readback)
		g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_MIN_FILTER, g.GL_NEAREST)
		g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_MAG_FILTER, g.GL_NEAREST)
		g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_WRAP_S, g.GL_CLAMP_TO_EDGE)
		g.glTexParameteri(g.GL_TEXTURE_2D, g.GL_TEXTURE_WRAP_T, g.GL_CLAMP_TO_EDGE)
		
		g.glFramebufferTexture2D(
			g.GL_FRAMEBUFFER, g.GL_COLOR_ATTACHMENT0,
			g.GL_TEXTURE_2D, self.texture, 0
		)
		
		status = g.glCheckFramebufferStatus(g.GL_FRAMEBUFFER)
		g.glBindTexture(g.GL_TEXTURE_2D, 0)
		g.glBindFramebuffer(g.GL_FRAMEBUFFER, 0)
		if status != g.GL_FRAMEBUFFER_COMPLETE:
			error_msg = {
				g.GL_FRAMEBUFFER_INCOMPLETE_ATTACHMENT: "Incomplete attachment",
				g.GL_FRAMEBUFFER_INCOMPLETE_MISSING_ATTACHMENT: "Missing attachment",
				g.GL_FRAMEBUFFER_UNSUPPORTED: "Unsupported format",
			}.get(status, f"Unknown error ({status})")
			raise GLResourceError(f"Framebuffer incomplete: {error_msg}")
		
		self.size = size
		logger.debug("Render target resized to %dx%d", size, size)
	
	def resize(self, size):
		"""Match the attachment to a new canonical side (no-op if unchanged)."""
		if not self.initialized:
			self.initialize(size)
		elif size != self.size:
			self._allocate(size)
	
	def bind(self):
		"""
		Bind framebuffer for rendering.
		
		After this call, all rendering goes to the offscreen texture until
		unbind() is called.
		"""
		if not self.initialized:
			raise GLResourceError("Framebuffer used before initialize()")
		
		self.gl.glBindFramebuffer(self.gl.GL_FRAMEBUFFER, self.fbo)
		self.gl.glViewport(0, 0, self.size, self.size)
	
	def unbind(self):
		"""Unbind framebuffer (return to default framebuffer)."""
		self.gl.glBindFramebuffer(self.gl.GL_FRAMEBUFFER, 0)
	
	def read_pixels(self):
		"""
		Read the rendered frame back from the GPU.
		
		Returns:
			numpy.ndarray: size x size x 4 uint8 array, first row at the top
		"""
		g = self.gl
		g.glBindFramebuffer(g.GL_FRAMEBUFFER, self.fbo)
		g.glPixelStorei(g.GL_PACK_ALIGNMENT, 1)
		pixels = g.glReadPixels(0, 0, self.size, self.size, g.GL_RGBA, g.GL_UNSIGNED_BYTE)
		g.glBindFramebuffer(g.GL_FRAMEBUFFER, 0)
		
		pixel_array = np.frombuffer(pixels, dtype=np.uint8).reshape(self.size, self.size, 4)
		
		# OpenGL reads bottom-up; flip vertically
		return np.flipud(pixel_array).copy()
	
	def cleanup(self):
		"""Release OpenGL resources (safe to call repeatedly)."""
		if self.texture:
			self.gl.glDeleteTextures([self.texture])
			self.texture = None
		
		if self.fbo:
			self.gl.glDeleteFramebuffers(1, [self.fbo])
			self.fbo = None
		
		self.size = 0
		self.initialized = False
