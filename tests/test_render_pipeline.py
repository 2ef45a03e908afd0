"""
Tests for RenderPipeline draw sequencing against the recording GL API.
"""
import pytest

from mipview.errors import GLResourceError
from mipview.models.render_parameters import RenderParameters
from mipview.services.render_pipeline import RenderPipeline, RenderState
from mipview.services.texture_manager import GpuTexture, TextureManager


@pytest.fixture
def renderer(fake_gl, fake_program):
    return RenderPipeline(fake_gl, program=fake_program)


@pytest.fixture
def texture():
    return GpuTexture(handle=42, side=8, power=3, level_count=4)


class TestInitialize:

    def test_starts_uninitialized(self, renderer):
        assert renderer.state is RenderState.UNINITIALIZED
        assert renderer.size == 0

    def test_initialize_builds_quad_once(self, renderer, fake_gl, fake_program):
        renderer.initialize()
        renderer.initialize()

        assert renderer.ready
        assert len(fake_gl.calls_named('glGenVertexArrays')) == 1
        assert len(fake_gl.calls_named('glGenBuffers')) == 2
        assert len(fake_program.attributes) == 1
        assert fake_gl.calls_named('glClearColor') == [(0.5, 0.5, 0.5, 1.0)]

    def test_quad_attributes_bind_vertex_and_index_buffers(self, renderer, fake_program):
        renderer.initialize()
        vbos, ibo = fake_program.attributes[0]
        assert vbos == [renderer.vbo]
        assert ibo == renderer.ibo

    def test_missing_shader_raises(self, fake_gl):
        class BrokenShaders:
            def create_main_program(self):
                return None

        renderer = RenderPipeline(fake_gl, shader_manager=BrokenShaders())
        with pytest.raises(GLResourceError):
            renderer.initialize()
        assert not renderer.ready


class TestDraw:

    def test_no_texture_is_a_no_op(self, renderer, fake_gl):
        assert not renderer.draw(None, RenderParameters())
        assert fake_gl.calls == []

    def test_disposed_texture_is_a_no_op(self, renderer, fake_gl, texture):
        texture.disposed = True
        assert not renderer.draw(texture, RenderParameters())
        assert 'glDrawElements' not in fake_gl.names()

    def test_draw_initializes_lazily(self, renderer, texture):
        assert renderer.draw(texture, RenderParameters())
        assert renderer.ready

    def test_uniforms_follow_parameters(self, renderer, fake_program, texture):
        params = RenderParameters(geometry_scale=0.5, mip_bias=2.0)
        renderer.draw(texture, params)
        assert fake_program.uniforms == [[0.5, 0, 2.0]]
        assert not fake_program.bound

    def test_texture_bound_through_manager_unit(self, fake_gl, fake_program, texture):
        manager = TextureManager(fake_gl, texture_unit=2)
        renderer = RenderPipeline(fake_gl, texture_manager=manager, program=fake_program)

        renderer.draw(texture, RenderParameters())

        assert fake_gl.calls_named('glActiveTexture') == [(fake_gl.GL_TEXTURE0 + 2,)]
        assert fake_gl.bound_texture == 42
        assert fake_program.uniforms == [[1.0, 2, 0.0]]

    def test_draw_sequence(self, renderer, fake_gl, texture):
        renderer.draw(texture, RenderParameters())

        assert fake_gl.calls_named('glViewport') == [(0, 0, 8, 8)]
        assert fake_gl.calls_named('glClear') == [(fake_gl.GL_COLOR_BUFFER_BIT,)]
        assert fake_gl.calls_named('glDrawElements') == [
            (fake_gl.GL_TRIANGLES, 6, fake_gl.GL_UNSIGNED_SHORT, None)
        ]
        names = fake_gl.names()
        assert names.index('glClear') < names.index('glDrawElements') < names.index('glFlush')
        assert (fake_gl.GL_TEXTURE_2D, 42) in fake_gl.calls_named('glBindTexture')

    def test_render_target_tracks_texture_side(self, renderer, fake_gl, texture):
        renderer.draw(texture, RenderParameters())
        renderer.draw(texture, RenderParameters())
        assert len(fake_gl.calls_named('glTexImage2D')) == 1

        bigger = GpuTexture(handle=43, side=32, power=5)
        renderer.draw(bigger, RenderParameters())
        assert renderer.size == 32
        assert fake_gl.calls_named('glViewport')[-1] == (0, 0, 32, 32)
        assert len(fake_gl.calls_named('glTexImage2D')) == 2

    def test_incomplete_framebuffer_raises(self, renderer, fake_gl, texture, monkeypatch):
        monkeypatch.setattr(fake_gl, 'glCheckFramebufferStatus',
                            lambda target: fake_gl.GL_FRAMEBUFFER_UNSUPPORTED, raising=False)
        with pytest.raises(GLResourceError):
            renderer.draw(texture, RenderParameters())


class TestReadback:

    def test_read_pixels_is_top_down(self, renderer, texture):
        renderer.draw(texture, RenderParameters())
        frame = renderer.read_pixels()
        assert frame.shape == (8, 8, 4)
        # The fake fills GL row r (bottom-up) with r
        assert (frame[0] == 7).all()
        assert (frame[-1] == 0).all()


class TestClose:

    def test_close_releases_everything(self, renderer, fake_gl, texture):
        renderer.draw(texture, RenderParameters())
        renderer.close()

        assert renderer.state is RenderState.UNINITIALIZED
        assert renderer.size == 0
        assert len(fake_gl.calls_named('glDeleteVertexArrays')) == 1
        assert len(fake_gl.calls_named('glDeleteBuffers')) == 2
        assert len(fake_gl.calls_named('glDeleteFramebuffers')) == 1
        assert not fake_gl.live_textures

    def test_close_twice_is_safe(self, renderer, fake_gl, texture):
        renderer.draw(texture, RenderParameters())
        renderer.close()
        fake_gl.reset_calls()
        renderer.close()
        assert fake_gl.calls == []

    def test_draw_after_close_reinitializes(self, renderer, fake_gl, texture):
        renderer.draw(texture, RenderParameters())
        renderer.close()
        assert renderer.draw(texture, RenderParameters())
        assert len(fake_gl.calls_named('glGenVertexArrays')) == 2
