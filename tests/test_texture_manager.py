"""
Tests for the GPU texture lifecycle, run against the recording GL API.
"""
import numpy as np
import pytest

from mipview.models.texture_data import CanonicalBuffer
from mipview.services.canvas_resampler import build_mip_chain
from mipview.services.texture_manager import TextureManager


def make_buffer(power, value=128):
    side = 2 ** power
    return CanonicalBuffer(np.full((side, side, 4), value, dtype=np.uint8), power)


class TestUpload:

    def test_upload_creates_base_level(self, fake_gl):
        manager = TextureManager(fake_gl)
        texture = manager.upload(make_buffer(3))
        assert texture.live
        assert texture.side == 8
        assert texture.power == 3
        assert fake_gl.texture_levels[texture.handle] == {0: 8}
        assert manager.texture is texture

    def test_new_upload_disposes_previous_first(self, fake_gl):
        manager = TextureManager(fake_gl)
        first = manager.upload(make_buffer(2))
        fake_gl.reset_calls()
        second = manager.upload(make_buffer(4))

        names = fake_gl.names()
        assert names.index('glDeleteTextures') < names.index('glGenTextures')
        assert first.disposed
        assert second.live
        assert fake_gl.live_textures == {second.handle}
        assert fake_gl.max_live_textures == 1

    def test_texture_uses_clamp_to_edge(self, fake_gl):
        TextureManager(fake_gl).upload(make_buffer(1))
        params = fake_gl.calls_named('glTexParameteri')
        assert (fake_gl.GL_TEXTURE_2D, fake_gl.GL_TEXTURE_WRAP_S, fake_gl.GL_CLAMP_TO_EDGE) in params
        assert (fake_gl.GL_TEXTURE_2D, fake_gl.GL_TEXTURE_WRAP_T, fake_gl.GL_CLAMP_TO_EDGE) in params

    def test_unknown_strategy_rejected(self, fake_gl):
        with pytest.raises(ValueError):
            TextureManager(fake_gl, strategy='magic')


class TestPopulateMips:

    def test_cpu_strategy_uploads_every_level(self, fake_gl):
        manager = TextureManager(fake_gl, strategy='cpu')
        buffer = make_buffer(4)
        texture = manager.upload(buffer)
        manager.populate_mips(texture, build_mip_chain(buffer))

        assert fake_gl.texture_levels[texture.handle] == {0: 16, 1: 8, 2: 4, 3: 2, 4: 1}
        assert texture.level_count == 5
        assert 'glGenerateMipmap' not in fake_gl.names()

    def test_hardware_strategy_generates_mipmaps(self, fake_gl):
        manager = TextureManager(fake_gl, strategy='hardware')
        texture = manager.upload(make_buffer(4))
        manager.populate_mips(texture)

        assert fake_gl.calls_named('glGenerateMipmap') == [(fake_gl.GL_TEXTURE_2D,)]
        assert texture.level_count == 5

    def test_level_range_and_trilinear_filter(self, fake_gl):
        manager = TextureManager(fake_gl, strategy='hardware')
        texture = manager.upload(make_buffer(3))
        fake_gl.reset_calls()
        manager.populate_mips(texture)

        params = fake_gl.calls_named('glTexParameteri')
        assert (fake_gl.GL_TEXTURE_2D, fake_gl.GL_TEXTURE_BASE_LEVEL, 0) in params
        assert (fake_gl.GL_TEXTURE_2D, fake_gl.GL_TEXTURE_MAX_LEVEL, 3) in params
        assert (fake_gl.GL_TEXTURE_2D, fake_gl.GL_TEXTURE_MIN_FILTER,
                fake_gl.GL_LINEAR_MIPMAP_LINEAR) in params
        assert (fake_gl.GL_TEXTURE_2D, fake_gl.GL_TEXTURE_MAG_FILTER, fake_gl.GL_LINEAR) in params

    def test_nearest_filter_mode(self, fake_gl):
        manager = TextureManager(fake_gl, strategy='hardware', filter_mode='nearest')
        texture = manager.upload(make_buffer(2))
        fake_gl.reset_calls()
        manager.populate_mips(texture)

        params = fake_gl.calls_named('glTexParameteri')
        assert (fake_gl.GL_TEXTURE_2D, fake_gl.GL_TEXTURE_MIN_FILTER,
                fake_gl.GL_NEAREST_MIPMAP_NEAREST) in params

    def test_cpu_strategy_requires_chain(self, fake_gl):
        manager = TextureManager(fake_gl, strategy='cpu')
        texture = manager.upload(make_buffer(2))
        with pytest.raises(ValueError):
            manager.populate_mips(texture)

    def test_mismatched_chain_rejected(self, fake_gl):
        manager = TextureManager(fake_gl, strategy='cpu')
        texture = manager.upload(make_buffer(3))
        with pytest.raises(ValueError):
            manager.populate_mips(texture, build_mip_chain(make_buffer(2)))

    def test_disposed_texture_is_ignored(self, fake_gl):
        manager = TextureManager(fake_gl, strategy='hardware')
        texture = manager.upload(make_buffer(2))
        manager.dispose(texture)
        fake_gl.reset_calls()
        manager.populate_mips(texture)
        assert fake_gl.calls == []


class TestDispose:

    def test_dispose_is_idempotent(self, fake_gl):
        manager = TextureManager(fake_gl)
        texture = manager.upload(make_buffer(2))
        manager.dispose(texture)
        manager.dispose(texture)
        manager.dispose(None)

        assert len(fake_gl.calls_named('glDeleteTextures')) == 1
        assert texture.disposed
        assert manager.texture is None
        assert not fake_gl.live_textures

    def test_release_without_texture(self, fake_gl):
        TextureManager(fake_gl).release()
        assert fake_gl.calls == []

    def test_bind_uses_configured_unit(self, fake_gl):
        manager = TextureManager(fake_gl, texture_unit=2)
        texture = manager.upload(make_buffer(1))
        fake_gl.reset_calls()
        manager.bind(texture)
        assert fake_gl.calls_named('glActiveTexture') == [(fake_gl.GL_TEXTURE0 + 2,)]
        assert fake_gl.bound_texture == texture.handle
