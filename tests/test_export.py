"""Tests for pixel buffer export."""

import numpy as np
import pytest
from PIL import Image


class TestPixelsToArray:
    """Tests for reshaping flat buffers."""

    def test_reshape(self):
        from mirrortrace.camera import Viewport
        from mirrortrace.preview.export import pixels_to_array

        pixels = np.arange(3 * 2 * 4, dtype=np.uint8)
        image = pixels_to_array(pixels, Viewport(3, 2))
        assert image.shape == (2, 3, 4)
        # Row-major: the second pixel of the first row follows the first
        assert list(image[0, 1]) == [4, 5, 6, 7]
        assert list(image[1, 0]) == [12, 13, 14, 15]

    def test_size_mismatch(self):
        from mirrortrace.camera import Viewport
        from mirrortrace.preview.export import pixels_to_array

        with pytest.raises(ValueError, match="expected 24"):
            pixels_to_array(np.zeros(20, dtype=np.uint8), Viewport(3, 2))


class TestSavePng:
    """Tests for PNG export."""

    def test_pixels_to_image(self):
        from mirrortrace.camera import Viewport
        from mirrortrace.preview.export import pixels_to_image

        pixels = np.zeros(4 * 3 * 4, dtype=np.uint8)
        image = pixels_to_image(pixels, Viewport(4, 3))
        assert image.mode == "RGBA"
        assert image.size == (4, 3)

    def test_save_png_roundtrip(self, tmp_path):
        from mirrortrace.camera import Viewport
        from mirrortrace.preview.export import save_png

        viewport = Viewport(2, 2)
        pixels = np.array(
            [255, 0, 0, 255, 0, 255, 0, 255, 0, 0, 255, 255, 51, 51, 102, 255],
            dtype=np.uint8,
        )
        path = tmp_path / "frame.png"
        save_png(pixels, viewport, path)

        with Image.open(path) as image:
            assert image.mode == "RGBA"
            assert image.size == (2, 2)
            assert image.getpixel((0, 0)) == (255, 0, 0, 255)
            assert image.getpixel((1, 1)) == (51, 51, 102, 255)

    def test_save_rendered_scene(self, tmp_path, small_config):
        from mirrortrace.camera import Viewport
        from mirrortrace.preview.export import save_png
        from mirrortrace.scene.manager import Scene

        scene = Scene(config=small_config)
        viewport = Viewport(small_config.width, small_config.height)
        path = tmp_path / "empty.png"
        save_png(scene.render(viewport), viewport, path)

        with Image.open(path) as image:
            assert image.size == (8, 6)
            assert image.getpixel((7, 5)) == (51, 51, 102, 255)
