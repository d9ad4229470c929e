"""
Unit tests for pixel buffer preparation and axis sampling.
"""

import numpy as np
import pytest

from services.strip_type.axis_sampler import average_color_region, detect_orientation, sample_along_strip_axis
from services.strip_type.errors import RenderContextFailure
from services.strip_type.models import RGB, WHITE, PixelBuffer
from services.strip_type.pixel_buffer import prepare_pixel_buffer


def rgba_image(height, width, rgba):
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :] = rgba
    return image


class TestPixelBuffer:
    """Test cases for PixelBuffer and prepare_pixel_buffer."""

    def test_from_flat(self):
        flat = [255, 0, 0, 255] * 6
        buffer = PixelBuffer.from_flat(3, 2, flat)
        assert buffer.data.shape == (2, 3, 4)
        assert tuple(buffer.data[1, 2]) == (255, 0, 0, 255)

    def test_from_flat_wrong_size(self):
        with pytest.raises(ValueError):
            PixelBuffer.from_flat(3, 2, [0] * 10)

    def test_large_image_is_downscaled(self):
        image = np.full((1200, 300, 3), 255, dtype=np.uint8)
        buffer = prepare_pixel_buffer(image, max_size=480)
        assert (buffer.width, buffer.height) == (120, 480)
        assert buffer.data.shape == (480, 120, 4)

    def test_small_image_keeps_size(self):
        image = np.full((100, 40, 3), 255, dtype=np.uint8)
        buffer = prepare_pixel_buffer(image)
        assert (buffer.width, buffer.height) == (40, 100)

    def test_empty_image_raises(self):
        with pytest.raises(RenderContextFailure):
            prepare_pixel_buffer(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_unsupported_channels_raise(self):
        with pytest.raises(RenderContextFailure):
            prepare_pixel_buffer(np.zeros((10, 10, 2), dtype=np.uint8))


class TestAxisSampler:
    """Test cases for orientation and axis sampling."""

    def test_orientation(self, make_buffer):
        assert detect_orientation(make_buffer(rgba_image(100, 40, (0, 0, 0, 255)))) == 'vertical'
        assert detect_orientation(make_buffer(rgba_image(40, 100, (0, 0, 0, 255)))) == 'horizontal'
        assert detect_orientation(make_buffer(rgba_image(50, 50, (0, 0, 0, 255)))) == 'vertical'

    def test_sample_count_and_order(self, make_buffer):
        buffer = make_buffer(rgba_image(480, 60, (200, 50, 50, 255)))
        samples = sample_along_strip_axis(buffer)
        assert len(samples) == 96
        assert [s.index for s in samples] == list(range(96))
        assert all(s.color == RGB(200, 50, 50) for s in samples)
        assert samples[0].saturation == pytest.approx(75.0)

    def test_vertical_axis_runs_top_to_bottom(self, make_buffer):
        image = rgba_image(480, 60, (200, 50, 50, 255))
        image[240:] = (50, 50, 200, 255)
        samples = sample_along_strip_axis(make_buffer(image))
        assert samples[0].color == RGB(200, 50, 50)
        assert samples[-1].color == RGB(50, 50, 200)

    def test_horizontal_axis_runs_left_to_right(self, make_buffer):
        image = rgba_image(60, 480, (200, 50, 50, 255))
        image[:, 240:] = (50, 50, 200, 255)
        samples = sample_along_strip_axis(make_buffer(image))
        assert samples[0].color == RGB(200, 50, 50)
        assert samples[-1].color == RGB(50, 50, 200)

    def test_transparent_pixels_fall_back_to_white(self, make_buffer):
        buffer = make_buffer(rgba_image(480, 60, (200, 50, 50, 0)))
        samples = sample_along_strip_axis(buffer)
        assert all(s.color == WHITE for s in samples)
        assert all(s.saturation == 0.0 for s in samples)

    def test_alpha_threshold(self, make_buffer):
        below = make_buffer(rgba_image(40, 40, (10, 200, 10, 219)))
        at = make_buffer(rgba_image(40, 40, (10, 200, 10, 220)))
        assert average_color_region(below, 0.5, 0.5, 0.5, 0.5) == WHITE
        assert average_color_region(at, 0.5, 0.5, 0.5, 0.5) == RGB(10, 200, 10)

    def test_custom_sample_count(self, make_buffer):
        buffer = make_buffer(rgba_image(200, 50, (0, 0, 0, 255)))
        assert len(sample_along_strip_axis(buffer, sample_count=24)) == 24
