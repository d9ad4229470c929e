"""
Shared synthetic fixtures for strip type detection tests.
"""

import numpy as np
import pytest

from services.strip_type.models import RGB, AxisSample, PixelBuffer
from utils.color_conversion import get_lightness_and_saturation

PAD_RGB = (200, 50, 50)
WHITE_RGB = (255, 255, 255)


def build_sample(index, rgb):
    lightness, saturation = get_lightness_and_saturation(*rgb)
    return AxisSample(index=index, color=RGB(*rgb), lightness=lightness, saturation=saturation)


def build_sample_series(pad_ranges, sample_count=96, pad_rgb=PAD_RGB, background_rgb=WHITE_RGB):
    """Samples that are pad colored inside each [start, end] range and background elsewhere."""
    samples = []
    for i in range(sample_count):
        in_pad = any(start <= i <= end for start, end in pad_ranges)
        samples.append(build_sample(i, pad_rgb if in_pad else background_rgb))
    return tuple(samples)


def build_strip_image(pad_count, height=480, width=60, pad_height=31, pad_bgr=(50, 50, 200)):
    """
    Vertical white strip (BGR) with evenly spaced full-width pads.

    Pads are centered within the sampled part of the axis (8% inset at each end).
    """
    image = np.full((height, width, 3), 255, dtype=np.uint8)
    axis_start = height * 0.08
    pitch = height * 0.84 / pad_count
    for k in range(pad_count):
        center = axis_start + pitch * (k + 0.5)
        top = int(round(center - pad_height / 2))
        image[top:top + pad_height, :] = pad_bgr
    return image


@pytest.fixture
def make_sample_series():
    return build_sample_series


@pytest.fixture
def make_strip_image():
    return build_strip_image


@pytest.fixture
def six_pad_samples():
    """Six 8-sample pads, 16 samples apart."""
    return build_sample_series([(4 + 16 * k, 11 + 16 * k) for k in range(6)])


@pytest.fixture
def three_pad_samples():
    """Three 8-sample pads, 32 samples apart."""
    return build_sample_series([(10, 17), (42, 49), (74, 81)])


@pytest.fixture
def uniform_samples():
    return build_sample_series([])


@pytest.fixture
def six_pad_image():
    return build_strip_image(6)


@pytest.fixture
def uniform_image():
    return np.full((480, 60, 3), 128, dtype=np.uint8)


@pytest.fixture
def make_buffer():
    def _make_buffer(rgba):
        rgba = np.ascontiguousarray(rgba, dtype=np.uint8)
        return PixelBuffer(width=rgba.shape[1], height=rgba.shape[0], data=rgba)
    return _make_buffer
