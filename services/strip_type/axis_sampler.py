"""
Axis sampling for strip type detection.

Reduces the 2-D pixel buffer to an ordered 1-D sequence of color samples
along the strip's long axis.
"""

import numpy as np
from typing import Literal, Tuple

from config.strip_type_config import (
    STRIP_TYPE_ALPHA_THRESHOLD,
    STRIP_TYPE_PADDING_RATIO,
    STRIP_TYPE_SAMPLE_COUNT
)
from services.strip_type.models import RGB, WHITE, AxisSample, PixelBuffer
from utils.color_conversion import get_lightness_and_saturation, round_half_up

Orientation = Literal['vertical', 'horizontal']

# Patch geometry as ratios of image size: the cross-axis patch is centered a
# quarter of the way in and spans half the strip; along the axis it is 6% long.
CROSS_AXIS_CENTER = 0.25
CROSS_AXIS_EXTENT = 0.5
ALONG_AXIS_EXTENT = 0.06


def detect_orientation(buffer: PixelBuffer) -> Orientation:
    """Strip axis runs along the longer image side; square images count as vertical."""
    return 'vertical' if buffer.height >= buffer.width else 'horizontal'


def average_color_region(
    buffer: PixelBuffer,
    center_x_ratio: float,
    center_y_ratio: float,
    width_ratio: float,
    height_ratio: float,
    alpha_threshold: int = STRIP_TYPE_ALPHA_THRESHOLD
) -> RGB:
    """
    Average the opaque pixels of a rectangular patch.

    The patch is walked with a stride of 1/6 of its shorter side to bound cost.

    Args:
        buffer: RGBA pixel buffer
        center_x_ratio, center_y_ratio: Patch center as fractions of width/height
        width_ratio, height_ratio: Patch size as fractions of width/height
        alpha_threshold: Minimum alpha for a pixel to count

    Returns:
        Mean color, or white if no pixel qualifies
    """
    width, height = buffer.width, buffer.height

    center_x = round_half_up(width * center_x_ratio)
    center_y = round_half_up(height * center_y_ratio)
    region_width = max(2, round_half_up(width * width_ratio))
    region_height = max(2, round_half_up(height * height_ratio))

    start_x = max(0, center_x - region_width // 2)
    start_y = max(0, center_y - region_height // 2)
    end_x = min(width, start_x + region_width)
    end_y = min(height, start_y + region_height)

    step = max(1, min(region_width, region_height) // 6)

    patch = buffer.data[start_y:end_y:step, start_x:end_x:step]
    opaque = patch[patch[..., 3] >= alpha_threshold]
    count = len(opaque)
    if count == 0:
        return WHITE

    totals = opaque[:, :3].astype(np.int64).sum(axis=0)
    return RGB(
        r=round_half_up(totals[0] / count),
        g=round_half_up(totals[1] / count),
        b=round_half_up(totals[2] / count)
    )


def sample_along_strip_axis(
    buffer: PixelBuffer,
    sample_count: int = STRIP_TYPE_SAMPLE_COUNT,
    padding_ratio: float = STRIP_TYPE_PADDING_RATIO,
    alpha_threshold: int = STRIP_TYPE_ALPHA_THRESHOLD
) -> Tuple[AxisSample, ...]:
    """
    Sample colors at evenly spaced positions along the strip axis.

    Positions are inset by padding_ratio at both ends.

    Args:
        buffer: RGBA pixel buffer
        sample_count: Number of samples
        padding_ratio: Fraction of the axis skipped at each end
        alpha_threshold: Minimum alpha for a pixel to count

    Returns:
        Tuple of AxisSample ordered by position along the axis
    """
    is_vertical = detect_orientation(buffer) == 'vertical'
    samples = []

    for i in range(sample_count):
        progress = padding_ratio + (i / sample_count) * (1 - padding_ratio * 2)
        if is_vertical:
            color = average_color_region(
                buffer, CROSS_AXIS_CENTER, progress, CROSS_AXIS_EXTENT, ALONG_AXIS_EXTENT, alpha_threshold
            )
        else:
            color = average_color_region(
                buffer, progress, CROSS_AXIS_CENTER, ALONG_AXIS_EXTENT, CROSS_AXIS_EXTENT, alpha_threshold
            )

        lightness, saturation = get_lightness_and_saturation(color.r, color.g, color.b)
        samples.append(AxisSample(index=i, color=color, lightness=lightness, saturation=saturation))

    return tuple(samples)
