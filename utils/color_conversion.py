"""
Color conversion utilities for PoolGuy CV Service.
Handles channel-order conversion to RGBA and the HSL-style lightness/saturation
measures used by strip type detection.
"""

import math
import cv2
import numpy as np
from typing import Tuple
import logging

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves going up.

    Python's round() uses banker's rounding (round(2.5) == 2); pad geometry
    and mean colors expect 2.5 -> 3.

    Args:
        value: Value to round

    Returns:
        Rounded integer
    """
    return int(math.floor(value + 0.5))


def to_rgba(image: np.ndarray) -> np.ndarray:
    """
    Convert an OpenCV image (gray, BGR or BGRA) to RGBA.

    Args:
        image: OpenCV image array as returned by cv2.imread/imdecode

    Returns:
        Image array in RGBA format (H, W, 4), uint8

    Raises:
        ValueError: If the channel layout is not supported
    """
    if image.dtype != np.uint8:
        # 16-bit PNGs and float images are brought to 8 bits first
        image = cv2.convertScaleAbs(image, alpha=255.0 / max(1.0, float(image.max())))

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)

    channels = image.shape[2] if image.ndim == 3 else 0
    if channels == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)

    raise ValueError(f'Unsupported image layout: shape={image.shape}')


def get_lightness_and_saturation(r: float, g: float, b: float) -> Tuple[float, float]:
    """
    Compute lightness and saturation of an RGB color.

    Lightness is the HSL midpoint (max+min)/2; saturation is the HSV-style
    chroma ratio (max-min)/max. Both are scaled to 0-100.

    Args:
        r, g, b: Channel values (0-255)

    Returns:
        Tuple of (lightness, saturation)
    """
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    lightness = ((max_c + min_c) / 2 / 255) * 100
    saturation = 0.0 if max_c == 0 else ((max_c - min_c) / max_c) * 100
    return float(lightness), float(saturation)


def color_distance(a: Tuple[float, float, float], b: Tuple[float, float, float]) -> float:
    """Euclidean distance between two RGB colors."""
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)
