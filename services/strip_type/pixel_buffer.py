"""
Drawing-surface preparation for strip type detection.

Turns a decoded OpenCV image into an RGBA PixelBuffer no larger than the
configured drawing surface.
"""

import cv2
import numpy as np
import logging

from config.strip_type_config import STRIP_TYPE_MAX_IMAGE_SIZE
from services.strip_type.errors import RenderContextFailure
from services.strip_type.models import PixelBuffer
from utils.color_conversion import round_half_up, to_rgba

logger = logging.getLogger(__name__)


def prepare_pixel_buffer(image: np.ndarray, max_size: int = STRIP_TYPE_MAX_IMAGE_SIZE) -> PixelBuffer:
    """
    Scale an image so its long edge is at most max_size and convert it to RGBA.

    Args:
        image: Decoded image (gray, BGR or BGRA)
        max_size: Long edge of the drawing surface in pixels

    Returns:
        PixelBuffer with RGBA data

    Raises:
        RenderContextFailure: If no RGBA surface can be produced
    """
    if image is None or not isinstance(image, np.ndarray) or image.size == 0 or image.ndim < 2:
        raise RenderContextFailure('Unable to create drawing surface: image is empty')

    height, width = image.shape[:2]
    scale = min(1.0, max_size / float(max(width, height)))
    target_w = max(1, round_half_up(width * scale))
    target_h = max(1, round_half_up(height * scale))

    try:
        rgba = to_rgba(image)
        if (target_w, target_h) != (width, height):
            rgba = cv2.resize(rgba, (target_w, target_h), interpolation=cv2.INTER_AREA)
    except (cv2.error, ValueError) as e:
        raise RenderContextFailure(f'Unable to create drawing surface: {e}')

    logger.debug(f'Prepared drawing surface {target_w}x{target_h} from {width}x{height}')
    return PixelBuffer(width=target_w, height=target_h, data=np.ascontiguousarray(rgba))
