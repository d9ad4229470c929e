"""
Visualization utilities for strip type detection.
"""

import cv2
import numpy as np
from typing import List, Optional, Sequence, Tuple

from config.strip_type_config import STRIP_TYPE_PADDING_RATIO

SEGMENT_COLORS = [(0, 255, 0), (255, 0, 0), (0, 0, 255), (255, 255, 0),
                  (255, 0, 255), (0, 255, 255)]


def axis_progress(index: float, sample_count: int, padding_ratio: float = STRIP_TYPE_PADDING_RATIO) -> float:
    """Fraction of the long axis at which sample `index` sits."""
    return padding_ratio + (index / sample_count) * (1 - padding_ratio * 2)


def segment_to_rect(
    start: int,
    end: int,
    sample_count: int,
    width: int,
    height: int,
    orientation: str,
    padding_ratio: float = STRIP_TYPE_PADDING_RATIO
) -> Tuple[int, int, int, int]:
    """
    Map a sample range onto the pixel rectangle it was sampled from.

    Returns:
        (x, y, w, h) in image coordinates
    """
    p0 = axis_progress(start, sample_count, padding_ratio)
    p1 = axis_progress(end + 1, sample_count, padding_ratio)

    if orientation == 'vertical':
        x, w = 0, max(1, int(width * 0.5))
        y = int(p0 * height)
        h = max(1, int((p1 - p0) * height))
    else:
        y, h = 0, max(1, int(height * 0.5))
        x = int(p0 * width)
        w = max(1, int((p1 - p0) * width))
    return x, y, w, h


def visualize_sample_points(
    image: np.ndarray,
    sample_count: int,
    orientation: str,
    padding_ratio: float = STRIP_TYPE_PADDING_RATIO,
    color: Tuple[int, int, int] = (200, 200, 200)
) -> np.ndarray:
    """Mark every sample center along the axis."""
    vis = image.copy()
    h_img, w_img = vis.shape[:2]

    for i in range(sample_count):
        progress = axis_progress(i, sample_count, padding_ratio)
        if orientation == 'vertical':
            center = (int(w_img * 0.25), int(progress * h_img))
        else:
            center = (int(progress * w_img), int(h_img * 0.25))
        cv2.circle(vis, center, 1, color, -1)

    return vis


def visualize_segments(
    image: np.ndarray,
    segments: Sequence,
    sample_count: int,
    orientation: str,
    padding_ratio: float = STRIP_TYPE_PADDING_RATIO,
    label_prefix: str = 'P'
) -> np.ndarray:
    """Draw one labeled rectangle per segment."""
    vis = image.copy()
    h_img, w_img = vis.shape[:2]

    for idx, segment in enumerate(segments):
        color = SEGMENT_COLORS[idx % len(SEGMENT_COLORS)]
        x, y, w, h = segment_to_rect(
            segment.start, segment.end, sample_count, w_img, h_img, orientation, padding_ratio
        )
        cv2.rectangle(vis, (x, y), (x + w, y + h), color, 2)
        cv2.putText(vis, f'{label_prefix}{idx + 1}', (x + 2, max(12, y + 12)),
                   cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1)

    return vis


def create_final_visualization(
    image: np.ndarray,
    segments: Sequence,
    sample_count: int,
    orientation: str,
    summary_lines: Optional[List[str]] = None,
    padding_ratio: float = STRIP_TYPE_PADDING_RATIO
) -> np.ndarray:
    """Create final visualization with segments and summary text."""
    vis = visualize_sample_points(image, sample_count, orientation, padding_ratio)
    vis = visualize_segments(vis, segments, sample_count, orientation, padding_ratio)

    y_offset = 20
    for line in summary_lines or []:
        cv2.putText(vis, line, (10, y_offset),
                   cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 3)
        cv2.putText(vis, line, (10, y_offset),
                   cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
        y_offset += 20

    return vis


def rgba_to_bgr(data: np.ndarray) -> np.ndarray:
    """Convert an RGBA pixel array to OpenCV's BGR order for drawing."""
    return cv2.cvtColor(np.ascontiguousarray(data), cv2.COLOR_RGBA2BGR)
