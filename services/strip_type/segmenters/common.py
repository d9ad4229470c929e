"""
Helpers shared by the segmentation strategies.
"""

from typing import List, Optional, Sequence

import numpy as np

from services.strip_type.models import (
    WHITE,
    RGB,
    AxisSample,
    SampleSegment,
    SegmentStats
)
from utils.color_conversion import round_half_up

MIN_PAD_SPAN = 3
# Segments brighter than this and less saturated than that are bare strip/background
BACKGROUND_LIGHTNESS = 92
BACKGROUND_SATURATION = 6


def filter_pad_segments(segments: Sequence[SampleSegment]) -> List[SampleSegment]:
    """Drop segments too short to be a pad and bright, unsaturated background runs."""
    filtered = []
    for segment in segments:
        if segment.span < MIN_PAD_SPAN:
            continue
        if segment.lightness > BACKGROUND_LIGHTNESS and segment.saturation < BACKGROUND_SATURATION:
            continue
        filtered.append(segment)
    return filtered


def average_samples(
    samples: Sequence[AxisSample],
    start: int,
    end: int,
    peak_strength: Optional[float] = None
) -> SampleSegment:
    """Build a segment whose color/lightness/saturation average samples[start..end]."""
    window = samples[start:end + 1]
    count = len(window)
    return SampleSegment(
        start=start,
        end=end,
        mean_color=RGB(
            r=round_half_up(sum(s.color.r for s in window) / count),
            g=round_half_up(sum(s.color.g for s in window) / count),
            b=round_half_up(sum(s.color.b for s in window) / count)
        ),
        lightness=sum(s.lightness for s in window) / count,
        saturation=sum(s.saturation for s in window) / count,
        peak_strength=peak_strength
    )


def create_segment_from_range(
    samples: Sequence[AxisSample],
    start: int,
    end: int,
    peak_strength: float
) -> SampleSegment:
    """Clamp [start, end] to the sample sequence and average it into a segment."""
    if not samples:
        return SampleSegment(
            start=start,
            end=end,
            mean_color=WHITE,
            lightness=100.0,
            saturation=0.0,
            peak_strength=0.0
        )

    last = len(samples) - 1
    clamped_start = max(0, min(start, last))
    clamped_end = max(clamped_start, min(end, last))
    return average_samples(samples, clamped_start, clamped_end, peak_strength)


def get_max_in_range(prominence: np.ndarray, start: int, end: int) -> float:
    """Maximum prominence over [start, end], never below 0."""
    lo = max(0, start)
    hi = min(len(prominence) - 1, end)
    if hi < lo:
        return 0.0
    return max(0.0, float(np.max(prominence[lo:hi + 1])))


def find_peak_index_in_range(prominence: np.ndarray, start: int, end: int) -> int:
    """Index of the first maximum of prominence over [start, end]."""
    return start + int(np.argmax(prominence[start:end + 1]))


def compute_segment_stats(
    segments: Sequence[SampleSegment],
    prominence: np.ndarray
) -> Optional[SegmentStats]:
    """
    Aggregate strength, span and gap descriptors for a candidate.

    A segment's strength is its recorded peak strength when positive, else the
    maximum prominence inside it. The gap ratio is the uncovered fraction of
    the range from the first segment's start to the last segment's end.

    Args:
        segments: Segments ordered by start
        prominence: Prominence series

    Returns:
        SegmentStats, or None when there are no segments
    """
    if not segments:
        return None

    spans = [max(1, s.span) for s in segments]
    coverage = sum(spans)
    total_range = max(1, segments[-1].end - segments[0].start + 1)
    gap_ratio = min(1.0, max(0.0, (total_range - coverage) / total_range))

    strengths = []
    for segment in segments:
        if segment.peak_strength and segment.peak_strength > 0:
            strengths.append(float(segment.peak_strength))
        else:
            strengths.append(get_max_in_range(prominence, segment.start, segment.end))

    span_mean = sum(spans) / len(spans)
    span_variance = sum((span - span_mean) ** 2 for span in spans) / len(spans)

    return SegmentStats(
        average_strength=sum(strengths) / len(strengths),
        min_strength=min(strengths),
        span_mean=span_mean,
        span_std_dev=float(np.sqrt(span_variance)),
        gap_ratio=gap_ratio,
        strengths=tuple(strengths)
    )
