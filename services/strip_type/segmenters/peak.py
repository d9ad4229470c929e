"""
Peak-detection segmentation strategy.

Finds pad centers as local maxima of the prominence series and grows a
contiguous, non-overlapping range around each one.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from services.strip_type.models import AxisSample, PeakRange, SegmentCandidate, SegmentSource
from services.strip_type.segmenters.common import (
    MIN_PAD_SPAN,
    compute_segment_stats,
    create_segment_from_range,
    filter_pad_segments
)
from services.strip_type.signal_conditioner import ConditionedSignal
from services.utils.debug import DebugContext, trace_step
from utils.color_conversion import round_half_up

logger = logging.getLogger(__name__)

PEAK_PROMINENCE_RATIO = 0.24
MIN_PEAK_PROMINENCE = 2.0
RELAXED_PROMINENCE_RATIO = 0.18
MIN_RELAXED_PROMINENCE = 1.4
RELAXED_DISTANCE_RATIO = 0.75
MIN_PEAKS_BEFORE_RELAXING = 4
MAX_PEAK_CANDIDATES = 8
MAX_PEAKS = 6
SOFT_DROP_RATIO = 0.18
MIN_FILTERED_SURVIVAL = 0.6


@dataclass(frozen=True)
class PeakAnalysis:
    """Thresholds and peaks found on one prominence series."""
    max_prominence: float
    min_prominence: float
    min_distance: int
    peaks: Tuple[int, ...]

    def to_dict(self):
        return {
            'max_prominence': self.max_prominence,
            'min_prominence': self.min_prominence,
            'min_distance': self.min_distance,
            'peaks': list(self.peaks)
        }


def _accept_spaced(ordered: Sequence[int], min_distance: int, limit: int) -> List[int]:
    """Greedily keep indices at least min_distance from every kept index."""
    peaks = []
    for index in ordered:
        if any(abs(existing - index) < min_distance for existing in peaks):
            continue
        peaks.append(index)
        if len(peaks) >= limit:
            break
    return sorted(peaks)


def select_peak_indices(prominence: np.ndarray, min_prominence: float, min_distance: int) -> List[int]:
    """
    Local maxima of the prominence series, strongest first, spaced apart.

    Only interior indices qualify; plateaus count as maxima. At most
    MAX_PEAK_CANDIDATES are returned, in position order.
    """
    candidates = [
        i for i in range(1, len(prominence) - 1)
        if prominence[i] >= min_prominence
        and prominence[i] >= prominence[i - 1]
        and prominence[i] >= prominence[i + 1]
    ]
    candidates.sort(key=lambda i: -prominence[i])
    return _accept_spaced(candidates, min_distance, MAX_PEAK_CANDIDATES)


def select_top_prominence_indices(prominence: np.ndarray, target_count: int, min_distance: int) -> List[int]:
    """Highest positive prominence indices, spaced apart, in position order."""
    candidates = [i for i in range(len(prominence)) if np.isfinite(prominence[i]) and prominence[i] > 0]
    candidates.sort(key=lambda i: -prominence[i])
    return _accept_spaced(candidates, min_distance, target_count)


def analyze_peaks(prominence: np.ndarray) -> PeakAnalysis:
    """
    Pick peak indices with the strict pass, the relaxed retry and the top-K fallback.
    """
    sample_count = len(prominence)
    max_prominence = float(np.max(prominence)) if sample_count else 0.0
    min_distance = max(4, round_half_up(sample_count / 18))
    min_prominence = max(MIN_PEAK_PROMINENCE, max_prominence * PEAK_PROMINENCE_RATIO)

    if not np.isfinite(max_prominence) or max_prominence <= 0:
        return PeakAnalysis(max_prominence, min_prominence, min_distance, ())

    peaks = select_peak_indices(prominence, min_prominence, min_distance)

    if len(peaks) < MIN_PEAKS_BEFORE_RELAXING:
        relaxed_threshold = max(MIN_RELAXED_PROMINENCE, max_prominence * RELAXED_PROMINENCE_RATIO)
        relaxed_distance = max(3, round_half_up(min_distance * RELAXED_DISTANCE_RATIO))
        relaxed_peaks = select_peak_indices(prominence, relaxed_threshold, relaxed_distance)
        if len(relaxed_peaks) > len(peaks):
            peaks = relaxed_peaks

    if not peaks:
        target_count = min(MAX_PEAKS, max(3, round_half_up(sample_count / 24)))
        peaks = select_top_prominence_indices(prominence, target_count, min_distance)

    return PeakAnalysis(max_prominence, min_prominence, min_distance, tuple(peaks))


def build_ranges_from_peaks(
    peaks: Sequence[int],
    prominence: np.ndarray,
    sample_count: int,
    min_distance: int
) -> List[PeakRange]:
    """
    Derive one contiguous range per peak.

    Ranges start between midpoints of neighboring peaks (a fixed half-width at
    the ends), are grown outward while prominence stays above a soft drop
    without crossing a neighbor's midpoint, and are finally clamped so that
    ranges[i].end < ranges[i + 1].start.

    Args:
        peaks: Peak indices in ascending order
        prominence: Prominence series
        sample_count: Length of the sample sequence
        min_distance: Minimum peak distance used to pick the peaks

    Returns:
        Non-overlapping ranges ordered by position
    """
    last_index = sample_count - 1
    default_half_width = max(3, round_half_up(min_distance / 2) + 1)
    boundaries = [(peaks[i] + peaks[i + 1]) // 2 for i in range(len(peaks) - 1)]
    last_peak = len(peaks) - 1

    ranges = []
    for idx, peak_index in enumerate(peaks):
        start_boundary = max(0, peak_index - default_half_width) if idx == 0 else boundaries[idx - 1] + 1
        end_boundary = min(last_index, peak_index + default_half_width) if idx == last_peak else boundaries[idx]

        start = max(0, min(start_boundary, peak_index))
        end = min(last_index, max(end_boundary, peak_index))

        if end - start + 1 < MIN_PAD_SPAN:
            deficit = MIN_PAD_SPAN - (end - start + 1)
            extend_left = min(deficit, start)
            start -= extend_left
            end = min(last_index, end + (deficit - extend_left))

        soft_drop = max(1.0, float(prominence[peak_index]) * SOFT_DROP_RATIO)
        left_limit = 0 if idx == 0 else boundaries[idx - 1]
        right_limit = last_index if idx == last_peak else boundaries[idx]

        while start > 0 and prominence[start] > soft_drop and start > left_limit:
            start -= 1
        while end < last_index and prominence[end] > soft_drop and end < right_limit:
            end += 1

        ranges.append([max(0, start), min(last_index, end), peak_index])

    for i in range(1, len(ranges)):
        prev, current = ranges[i - 1], ranges[i]
        if current[0] <= prev[1]:
            current[0] = min(last_index, prev[1] + 1)
        if current[0] > current[1]:
            current[0] = max(prev[1] + 1, current[1] - (MIN_PAD_SPAN - 1))

    for i in range(len(ranges) - 2, -1, -1):
        current, following = ranges[i], ranges[i + 1]
        if current[1] >= following[0]:
            current[1] = max(current[0] + MIN_PAD_SPAN - 1, following[0] - 1)

    result = []
    for start, end, peak_index in ranges:
        end = min(end, last_index)
        if result:
            start = max(start, result[-1].end + 1)
        if start <= end:
            result.append(PeakRange(start=start, end=end, peak_index=peak_index))
    return result


def build_peak_candidate(
    samples: Sequence[AxisSample],
    signal: ConditionedSignal,
    debug: Optional[DebugContext] = None
) -> SegmentCandidate:
    """Segment the strip around the strongest prominence peaks (at most six)."""
    prominence = signal.prominence
    sample_count = len(samples)
    empty = SegmentCandidate(source=SegmentSource.PEAK, segments=(), stats=None)
    if sample_count == 0:
        return empty

    analysis = analyze_peaks(prominence)
    logger.debug(
        f'Peak analysis: max_prominence={analysis.max_prominence:.2f} '
        f'min_prominence={analysis.min_prominence:.2f} peaks_found={len(analysis.peaks)}'
    )
    trace_step(debug, '03_peak_analysis', 'Peak Analysis', data=analysis.to_dict())

    if not analysis.peaks:
        return empty

    prioritized = sorted(analysis.peaks, key=lambda i: -prominence[i])
    chosen_peaks = sorted(prioritized[:MAX_PEAKS])

    ranges = build_ranges_from_peaks(chosen_peaks, prominence, sample_count, analysis.min_distance)
    segments = [
        create_segment_from_range(samples, r.start, r.end, float(prominence[r.peak_index]))
        for r in ranges
    ]
    filtered = filter_pad_segments(segments)
    usable = filtered if len(filtered) >= max(2, int(len(segments) * MIN_FILTERED_SURVIVAL)) else segments

    return SegmentCandidate(
        source=SegmentSource.PEAK,
        segments=tuple(usable),
        stats=compute_segment_stats(usable, prominence)
    )
