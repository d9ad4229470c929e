"""
Color-clustering segmentation strategy.

Grows runs of similar color along the axis, splits runs that fused two pads
at a prominence valley, then merges runs until at most six remain.
"""

from typing import List, Optional, Sequence

import numpy as np

from services.strip_type.models import (
    AxisSample,
    PeakRange,
    SampleSegment,
    SegmentCandidate,
    SegmentSource
)
from services.strip_type.segmenters.common import (
    MIN_PAD_SPAN,
    average_samples,
    compute_segment_stats,
    create_segment_from_range,
    filter_pad_segments,
    find_peak_index_in_range,
    get_max_in_range
)
from services.strip_type.signal_conditioner import ConditionedSignal
from services.utils.debug import DebugContext, trace_step
from utils.color_conversion import color_distance, round_half_up

COLOR_THRESHOLD = 12
# A valley splits a run only if it is at most this fraction of the weaker side's peak
VALLEY_DEPTH_RATIO = 0.55
MIN_SEGMENT_COUNT = 2
MAX_SEGMENT_COUNT = 6


def cluster_samples(samples: Sequence[AxisSample]) -> List[SampleSegment]:
    """
    Split the samples into runs whose colors stay close to the run's mean.

    A sample farther than COLOR_THRESHOLD (Euclidean RGB) from the running mean
    of the current run starts a new run.
    """
    segments = []
    if not samples:
        return segments

    start = 0
    totals = list(samples[0].color.as_tuple())
    count = 1

    for i in range(1, len(samples)):
        sample = samples[i]
        mean_color = (totals[0] / count, totals[1] / count, totals[2] / count)

        if color_distance(mean_color, sample.color.as_tuple()) > COLOR_THRESHOLD:
            segments.append(average_samples(samples, start, i - 1))
            start = i
            totals = list(sample.color.as_tuple())
            count = 1
        else:
            totals[0] += sample.color.r
            totals[1] += sample.color.g
            totals[2] += sample.color.b
            count += 1

    segments.append(average_samples(samples, start, len(samples) - 1))
    return segments


def find_split_index_in_range(
    start: int,
    end: int,
    prominence: np.ndarray,
    min_span: int = MIN_PAD_SPAN
) -> int:
    """
    Find a prominence valley that separates two pads inside [start, end].

    The valley is the minimum over [start + min_span, end - min_span]. It
    qualifies when it is at most VALLEY_DEPTH_RATIO of the weaker of the peaks
    on its left and right.

    Returns:
        Index of the valley, or -1 if there is none
    """
    span = end - start + 1
    if span < min_span * 2 + 2:
        return -1

    lo, hi = start + min_span, end - min_span
    if hi < lo:
        return -1
    min_index = lo + int(np.argmin(prominence[lo:hi + 1]))
    min_value = float(prominence[min_index])

    left_max = get_max_in_range(prominence, start, min_index - 1)
    right_max = get_max_in_range(prominence, min_index + 1, end)
    peak_reference = min(left_max, right_max)

    if peak_reference <= 0:
        return -1
    if min_value > peak_reference * VALLEY_DEPTH_RATIO:
        return -1
    return min_index


def refine_segments_by_prominence(
    segments: Sequence[SampleSegment],
    prominence: np.ndarray,
    samples: Sequence[AxisSample]
) -> List[SampleSegment]:
    """
    Recursively split over-long segments at prominence valleys.

    Corrects under-segmentation where two neighboring pads were fused because
    their colors were similar. Every resulting segment carries the maximum
    prominence of its range as peak strength.
    """
    if not segments:
        return []

    n = len(prominence)
    target_span = max(MIN_PAD_SPAN + 1, round_half_up(n / 6))
    max_span = max(target_span + 4, MIN_PAD_SPAN + 2)

    def process_range(start: int, end: int) -> List[PeakRange]:
        start = max(0, min(start, n - 1))
        end = max(start, min(end, n - 1))
        span = end - start + 1

        if span > MIN_PAD_SPAN and span > max_span:
            split_index = find_split_index_in_range(start, end, prominence)
            if split_index >= 0:
                return process_range(start, split_index) + process_range(split_index + 1, end)

        return [PeakRange(start, end, find_peak_index_in_range(prominence, start, end))]

    ranges = []
    for segment in segments:
        ranges.extend(process_range(segment.start, segment.end))

    return [
        create_segment_from_range(samples, r.start, r.end, get_max_in_range(prominence, r.start, r.end))
        for r in ranges
        if r.start <= r.end
    ]


def normalize_segment_count(
    segments: Sequence[SampleSegment],
    samples: Sequence[AxisSample],
    prominence: np.ndarray,
    min_count: int = MIN_SEGMENT_COUNT,
    max_count: int = MAX_SEGMENT_COUNT
) -> List[SampleSegment]:
    """
    Merge adjacent segments until at most max_count remain.

    The adjacent pair with the smallest combined span is merged first. If the
    result would hold fewer than min_count segments the input is returned
    unchanged; segments are never discarded.
    """
    if not segments:
        return list(segments)

    normalized = sorted(segments, key=lambda s: s.start)

    while len(normalized) > max_count:
        merge_index = 0
        best_span = float('inf')
        for i in range(len(normalized) - 1):
            combined_span = normalized[i].span + normalized[i + 1].span
            if combined_span < best_span:
                best_span = combined_span
                merge_index = i

        merged_start = normalized[merge_index].start
        merged_end = normalized[merge_index + 1].end
        merged = create_segment_from_range(
            samples, merged_start, merged_end, get_max_in_range(prominence, merged_start, merged_end)
        )
        normalized[merge_index:merge_index + 2] = [merged]

    if len(normalized) < min_count:
        return list(segments)
    return normalized


def build_cluster_candidate(
    samples: Sequence[AxisSample],
    signal: ConditionedSignal,
    debug: Optional[DebugContext] = None
) -> SegmentCandidate:
    """Cluster by color, refine at prominence valleys and normalize to at most six pads."""
    prominence = signal.prominence

    raw_segments = cluster_samples(samples)
    refined_segments = refine_segments_by_prominence(raw_segments, prominence, samples)
    filtered_raw = filter_pad_segments(raw_segments)
    filtered_refined = filter_pad_segments(refined_segments)

    chosen = filtered_refined if len(filtered_refined) >= len(filtered_raw) else filtered_raw
    chosen = normalize_segment_count(chosen, samples, prominence)

    segments = filter_pad_segments(chosen)
    if not segments:
        segments = filtered_raw

    if debug:
        trace_step(debug, '02_cluster_refinement', 'Cluster Refinement', data={
            'raw_count': len(raw_segments),
            'refined_count': len(refined_segments),
            'filtered_raw_count': len(filtered_raw),
            'filtered_refined_count': len(filtered_refined),
            'normalized_count': len(segments)
        })

    return SegmentCandidate(
        source=SegmentSource.CLUSTER,
        segments=tuple(segments),
        stats=compute_segment_stats(segments, prominence)
    )
