"""
Score-thresholding segmentation strategy.

Each sample gets a pad-likelihood score (saturation, penalized when the
sample is near-white); runs above a dynamic threshold become segments.
"""

from typing import List, Optional, Sequence

from services.strip_type.models import AxisSample, SampleSegment, SegmentCandidate, SegmentSource
from services.strip_type.segmenters.common import average_samples, compute_segment_stats, filter_pad_segments
from services.strip_type.signal_conditioner import ConditionedSignal
from services.utils.debug import DebugContext, trace_step

BRIGHTNESS_LIMIT = 90
BRIGHTNESS_PENALTY = 1.5
THRESHOLD_RATIO = 0.35
MIN_SCORE_THRESHOLD = 6


def get_pad_score(sample: AxisSample) -> float:
    brightness_penalty = (
        (sample.lightness - BRIGHTNESS_LIMIT) * BRIGHTNESS_PENALTY
        if sample.lightness > BRIGHTNESS_LIMIT
        else 0.0
    )
    return max(0.0, sample.saturation - brightness_penalty)


def score_threshold(scores: Sequence[float]) -> float:
    """Dynamic in-pad threshold: 35% of the way from the lowest to the highest score, at least 6."""
    min_score, max_score = min(scores), max(scores)
    return max(MIN_SCORE_THRESHOLD, min_score + (max_score - min_score) * THRESHOLD_RATIO)


def build_segments_from_scores(samples: Sequence[AxisSample]) -> List[SampleSegment]:
    """Contiguous runs of samples scoring at or above the dynamic threshold."""
    if not samples:
        return []

    scores = [get_pad_score(sample) for sample in samples]
    max_score = max(scores)
    if max_score <= 0:
        return []

    threshold = score_threshold(scores)

    segments = []
    run_start = None
    for i, score in enumerate(scores):
        if score >= threshold:
            if run_start is None:
                run_start = i
        elif run_start is not None:
            segments.append(average_samples(samples, run_start, i - 1))
            run_start = None

    if run_start is not None:
        segments.append(average_samples(samples, run_start, len(samples) - 1))

    return segments


def build_score_candidate(
    samples: Sequence[AxisSample],
    signal: ConditionedSignal,
    debug: Optional[DebugContext] = None
) -> SegmentCandidate:
    segments = filter_pad_segments(build_segments_from_scores(samples))
    if debug and samples:
        scores = [get_pad_score(sample) for sample in samples]
        trace_step(debug, '02_score_threshold', 'Score Threshold', data={
            'max_score': max(scores),
            'threshold': score_threshold(scores),
            'segment_count': len(segments)
        })
    return SegmentCandidate(
        source=SegmentSource.SCORE,
        segments=tuple(segments),
        stats=compute_segment_stats(segments, signal.prominence)
    )
