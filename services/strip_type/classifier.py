"""
Strip family inference and confidence scoring.
"""

from typing import Optional

from services.strip_type.models import SegmentSource, SegmentStats, StripType

BASE_CONFIDENCE = 0.28
COUNT_WEIGHT = 0.35
STABILITY_WEIGHT = 0.25
CONSISTENCY_WEIGHT = 0.15
GAP_WEIGHT = 0.15
PEAK_BONUS = 0.07
MAX_COVERAGE_BONUS = 0.05
COVERAGE_BONUS_PER_PAD = 0.01
FALLBACK_PENALTY = 0.12
STRENGTH_REFERENCE = 12.0

EXPECTED_PAD_COUNT = {
    StripType.THREE_PAD: 3,
    StripType.SIX_PAD: 6,
}


def infer_strip_type(pad_count: int) -> StripType:
    """
    Map a pad count to a strip family.

    0 is unknown, 6 or more is six-pad, 2 or fewer is three-pad. In between
    the nearer of 3 and 6 wins; an exact tie goes to six-pad from 4 up.
    """
    if pad_count <= 0:
        return StripType.UNKNOWN
    if pad_count >= 6:
        return StripType.SIX_PAD
    if pad_count <= 2:
        return StripType.THREE_PAD

    distance_to_six = abs(pad_count - 6)
    distance_to_three = abs(pad_count - 3)
    if distance_to_six < distance_to_three:
        return StripType.SIX_PAD
    if distance_to_three < distance_to_six:
        return StripType.THREE_PAD
    return StripType.SIX_PAD if pad_count >= 4 else StripType.THREE_PAD


def calculate_confidence(
    pad_count: int,
    inferred_type: StripType,
    stats: Optional[SegmentStats],
    source: Optional[SegmentSource]
) -> float:
    """
    Confidence in [0, 1] for an inferred strip family.

    Args:
        pad_count: Segments in the winning candidate
        inferred_type: Result of infer_strip_type(pad_count)
        stats: Winning candidate's stats (None when it has no segments)
        source: Winning candidate's strategy; anything but cluster is a fallback

    Returns:
        Clamped weighted sum of count, stability, consistency and gap scores
    """
    if inferred_type == StripType.UNKNOWN or pad_count == 0:
        return 0.0

    expected = EXPECTED_PAD_COUNT[inferred_type]
    count_score = max(0.0, 1 - min(expected, abs(expected - pad_count)) / expected)

    if stats:
        strength_score = min(1.0, stats.average_strength / STRENGTH_REFERENCE)
        uniformity = (
            min(1.0, stats.min_strength / stats.average_strength)
            if stats.average_strength > 0
            else 0.3
        )
        consistency_score = max(0.0, 1 - min(1.0, stats.span_std_dev / max(1.0, stats.span_mean)))
        gap_score = max(0.0, 1 - min(0.9, stats.gap_ratio * 1.6))
    else:
        strength_score = 0.3
        uniformity = 0.3
        consistency_score = 0.4
        gap_score = 0.4
    stability_score = strength_score * 0.7 + uniformity * 0.3

    peak_bonus = PEAK_BONUS if source == SegmentSource.PEAK else 0.0
    fallback_penalty = FALLBACK_PENALTY if source != SegmentSource.CLUSTER else 0.0
    coverage_bonus = (
        min(MAX_COVERAGE_BONUS, (pad_count - 1) * COVERAGE_BONUS_PER_PAD)
        if pad_count > 1
        else 0.0
    )

    confidence = (
        BASE_CONFIDENCE
        + count_score * COUNT_WEIGHT
        + stability_score * STABILITY_WEIGHT
        + consistency_score * CONSISTENCY_WEIGHT
        + gap_score * GAP_WEIGHT
        + peak_bonus
        + coverage_bonus
        - fallback_penalty
    )
    return min(1.0, max(0.0, confidence))
