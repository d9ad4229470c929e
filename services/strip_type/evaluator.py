"""
Candidate evaluation: score each segmentation candidate and pick the winner.

The weighting favors six-pad layouts (the more common product) while still
letting strong, well-separated three-pad evidence win.
"""

import logging
from typing import Optional, Sequence

from services.strip_type.models import SegmentCandidate, SegmentSource

logger = logging.getLogger(__name__)

MAX_ELIGIBLE_PADS = 6
# Substituted for strength, gap and span scores when a candidate has no stats
MISSING_STATS_SCORE = 0.25
STRENGTH_REFERENCE = 12.0
SIX_PAD_MARGIN = 0.15

PAD_PREFERENCE_WEIGHT = 0.6
STRENGTH_WEIGHT = 0.25
GAP_WEIGHT = 0.10
SPAN_WEIGHT = 0.05
PEAK_SOURCE_BOOST = 0.05
HIGH_PAD_BONUS = 0.12
LOW_PAD_PENALTY = 0.08


def pad_preference(pad_count: int) -> float:
    closeness_to_six = 1 - min(1.0, abs(pad_count - 6) / 3)
    closeness_to_three = 1 - min(1.0, abs(pad_count - 3) / 2)
    if closeness_to_six > closeness_to_three + SIX_PAD_MARGIN:
        return closeness_to_six * 1.2
    return max(closeness_to_six * 1.05, closeness_to_three)


def evaluate_segment_candidate(candidate: SegmentCandidate) -> float:
    """
    Weighted score of one candidate; higher is better.

    Candidates without segments score -inf so they can never win.
    """
    pad_count = candidate.pad_count
    if pad_count == 0:
        return float('-inf')

    stats = candidate.stats
    if stats:
        strength_score = min(1.0, stats.average_strength / STRENGTH_REFERENCE)
        gap_score = max(0.0, 1 - min(1.0, stats.gap_ratio * 2))
        span_score = max(0.0, 1 - min(1.0, stats.span_std_dev / max(1.0, stats.span_mean)))
    else:
        strength_score = gap_score = span_score = MISSING_STATS_SCORE

    source_boost = PEAK_SOURCE_BOOST if candidate.source == SegmentSource.PEAK else 0.0
    high_pad_bonus = HIGH_PAD_BONUS if pad_count >= 5 else 0.0
    low_pad_penalty = LOW_PAD_PENALTY if pad_count <= 3 else 0.0

    return (
        pad_preference(pad_count) * PAD_PREFERENCE_WEIGHT
        + strength_score * STRENGTH_WEIGHT
        + gap_score * GAP_WEIGHT
        + span_score * SPAN_WEIGHT
        + source_boost
        + high_pad_bonus
        - low_pad_penalty
    )


def is_eligible(candidate: SegmentCandidate) -> bool:
    return 1 <= candidate.pad_count <= MAX_ELIGIBLE_PADS


def select_best_candidate(candidates: Sequence[SegmentCandidate]) -> Optional[SegmentCandidate]:
    """
    Highest-scoring eligible candidate, or None when none is eligible.

    Candidates are compared in the given order and only a strictly higher
    score replaces the current best.
    """
    best_candidate = None
    best_score = float('-inf')

    for candidate in candidates:
        if not is_eligible(candidate):
            logger.debug(f'Skipping {candidate.source.value} candidate with {candidate.pad_count} segments')
            continue
        score = evaluate_segment_candidate(candidate)
        if score > best_score:
            best_score = score
            best_candidate = candidate

    return best_candidate
