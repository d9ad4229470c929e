"""
Unit tests for candidate evaluation and selection.
"""

import pytest

from services.strip_type.evaluator import evaluate_segment_candidate, pad_preference, select_best_candidate
from services.strip_type.models import RGB, SampleSegment, SegmentCandidate, SegmentSource, SegmentStats

STRONG_STATS = SegmentStats(
    average_strength=12.0,
    min_strength=12.0,
    span_mean=5.0,
    span_std_dev=0.0,
    gap_ratio=0.0
)


def make_candidate(source, pad_count, stats=STRONG_STATS):
    segments = tuple(
        SampleSegment(start=10 * k, end=10 * k + 4, mean_color=RGB(200, 50, 50), lightness=49.0, saturation=75.0)
        for k in range(pad_count)
    )
    return SegmentCandidate(source=source, segments=segments, stats=stats if pad_count else None)


class TestPadPreference:
    """Test cases for the six-pad leaning pad preference."""

    def test_six_pads(self):
        assert pad_preference(6) == pytest.approx(1.2)

    def test_three_pads(self):
        assert pad_preference(3) == pytest.approx(1.0)

    def test_four_pads_lean_three(self):
        assert pad_preference(4) == pytest.approx(0.5)

    def test_five_pads_lean_six(self):
        # closeness to six 2/3 beats closeness to three 0 by more than the margin
        assert pad_preference(5) == pytest.approx(0.8)


class TestEvaluateCandidate:
    """Test cases for evaluate_segment_candidate."""

    def test_empty_candidate_never_wins(self):
        assert evaluate_segment_candidate(make_candidate(SegmentSource.CLUSTER, 0)) == float('-inf')

    def test_strong_six_pad_cluster(self):
        score = evaluate_segment_candidate(make_candidate(SegmentSource.CLUSTER, 6))
        assert score == pytest.approx(0.72 + 0.25 + 0.10 + 0.05 + 0.12)

    def test_peak_source_boost(self):
        cluster = evaluate_segment_candidate(make_candidate(SegmentSource.CLUSTER, 6))
        peak = evaluate_segment_candidate(make_candidate(SegmentSource.PEAK, 6))
        assert peak - cluster == pytest.approx(0.05)

    def test_low_pad_penalty(self):
        score = evaluate_segment_candidate(make_candidate(SegmentSource.CLUSTER, 3))
        assert score == pytest.approx(0.6 + 0.25 + 0.10 + 0.05 - 0.08)

    def test_missing_stats_use_fallback_scores(self):
        score = evaluate_segment_candidate(make_candidate(SegmentSource.SCORE, 6, stats=None))
        assert score == pytest.approx(0.72 + 0.25 * (0.25 + 0.10 + 0.05) + 0.12)


class TestSelectBestCandidate:
    """Test cases for select_best_candidate."""

    def test_six_pads_beat_three(self):
        three = make_candidate(SegmentSource.CLUSTER, 3)
        six = make_candidate(SegmentSource.SCORE, 6)
        assert select_best_candidate([three, six]) is six

    def test_tie_keeps_earlier_candidate(self):
        cluster = make_candidate(SegmentSource.CLUSTER, 6)
        score = make_candidate(SegmentSource.SCORE, 6)
        assert select_best_candidate([cluster, score]) is cluster

    def test_empty_candidates_are_ineligible(self):
        empty = make_candidate(SegmentSource.CLUSTER, 0)
        three = make_candidate(SegmentSource.SCORE, 3)
        assert select_best_candidate([empty, three]) is three

    def test_more_than_six_pads_is_ineligible(self):
        seven = make_candidate(SegmentSource.SCORE, 7)
        two = make_candidate(SegmentSource.PEAK, 2)
        assert select_best_candidate([seven, two]) is two

    def test_no_eligible_candidate(self):
        assert select_best_candidate([make_candidate(SegmentSource.CLUSTER, 0)]) is None
        assert select_best_candidate([]) is None
