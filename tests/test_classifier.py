"""
Unit tests for strip family inference and confidence.
"""

import pytest

from services.strip_type.classifier import calculate_confidence, infer_strip_type
from services.strip_type.models import SegmentSource, SegmentStats, StripType

PERFECT_STATS = SegmentStats(
    average_strength=24.0,
    min_strength=24.0,
    span_mean=8.0,
    span_std_dev=0.0,
    gap_ratio=0.0
)


class TestInferStripType:
    """Test cases for infer_strip_type."""

    @pytest.mark.parametrize('pad_count,expected', [
        (0, StripType.UNKNOWN),
        (-1, StripType.UNKNOWN),
        (1, StripType.THREE_PAD),
        (2, StripType.THREE_PAD),
        (3, StripType.THREE_PAD),
        (4, StripType.THREE_PAD),
        (5, StripType.SIX_PAD),
        (6, StripType.SIX_PAD),
        (7, StripType.SIX_PAD),
    ])
    def test_boundaries(self, pad_count, expected):
        assert infer_strip_type(pad_count) == expected


class TestCalculateConfidence:
    """Test cases for calculate_confidence."""

    def test_unknown_is_zero(self):
        assert calculate_confidence(0, StripType.UNKNOWN, None, None) == 0.0
        assert calculate_confidence(0, StripType.THREE_PAD, PERFECT_STATS, SegmentSource.CLUSTER) == 0.0

    def test_perfect_six_pad_clamps_to_one(self):
        confidence = calculate_confidence(6, StripType.SIX_PAD, PERFECT_STATS, SegmentSource.CLUSTER)
        assert confidence == 1.0

    def test_without_stats(self):
        confidence = calculate_confidence(6, StripType.SIX_PAD, None, SegmentSource.CLUSTER)
        # 0.28 base + 0.35 count + 0.25*0.3 stability + 0.15*0.4 + 0.15*0.4 + 0.05 coverage
        assert confidence == pytest.approx(0.875)

    def test_fallback_penalty(self):
        cluster = calculate_confidence(6, StripType.SIX_PAD, None, SegmentSource.CLUSTER)
        score = calculate_confidence(6, StripType.SIX_PAD, None, SegmentSource.SCORE)
        assert cluster - score == pytest.approx(0.12)

    def test_peak_bonus_offsets_fallback(self):
        confidence = calculate_confidence(6, StripType.SIX_PAD, None, SegmentSource.PEAK)
        assert confidence == pytest.approx(0.875 + 0.07 - 0.12)

    def test_single_pad_three_pad(self):
        confidence = calculate_confidence(1, StripType.THREE_PAD, None, SegmentSource.CLUSTER)
        assert confidence == pytest.approx(0.28 + 0.35 / 3 + 0.075 + 0.06 + 0.06)

    def test_weak_signal_scores_lower(self):
        weak = SegmentStats(
            average_strength=3.0,
            min_strength=0.5,
            span_mean=8.0,
            span_std_dev=6.0,
            gap_ratio=0.5
        )
        strong = calculate_confidence(6, StripType.SIX_PAD, PERFECT_STATS, SegmentSource.SCORE)
        assert calculate_confidence(6, StripType.SIX_PAD, weak, SegmentSource.SCORE) < strong

    @pytest.mark.parametrize('pad_count', range(0, 8))
    def test_always_within_unit_interval(self, pad_count):
        inferred = infer_strip_type(pad_count)
        for source in SegmentSource:
            for stats in (None, PERFECT_STATS):
                confidence = calculate_confidence(pad_count, inferred, stats, source)
                assert 0.0 <= confidence <= 1.0
