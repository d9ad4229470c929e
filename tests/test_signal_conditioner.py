"""
Unit tests for saturation signal conditioning.
"""

import numpy as np
import pytest

from services.strip_type.signal_conditioner import baseline_window, condition_signal, smooth_series, to_odd


class TestSmoothing:
    """Test cases for window helpers and the moving average."""

    def test_to_odd(self):
        assert to_odd(4) == 5
        assert to_odd(5) == 5
        assert to_odd(0.5) == 1
        assert to_odd(16.9) == 17

    def test_baseline_window(self):
        assert baseline_window(96) == 17
        assert baseline_window(30) == 9

    def test_edges_are_truncated(self):
        smoothed = smooth_series(np.array([0, 0, 9, 0, 0], dtype=float), 3)
        assert smoothed.tolist() == pytest.approx([0, 3, 3, 3, 0])

    def test_constant_series_is_unchanged(self):
        smoothed = smooth_series(np.full(20, 7.0), 5)
        assert np.allclose(smoothed, 7.0)

    def test_empty_series(self):
        assert smooth_series(np.array([]), 5).size == 0


class TestConditionSignal:
    """Test cases for condition_signal."""

    def test_lengths_match_samples(self, six_pad_samples):
        signal = condition_signal(six_pad_samples)
        assert len(signal) == 96
        for series in (signal.saturation, signal.smoothed, signal.baseline, signal.prominence):
            assert series.shape == (96,)

    def test_prominence_is_non_negative(self, three_pad_samples):
        signal = condition_signal(three_pad_samples)
        assert np.all(signal.prominence >= 0)

    def test_prominence_peaks_inside_pads(self, three_pad_samples):
        prominence = condition_signal(three_pad_samples).prominence
        # Pad centers stand well above the white gaps between them
        assert prominence[13] > prominence[30] + 10
        assert prominence[45] > prominence[62] + 10

    def test_flat_signal_has_no_prominence(self, uniform_samples):
        signal = condition_signal(uniform_samples)
        assert np.allclose(signal.prominence, 0.0)

    def test_empty_samples(self):
        signal = condition_signal(())
        assert len(signal) == 0
