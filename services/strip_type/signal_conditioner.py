"""
Saturation signal conditioning for strip type detection.

Produces the smoothed saturation series, its wider local baseline, and the
prominence series that drives all peak logic.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from services.strip_type.models import AxisSample

SMOOTHING_WINDOW = 5
MIN_BASELINE_WINDOW = 9
# Fraction of the above-minimum saturation that counts as prominence on its own
NORMALIZED_PROMINENCE_WEIGHT = 0.6


@dataclass(frozen=True)
class ConditionedSignal:
    saturation: np.ndarray
    smoothed: np.ndarray
    baseline: np.ndarray
    prominence: np.ndarray

    def __len__(self) -> int:
        return int(self.prominence.size)


def to_odd(value: float) -> int:
    """Floor to an integer >= 1 and bump even values to the next odd one."""
    normalized = max(1, int(np.floor(value)))
    return normalized + 1 if normalized % 2 == 0 else normalized


def smooth_series(values: np.ndarray, window_size: int) -> np.ndarray:
    """
    Centered moving average, truncated at the edges.

    Near the ends only the indices that exist are averaged, so the series is
    not pulled toward zero the way a zero-padded convolution would be.
    """
    x = np.asarray(values, dtype=np.float64)
    n = x.size
    if n == 0:
        return x.copy()

    radius = max(1, int(window_size)) // 2
    prefix = np.concatenate(([0.0], np.cumsum(x)))
    idx = np.arange(n)
    lo = np.clip(idx - radius, 0, n)
    hi = np.clip(idx + radius + 1, 0, n)
    return (prefix[hi] - prefix[lo]) / (hi - lo)


def baseline_window(sample_count: int) -> int:
    return to_odd(max(MIN_BASELINE_WINDOW, sample_count // 6))


def condition_signal(samples: Sequence[AxisSample]) -> ConditionedSignal:
    """
    Build smoothed, baseline and prominence series from sample saturation.

    prominence = max(smoothed - baseline, 0.6 * (smoothed - min(smoothed))),
    floored at 0.

    Args:
        samples: Ordered axis samples

    Returns:
        ConditionedSignal (all arrays have len(samples) entries)
    """
    saturation = np.array([s.saturation for s in samples], dtype=np.float64)
    if saturation.size == 0:
        empty = np.zeros(0, dtype=np.float64)
        return ConditionedSignal(saturation=empty, smoothed=empty, baseline=empty, prominence=empty)

    smoothed = smooth_series(saturation, SMOOTHING_WINDOW)
    baseline = smooth_series(smoothed, baseline_window(saturation.size))

    normalized = smoothed - smoothed.min()
    blended = np.maximum(smoothed - baseline, normalized * NORMALIZED_PROMINENCE_WEIGHT)
    prominence = np.where(blended > 0, blended, 0.0)

    return ConditionedSignal(
        saturation=saturation,
        smoothed=smoothed,
        baseline=baseline,
        prominence=prominence
    )
