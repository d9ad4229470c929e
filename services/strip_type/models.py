"""
Value objects for the strip type detection pipeline.

All structures are immutable and carry no back-references; each detection run
builds its own instances.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

import numpy as np


class SegmentSource(str, Enum):
    """Segmentation strategy that produced a candidate."""
    CLUSTER = 'cluster'
    SCORE = 'score'
    PEAK = 'peak'


class StripType(str, Enum):
    """Strip product family, keyed by expected pad count."""
    THREE_PAD = 'three-pad'
    SIX_PAD = 'six-pad'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class PixelBuffer:
    """
    Decoded image ready for sampling.

    data is an (height, width, 4) uint8 array in RGBA order.
    """
    width: int
    height: int
    data: np.ndarray

    @classmethod
    def from_flat(cls, width: int, height: int, flat: Sequence[int]) -> 'PixelBuffer':
        """Build a buffer from a flat RGBA byte sequence (row-major)."""
        data = np.asarray(flat, dtype=np.uint8)
        if data.size != width * height * 4:
            raise ValueError(
                f'Expected {width * height * 4} RGBA bytes for {width}x{height}, got {data.size}'
            )
        return cls(width=width, height=height, data=data.reshape(height, width, 4))


@dataclass(frozen=True)
class RGB:
    r: int
    g: int
    b: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


WHITE = RGB(255, 255, 255)


@dataclass(frozen=True)
class AxisSample:
    """One point along the strip axis."""
    index: int
    color: RGB
    lightness: float  # 0-100
    saturation: float  # 0-100


@dataclass(frozen=True)
class SampleSegment:
    """Contiguous sample range [start, end] hypothesized to be one pad."""
    start: int
    end: int
    mean_color: RGB
    lightness: float
    saturation: float
    peak_strength: Optional[float] = None

    @property
    def span(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class PeakRange:
    start: int
    end: int
    peak_index: int


@dataclass(frozen=True)
class SegmentStats:
    """Aggregate descriptors over one candidate's segments."""
    average_strength: float
    min_strength: float
    span_mean: float
    span_std_dev: float
    gap_ratio: float
    strengths: Tuple[float, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        return {
            'average_strength': self.average_strength,
            'min_strength': self.min_strength,
            'span_mean': self.span_mean,
            'span_std_dev': self.span_std_dev,
            'gap_ratio': self.gap_ratio,
            'strengths': list(self.strengths)
        }


@dataclass(frozen=True)
class SegmentCandidate:
    """One strategy's proposed pad layout."""
    source: SegmentSource
    segments: Tuple[SampleSegment, ...]
    stats: Optional[SegmentStats]

    @property
    def pad_count(self) -> int:
        return len(self.segments)

    def to_dict(self) -> Dict:
        return {
            'source': self.source.value,
            'pad_count': self.pad_count,
            'segments': [[s.start, s.end] for s in self.segments],
            'stats': self.stats.to_dict() if self.stats else None
        }


@dataclass(frozen=True)
class StripTypeDetection:
    """Final classification of a strip photo."""
    pad_count: int
    inferred_type: StripType
    confidence: float
    source: Optional[SegmentSource] = None

    @classmethod
    def degenerate(cls) -> 'StripTypeDetection':
        return cls(pad_count=0, inferred_type=StripType.UNKNOWN, confidence=0.0)

    def to_dict(self) -> Dict:
        """External contract: padCount, inferredType, confidence."""
        return {
            'padCount': self.pad_count,
            'inferredType': self.inferred_type.value,
            'confidence': self.confidence
        }
