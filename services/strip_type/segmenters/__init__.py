"""
Segmentation strategies.

Each strategy turns the axis samples and conditioned signal into one
SegmentCandidate. Builders share the signature
(samples, signal, debug=None) and are looked up by SegmentSource.
"""

from services.strip_type.models import SegmentSource
from .cluster import build_cluster_candidate
from .score import build_score_candidate
from .peak import build_peak_candidate

# Iteration order is the evaluation order; ties keep the earlier strategy
SEGMENTERS = {
    SegmentSource.CLUSTER: build_cluster_candidate,
    SegmentSource.SCORE: build_score_candidate,
    SegmentSource.PEAK: build_peak_candidate,
}

__all__ = [
    'SEGMENTERS',
    'build_cluster_candidate',
    'build_score_candidate',
    'build_peak_candidate'
]
