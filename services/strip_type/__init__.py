"""
Strip type detection for PoolGuy CV Service.

Classifies a test strip photo as a three-pad or six-pad product by:
- Sampling colors along the strip's long axis
- Conditioning the saturation signal into a prominence series
- Competing three segmentation strategies (cluster, score, peak)
- Scoring the candidates and classifying the winner's pad count
"""

from services.strip_type.detector import StripTypeDetectionService, detect_strip_type
from services.strip_type.errors import (
    DegenerateSignal,
    ImageDecodeFailure,
    RenderContextFailure,
    StripTypeDetectionError
)
from services.strip_type.models import PixelBuffer, SegmentSource, StripType, StripTypeDetection

__all__ = [
    'StripTypeDetectionService',
    'detect_strip_type',
    'StripTypeDetection',
    'StripType',
    'SegmentSource',
    'PixelBuffer',
    'StripTypeDetectionError',
    'ImageDecodeFailure',
    'RenderContextFailure',
    'DegenerateSignal'
]
