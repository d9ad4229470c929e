"""
Service interfaces and type definitions for the strip type detection service.

This module defines the JSON shapes exchanged with callers, keeping the
external contract in one place.
"""

from typing import TypedDict, Optional, Literal, Dict, Any


class StripTypeResult(TypedDict):
    """
    External detection contract.

    padCount is 0 and inferredType "unknown" with confidence 0 whenever
    detection failed or found no pads.
    """
    padCount: int
    inferredType: Literal["three-pad", "six-pad", "unknown"]
    confidence: float  # 0.0 - 1.0


class DetectStripTypeData(StripTypeResult, total=False):
    """Response data of POST /detect-strip-type."""
    processing_time_ms: int
    source: Optional[Literal["cluster", "score", "peak"]]
    debug: Dict[str, Any]


class DetectStripTypeResponse(TypedDict):
    """Successful response of POST /detect-strip-type."""
    success: bool
    data: DetectStripTypeData


class ErrorResponse(TypedDict):
    """Error response shared by all endpoints."""
    success: bool
    error: str
    error_code: Literal["MISSING_PARAMETER", "INVALID_PARAMETER", "RATE_LIMITED", "INTERNAL_ERROR"]

