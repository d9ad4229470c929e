"""
Error taxonomy for strip type detection.

Every error is handled inside StripTypeDetectionService and turned into the
degenerate result; callers never see these unless they drive the stages
directly.
"""


class StripTypeDetectionError(Exception):
    """Base class for strip type detection failures."""

    error_code = 'STRIP_TYPE_DETECTION_FAILED'

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ImageDecodeFailure(StripTypeDetectionError, ValueError):
    """Image resource could not be loaded or decoded."""

    error_code = 'IMAGE_DECODE_FAILED'


class RenderContextFailure(StripTypeDetectionError):
    """No drawable RGBA surface could be produced from the decoded image."""

    error_code = 'RENDER_CONTEXT_FAILED'


class DegenerateSignal(StripTypeDetectionError):
    """Sample series is empty or has no variance (e.g. a solid-color image)."""

    error_code = 'DEGENERATE_SIGNAL'
