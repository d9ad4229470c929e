"""
Strip type detection configuration.
"""

import os
from typing import Dict

# Number of samples taken along the strip axis
STRIP_TYPE_SAMPLE_COUNT: int = int(os.getenv('STRIP_TYPE_SAMPLE_COUNT', '96'))

# Fraction of the axis skipped at each end (strip-edge artifacts)
STRIP_TYPE_PADDING_RATIO: float = float(os.getenv('STRIP_TYPE_PADDING_RATIO', '0.08'))

# Pixels below this alpha are ignored when averaging a patch
STRIP_TYPE_ALPHA_THRESHOLD: int = int(os.getenv('STRIP_TYPE_ALPHA_THRESHOLD', '220'))

# Long edge of the drawing surface the image is scaled down to (pixels)
STRIP_TYPE_MAX_IMAGE_SIZE: int = int(os.getenv('STRIP_TYPE_MAX_IMAGE_SIZE', '480'))

# Timeout for downloading remote images (seconds)
STRIP_TYPE_DOWNLOAD_TIMEOUT: int = int(os.getenv('STRIP_TYPE_DOWNLOAD_TIMEOUT', '30'))

# Debug trace (candidate stats, peak thresholds)
STRIP_TYPE_DEBUG_TRACE: bool = os.getenv('STRIP_TYPE_DEBUG_TRACE', 'false').lower() == 'true'
STRIP_TYPE_DEBUG_OUTPUT_DIR: str = os.getenv('STRIP_TYPE_DEBUG_OUTPUT_DIR', 'experiments/strip_type')


def get_strip_type_config() -> Dict:
    """
    Get strip type detection configuration dictionary.

    Returns:
        Dictionary with strip type detection parameters
    """
    return {
        'sample_count': STRIP_TYPE_SAMPLE_COUNT,
        'padding_ratio': STRIP_TYPE_PADDING_RATIO,
        'alpha_threshold': STRIP_TYPE_ALPHA_THRESHOLD,
        'max_image_size': STRIP_TYPE_MAX_IMAGE_SIZE,
        'download_timeout': STRIP_TYPE_DOWNLOAD_TIMEOUT,
        'debug_trace': STRIP_TYPE_DEBUG_TRACE,
        'debug_output_dir': STRIP_TYPE_DEBUG_OUTPUT_DIR
    }
