"""
Image loading for the strip type service.

Strip photos arrive as local paths or S3 signed URLs. Both are decoded
unchanged so that transparent cut-outs keep their alpha channel.
"""

import logging
import os
from urllib.parse import urlparse

import cv2
import numpy as np
import requests

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ('http', 'https')


def is_remote_path(image_path: str) -> bool:
    return urlparse(image_path).scheme in REMOTE_SCHEMES


def image_name_from_path(image_path: str) -> str:
    """
    File name of a local path or URL.

    URL query strings and fragments are dropped, so the signature of a
    signed URL never ends up in log lines or trace directory names.
    """
    if not image_path:
        return 'unknown'
    path = urlparse(image_path).path if is_remote_path(image_path) else image_path
    return os.path.basename(path.rstrip('/')) or 'unknown'


def _download(url: str, timeout: int) -> bytes:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f'Failed to download {image_name_from_path(url)}: {e}')
        raise ValueError(f'Failed to load image from URL: {e}') from e
    return response.content


def load_image(image_path: str, timeout: int = 30) -> np.ndarray:
    """
    Load a strip image from a local path or an HTTP(S) URL.

    Args:
        image_path: Local file path or HTTP/HTTPS URL
        timeout: Request timeout in seconds for URL downloads

    Returns:
        OpenCV image array (gray, BGR or BGRA)

    Raises:
        ValueError: If the path is empty, the download fails or the bytes do not decode
    """
    if not image_path:
        raise ValueError('image_path cannot be empty')

    name = image_name_from_path(image_path)

    if is_remote_path(image_path):
        logger.info(f'Downloading strip image {name}')
        encoded = np.frombuffer(_download(image_path, timeout), dtype=np.uint8)
        image = cv2.imdecode(encoded, cv2.IMREAD_UNCHANGED) if encoded.size else None
    else:
        if not os.path.isfile(image_path):
            raise ValueError(f'Image file not found: {image_path}')
        logger.info(f'Reading strip image {image_path}')
        image = cv2.imread(image_path, cv2.IMREAD_UNCHANGED)

    if image is None or image.size == 0:
        raise ValueError(f'Failed to decode image: {name}')

    channels = 1 if image.ndim == 2 else image.shape[2]
    logger.debug(f'Loaded {name}: {image.shape[1]}x{image.shape[0]}, {channels} channel(s)')
    return image
