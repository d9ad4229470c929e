"""
Unit tests for image loading and image naming.
"""

import cv2
import numpy as np
import pytest
import requests

from utils import image_loader
from utils.image_loader import image_name_from_path, is_remote_path, load_image

SIGNED_URL = (
    'https://poolguy-uploads.s3.amazonaws.com/strips/user-7/strip.png'
    '?X-Amz-Credential=AKIA%2F20260101%2Fus-east-1&X-Amz-Signature=abc/def#frag'
)


class FakeResponse:
    def __init__(self, content=b'', status_error=None):
        self.content = content
        self.status_error = status_error

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error


class TestImageName:
    """Test cases for image_name_from_path."""

    def test_signed_url_drops_query(self):
        assert image_name_from_path(SIGNED_URL) == 'strip.png'

    def test_local_path(self):
        assert image_name_from_path('/data/strips/six_pad.jpg') == 'six_pad.jpg'

    def test_empty_path(self):
        assert image_name_from_path('') == 'unknown'

    def test_url_without_file_name(self):
        assert image_name_from_path('https://example.com/') == 'unknown'

    def test_remote_detection(self):
        assert is_remote_path(SIGNED_URL)
        assert not is_remote_path('/data/strips/six_pad.jpg')


class TestLoadImage:
    """Test cases for load_image."""

    def setup_method(self):
        """Set up test fixtures."""
        self.rgba = np.zeros((8, 4, 4), dtype=np.uint8)
        self.rgba[..., 2] = 200
        self.rgba[:4, :, 3] = 255

    def test_alpha_channel_survives(self, tmp_path):
        image_path = tmp_path / 'cutout.png'
        cv2.imwrite(str(image_path), self.rgba)
        image = load_image(str(image_path))
        assert image.shape == (8, 4, 4)
        assert np.array_equal(image[..., 3], self.rgba[..., 3])

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match='not found'):
            load_image(str(tmp_path / 'missing.png'))

    def test_empty_path(self):
        with pytest.raises(ValueError):
            load_image('')

    def test_url_download(self, monkeypatch):
        encoded = cv2.imencode('.png', self.rgba)[1].tobytes()
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(encoded)

        monkeypatch.setattr(image_loader.requests, 'get', fake_get)
        image = load_image(SIGNED_URL, timeout=7)

        assert calls == [(SIGNED_URL, 7)]
        assert image.shape == (8, 4, 4)

    def test_url_http_error(self, monkeypatch):
        monkeypatch.setattr(
            image_loader.requests, 'get',
            lambda url, timeout: FakeResponse(status_error=requests.HTTPError('403 Forbidden'))
        )
        with pytest.raises(ValueError, match='403'):
            load_image(SIGNED_URL)

    def test_url_connection_error(self, monkeypatch):
        def fake_get(url, timeout):
            raise requests.ConnectionError('connection refused')

        monkeypatch.setattr(image_loader.requests, 'get', fake_get)
        with pytest.raises(ValueError, match='connection refused'):
            load_image(SIGNED_URL)

    @pytest.mark.parametrize('content', [b'', b'not an image'])
    def test_url_undecodable_body(self, monkeypatch, content):
        monkeypatch.setattr(image_loader.requests, 'get', lambda url, timeout: FakeResponse(content))
        with pytest.raises(ValueError, match='strip.png'):
            load_image(SIGNED_URL)
