"""
Unit Tests for image resource decoding.
"""

import base64

import pytest
import requests

from conftest import png_bytes, png_data_uri
from marksheet_toolkit.builder.rendering import RenderError, ResourceLoadError, decode_image_source
from marksheet_toolkit.builder.rendering import resources
from marksheet_toolkit.builder.rendering.resources import REMOTE_TIMEOUT_S


class FakeHttp:
    """Stands in for requests.get; records (url, timeout) per call."""

    def __init__(self):
        self.calls = []
        self.content = b""
        self.status_code = 200
        self.error = None

    def __call__(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        response = requests.Response()
        response.status_code = self.status_code
        response._content = self.content
        response.url = url
        return response


@pytest.fixture
def http_get(monkeypatch):
    fake = FakeHttp()
    monkeypatch.setattr(resources.requests, "get", fake)
    return fake


class TestDecodeImageSource:
    def test_when_data_uri_then_rgba_image(self):
        img = decode_image_source(png_data_uri("red", (8, 4)))

        assert img.mode == "RGBA"
        assert img.size == (8, 4)

    def test_when_bare_base64_then_decoded(self):
        payload = base64.b64encode(png_bytes("blue")).decode("ascii")
        assert decode_image_source(payload).size == (8, 8)

    def test_when_relative_path_then_resolved_against_base_dir(self, sample_image):
        img = decode_image_source(sample_image.name, base_dir=sample_image.parent)
        assert img.size == (200, 100)

    def test_when_absolute_path_then_loaded(self, sample_image):
        assert decode_image_source(str(sample_image)).size == (200, 100)

    @pytest.mark.parametrize(
        "source, fetched",
        [
            ("http://example.com/logo.png", "http://example.com/logo.png"),
            ("https://example.com/a.png", "https://example.com/a.png"),
            ("//cdn.example.com/a.png", "https://cdn.example.com/a.png"),
        ],
    )
    def test_when_remote_url_then_fetched(self, http_get, source, fetched):
        http_get.content = png_bytes("green", (6, 3))

        img = decode_image_source(source)

        assert img.size == (6, 3)
        assert http_get.calls == [(fetched, REMOTE_TIMEOUT_S)]

    def test_when_remote_fetch_fails_then_rejected(self, http_get):
        http_get.error = requests.ConnectionError("no route to host")

        with pytest.raises(ResourceLoadError, match="Cannot fetch") as exc:
            decode_image_source("https://example.com/logo.png")
        assert exc.value.source == "https://example.com/logo.png"

    def test_when_remote_status_is_error_then_rejected(self, http_get):
        http_get.status_code = 404

        with pytest.raises(ResourceLoadError, match="404"):
            decode_image_source("https://example.com/gone.png")

    @pytest.mark.parametrize("source", ["", "   "])
    def test_when_empty_then_rejected(self, source):
        with pytest.raises(ResourceLoadError, match="Empty"):
            decode_image_source(source)

    def test_when_missing_file_then_rejected(self, tmp_path):
        with pytest.raises(ResourceLoadError):
            decode_image_source("logo.png", base_dir=tmp_path)

    def test_when_payload_not_an_image_then_rejected(self):
        payload = base64.b64encode(b"definitely not a png").decode("ascii")
        with pytest.raises(ResourceLoadError, match="Cannot decode") as exc:
            decode_image_source(f"data:image/png;base64,{payload}")
        assert exc.value.source.startswith("data:image/png")

    def test_when_data_uri_has_no_payload_separator_then_rejected(self):
        with pytest.raises(ResourceLoadError, match="Malformed"):
            decode_image_source("data:image/png;base64")

    def test_resource_errors_are_render_errors(self):
        assert issubclass(ResourceLoadError, RenderError)
