"""Tests for extension to MIME type resolution and cache headers."""

import pytest

from storegate.lib.content_types import (
    OCTET_STREAM,
    cache_headers,
    resolve_content_type,
)

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class TestResolveContentType:
    @pytest.mark.parametrize(
        "filename, mime_type, is_image",
        [
            ("photo.png", "image/png", True),
            ("photo.jpg", "image/jpeg", True),
            ("photo.jpeg", "image/jpeg", True),
            ("photo.webp", "image/webp", True),
            ("anim.gif", "image/gif", True),
            ("memo.pdf", "application/pdf", False),
            ("roster.xlsx", XLSX, False),
            ("legacy.xls", "application/vnd.ms-excel", False),
        ],
    )
    def test_known_extensions(self, filename, mime_type, is_image):
        content_type = resolve_content_type(filename)
        assert content_type.mime_type == mime_type
        assert content_type.is_image is is_image

    def test_extension_is_case_insensitive(self):
        assert resolve_content_type("PHOTO.PNG").mime_type == "image/png"
        assert resolve_content_type("Memo.PdF").mime_type == "application/pdf"

    @pytest.mark.parametrize("filename", ["archive.zip", "noext", "trailing.", ".png", "script.js"])
    def test_unknown_extensions_are_octet_stream(self, filename):
        assert resolve_content_type(filename) == OCTET_STREAM
        assert OCTET_STREAM.mime_type == "application/octet-stream"
        assert OCTET_STREAM.is_image is False

    def test_only_last_suffix_counts(self):
        assert resolve_content_type("memo.pdf.png").mime_type == "image/png"


class TestCacheHeaders:
    def test_images_get_long_public_cache(self):
        headers = cache_headers(resolve_content_type("a.png"), image_max_age=86400)
        assert headers == {"Cache-Control": "public, max-age=86400"}

    def test_image_max_age_is_configurable(self):
        headers = cache_headers(resolve_content_type("a.gif"), image_max_age=60)
        assert headers["Cache-Control"] == "public, max-age=60"

    @pytest.mark.parametrize("filename", ["a.pdf", "a.xlsx", "a.bin"])
    def test_non_images_disable_caching(self, filename):
        headers = cache_headers(resolve_content_type(filename), image_max_age=86400)
        assert headers["Cache-Control"] == "no-cache, no-store, must-revalidate, max-age=0"
        assert headers["Pragma"] == "no-cache"
        assert headers["Expires"] == "0"

    def test_returned_headers_are_independent_copies(self):
        headers = cache_headers(resolve_content_type("a.pdf"), image_max_age=1)
        headers["Pragma"] = "changed"
        assert cache_headers(resolve_content_type("a.pdf"), image_max_age=1)["Pragma"] == "no-cache"
