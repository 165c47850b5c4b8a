"""Tests for sigburn.core.image -- raster decoding with ordered fallback."""

from __future__ import annotations

import base64
import logging
import zlib

import pytest
from conftest import make_image

from sigburn.core.image import (
    decode_attempts,
    decode_signature_image,
    decoder_order,
    normalize_encoding,
    payload_to_bytes,
)
from sigburn.errors import UnsupportedImageFormat

# ── Encoding names ──────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("name", "expected"),
    [("png", "png"), ("PNG", "png"), ("image/png", "png"), ("jpg", "jpeg"), ("image/jpeg", "jpeg")],
)
def test_normalize_encoding(name, expected):
    assert normalize_encoding(name) == expected


def test_normalize_encoding_rejects_unknown():
    with pytest.raises(UnsupportedImageFormat, match="gif"):
        normalize_encoding("gif")


def test_decoder_order_declared_first():
    assert decoder_order("png") == ["png", "jpeg"]
    assert decoder_order("jpeg") == ["jpeg", "png"]


# ── Payload unwrapping ──────────────────────────────────────────────


def test_payload_raw_bytes_pass_through(png_bytes):
    assert payload_to_bytes(png_bytes) == (png_bytes, None)


def test_payload_base64_text(png_bytes):
    data, hint = payload_to_bytes(base64.b64encode(png_bytes).decode("ascii"))
    assert data == png_bytes
    assert hint is None


def test_payload_data_uri(jpeg_bytes):
    uri = "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")
    data, hint = payload_to_bytes(uri)
    assert data == jpeg_bytes
    assert hint == "jpeg"


# ── Decoding ────────────────────────────────────────────────────────


def test_decode_png(png_bytes):
    img = decode_signature_image(png_bytes, "png")
    assert (img["width"], img["height"]) == (200, 100)
    assert img["encoding"] == "png"
    assert img["bpc"] == 8
    assert img["smask"] is None
    assert len(zlib.decompress(img["samples"])) == 200 * 100 * 3


def test_decode_rgba_produces_soft_mask(rgba_png_bytes):
    img = decode_signature_image(rgba_png_bytes, "png")
    assert img["smask"] is not None
    alpha = zlib.decompress(img["smask"])
    assert len(alpha) == 200 * 100
    assert set(alpha) == {128}


def test_decode_jpeg(jpeg_bytes):
    img = decode_signature_image(jpeg_bytes, "jpeg")
    assert (img["width"], img["height"]) == (120, 60)
    assert img["encoding"] == "jpeg"


def test_declared_png_falls_back_to_jpeg(jpeg_bytes, caplog):
    with caplog.at_level(logging.WARNING, logger="sigburn.core.image"):
        img = decode_signature_image(jpeg_bytes, "png")
    assert img["encoding"] == "jpeg"
    assert "decoded as jpeg" in caplog.text


def test_declared_jpeg_falls_back_to_png(png_bytes):
    assert decode_signature_image(png_bytes, "jpeg")["encoding"] == "png"


def test_decode_attempts_are_recorded_in_order(jpeg_bytes):
    attempts = decode_attempts(jpeg_bytes, "png")
    assert [a.encoding for a in attempts] == ["png", "jpeg"]
    assert not attempts[0].ok
    assert attempts[0].error
    assert attempts[1].ok


def test_decode_attempts_stop_at_first_success(png_bytes):
    attempts = decode_attempts(png_bytes, "png")
    assert len(attempts) == 1
    assert attempts[0].ok


def test_no_declared_encoding_uses_data_uri_hint(jpeg_bytes):
    uri = "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("ascii")
    assert decode_signature_image(uri)["encoding"] == "jpeg"


def test_garbage_lists_every_attempt():
    with pytest.raises(UnsupportedImageFormat) as exc_info:
        decode_signature_image(b"definitely not an image", "png")
    message = str(exc_info.value)
    assert "png:" in message
    assert "jpeg:" in message


def test_empty_payload_rejected():
    with pytest.raises(UnsupportedImageFormat, match="empty"):
        decode_signature_image(b"", "png")


def test_oversized_pixel_count_rejected(monkeypatch):
    monkeypatch.setattr("sigburn.core.image.MAX_IMAGE_PIXELS", 100)
    with pytest.raises(UnsupportedImageFormat, match="too large"):
        decode_signature_image(make_image(20, 20), "png")


def test_oversized_payload_rejected(monkeypatch, png_bytes):
    monkeypatch.setattr("sigburn.core.image.MAX_IMAGE_BYTES", 10)
    with pytest.raises(UnsupportedImageFormat, match="too large"):
        decode_signature_image(png_bytes, "png")


def test_grayscale_image_converted_to_rgb():
    img = decode_signature_image(make_image(10, 4, "PNG", mode="L"), "png")
    assert len(zlib.decompress(img["samples"])) == 10 * 4 * 3
