# pyright: reportUnknownMemberType=false
"""
Raster signature decoding.

Decodes a PNG or JPEG payload into deflate-compressed RGB samples plus an
optional alpha soft mask, ready for embedding as a PDF image XObject.

Decoding walks an explicit, ordered list of attempts: the declared
encoding first, then the other supported encoding once. Every attempt
produces a tagged :class:`DecodeAttempt`, so the fallback order is part of
the visible result rather than hidden in exception handling.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
import zlib
from dataclasses import dataclass
from typing import Literal, TypedDict

from ..constants import MAX_IMAGE_BYTES, MAX_IMAGE_PIXELS
from ..errors import UnsupportedImageFormat
from . import require_pil_image

__all__ = [
    "SUPPORTED_ENCODINGS",
    "DecodeAttempt",
    "ImageEncoding",
    "SignatureImageData",
    "decode_attempts",
    "decode_signature_image",
    "decoder_order",
    "normalize_encoding",
    "payload_to_bytes",
]

_logger = logging.getLogger(__name__)

ImageEncoding = Literal["png", "jpeg"]

# Fallback order is declared-first, then the remaining entries in this order.
SUPPORTED_ENCODINGS: tuple[ImageEncoding, ...] = ("png", "jpeg")

_ENCODING_ALIASES: dict[str, ImageEncoding] = {
    "png": "png",
    "image/png": "png",
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
}

# Pillow format names per encoding.
_PIL_FORMATS: dict[ImageEncoding, str] = {"png": "PNG", "jpeg": "JPEG"}

_DATA_URI = re.compile(rb"^data:image/(\w+);base64,(.*)$", re.DOTALL)


class SignatureImageData(TypedDict):
    """Decoded image ready for PDF embedding."""

    samples: bytes  # Deflate-compressed RGB pixel data
    smask: bytes | None  # Deflate-compressed alpha channel, or None if opaque
    width: int  # Pixel width
    height: int  # Pixel height
    bpc: int  # Bits per component (always 8)
    encoding: ImageEncoding  # Decoder that succeeded


@dataclass(frozen=True)
class DecodeAttempt:
    """Outcome of one decoder in the fallback chain."""

    encoding: ImageEncoding
    image: SignatureImageData | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None


def normalize_encoding(declared: str) -> ImageEncoding:
    """Resolve an encoding name or MIME type ("PNG", "image/jpeg", "jpg").

    Raises:
        UnsupportedImageFormat: For anything other than PNG or JPEG.
    """
    key = declared.strip().lower()
    encoding = _ENCODING_ALIASES.get(key)
    if encoding is None:
        raise UnsupportedImageFormat(
            f"Unsupported image encoding {declared!r}. Supported: {', '.join(SUPPORTED_ENCODINGS)}"
        )
    return encoding


def payload_to_bytes(payload: bytes | str) -> tuple[bytes, ImageEncoding | None]:
    """Unwrap a raster payload into raw image bytes.

    Accepts raw bytes, base64 text, or a ``data:image/<type>;base64,...``
    URI. Returns the raw bytes and the encoding hinted by a data URI, if any.

    Raises:
        UnsupportedImageFormat: If base64 text cannot be decoded.
    """
    raw = payload.encode("ascii", errors="replace") if isinstance(payload, str) else payload
    raw = raw.strip()

    hint: ImageEncoding | None = None
    m = _DATA_URI.match(raw)
    if m:
        hint = _ENCODING_ALIASES.get(m.group(1).decode("ascii").lower())
        return _b64decode(m.group(2)), hint

    if isinstance(payload, str):
        return _b64decode(raw), hint
    return raw, hint


def _b64decode(data: bytes) -> bytes:
    try:
        return base64.b64decode(data, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise UnsupportedImageFormat(f"Image payload is not valid base64: {exc}") from exc


def decoder_order(declared: ImageEncoding) -> list[ImageEncoding]:
    """Declared encoding first, then every other supported encoding once.

    >>> decoder_order("jpeg")
    ['jpeg', 'png']
    """
    return [declared] + [enc for enc in SUPPORTED_ENCODINGS if enc != declared]


def _decode_as(data: bytes, encoding: ImageEncoding) -> DecodeAttempt:
    """Run one decoder. Never raises for decode failures."""
    pil_image = require_pil_image()

    try:
        img = pil_image.open(io.BytesIO(data), formats=[_PIL_FORMATS[encoding]])
    except (OSError, ValueError, pil_image.DecompressionBombError) as exc:
        # UnidentifiedImageError is an OSError subclass.
        return DecodeAttempt(encoding, error=str(exc))

    try:
        # Image.open() is lazy: the header is read, pixel data is not.
        # Reject oversized images before decompressing anything.
        pixel_count = img.width * img.height
        if pixel_count > MAX_IMAGE_PIXELS:
            return DecodeAttempt(
                encoding,
                error=(
                    f"image too large: {img.width}x{img.height} ({pixel_count:,} pixels), "
                    f"maximum {MAX_IMAGE_PIXELS:,}"
                ),
            )
        if img.width == 0 or img.height == 0:
            return DecodeAttempt(encoding, error="image has zero width or height")

        if img.mode == "P" and "transparency" in img.info:
            img = img.convert("RGBA")

        smask_data = None
        if img.mode in ("RGBA", "LA", "PA"):
            alpha = img.split()[-1]
            smask_data = zlib.compress(alpha.tobytes())
            img = img.convert("RGB")
        elif img.mode != "RGB":
            img = img.convert("RGB")

        rgb_data = zlib.compress(img.tobytes())
        return DecodeAttempt(
            encoding,
            image={
                "samples": rgb_data,
                "smask": smask_data,
                "width": img.width,
                "height": img.height,
                "bpc": 8,
                "encoding": encoding,
            },
        )
    except (OSError, ValueError, SyntaxError) as exc:
        # Truncated or corrupt pixel data surfaces here, during tobytes().
        return DecodeAttempt(encoding, error=str(exc))
    finally:
        img.close()


def decode_attempts(data: bytes, declared: ImageEncoding) -> list[DecodeAttempt]:
    """Run decoders in fallback order, stopping at the first success.

    Returns:
        The attempts made, in order. The last one is the successful one,
        if any succeeded.
    """
    attempts: list[DecodeAttempt] = []
    for encoding in decoder_order(declared):
        attempt = _decode_as(data, encoding)
        attempts.append(attempt)
        if attempt.ok:
            break
    return attempts


def decode_signature_image(payload: bytes | str, declared: str | None = None) -> SignatureImageData:
    """Decode a signature image payload for PDF embedding.

    Args:
        payload: Raw image bytes, base64 text, or a data URI.
        declared: Declared encoding ("png", "jpeg", or a MIME type). When
            None, a data URI's type is used, else PNG.

    Returns:
        SignatureImageData from the first decoder that succeeded.

    Raises:
        UnsupportedImageFormat: If the payload is empty, too large, or no
            supported decoder could read it.
    """
    data, hint = payload_to_bytes(payload)
    if not data:
        raise UnsupportedImageFormat("Signature image payload is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise UnsupportedImageFormat(
            f"Signature image too large: {len(data) / 1024 / 1024:.1f} MB "
            f"(max {MAX_IMAGE_BYTES / 1024 / 1024:.0f} MB)"
        )

    if declared is not None:
        encoding = normalize_encoding(declared)
    else:
        encoding = hint or SUPPORTED_ENCODINGS[0]

    attempts = decode_attempts(data, encoding)
    final = attempts[-1]
    if final.image is not None:
        if final.encoding != encoding:
            _logger.warning(
                "Image declared as %s decoded as %s (declared decoder failed: %s)",
                encoding,
                final.encoding,
                attempts[0].error,
            )
        _logger.debug(
            "Decoded %s image %dx%d (alpha=%s)",
            final.encoding,
            final.image["width"],
            final.image["height"],
            final.image["smask"] is not None,
        )
        return final.image

    details = "; ".join(f"{a.encoding}: {a.error}" for a in attempts)
    raise UnsupportedImageFormat(f"Cannot decode signature image ({details})")
