"""Shared test fixtures for the sigburn test suite."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest

# Content stream for test pages: a stroked line that leaves the graphics
# state modified (no q/Q), so wrapping can be checked.
PAGE_CONTENT = b"1 0 0 RG 2 w 10 10 m 100 100 l S\n"


def make_pdf(
    page_sizes: list[tuple[float, float]] | None = None,
    *,
    cropbox: list[float] | None = None,
    content: bytes = PAGE_CONTENT,
    object_streams: bool = False,
) -> bytes:
    """Build a PDF with one content stream per page using pikepdf.

    With *object_streams* the file uses an xref stream and packs objects
    into object streams, as PDF 1.5+ writers do.
    """
    import pikepdf

    pdf = pikepdf.Pdf.new()
    for width, height in page_sizes or [(612, 792)]:
        page = pdf.add_blank_page(page_size=(width, height))
        page.obj.Contents = pdf.make_stream(content)
        if cropbox is not None:
            page.obj.CropBox = pikepdf.Array(cropbox)
    buf = io.BytesIO()
    if object_streams:
        pdf.save(buf, object_stream_mode=pikepdf.ObjectStreamMode.generate)
    else:
        pdf.save(buf)
    return buf.getvalue()


def make_image(
    width: int = 200,
    height: int = 100,
    fmt: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    """Build an in-memory raster image using Pillow."""
    from PIL import Image

    colors = {"RGBA": (20, 40, 200, 128), "L": 90}
    img = Image.new(mode, (width, height), colors.get(mode, (20, 40, 200)))
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.sigburn and SIGBURN_* env vars."""
    for name in (
        "SIGBURN_PAGE_FORMAT",
        "SIGBURN_SIGNER_NAME",
        "SIGBURN_SIGNER_EMAIL",
        "SIGBURN_AUDIT_LOG",
        "SIGBURN_DEBUG_BOX",
    ):
        monkeypatch.delenv(name, raising=False)
    config_dir = tmp_path / "sigburn_config"
    with (
        patch("sigburn.config._storage.CONFIG_DIR", config_dir),
        patch("sigburn.config._storage.CONFIG_FILE", config_dir / "config.json"),
    ):
        yield config_dir


@pytest.fixture
def config_dir(_isolated_config):
    """(config_dir, config_file) of the redirected config location."""
    return _isolated_config, _isolated_config / "config.json"


@pytest.fixture
def valid_pdf_bytes():
    """Create a minimal one-page Letter PDF using pikepdf."""
    return make_pdf()


@pytest.fixture
def multi_page_pdf_bytes():
    """Three pages: Letter, A4, and a landscape Letter."""
    return make_pdf([(612, 792), (595.275591, 841.889764), (792, 612)])


@pytest.fixture
def xref_stream_pdf_bytes():
    """Two Letter pages behind a cross-reference stream."""
    return make_pdf([(612, 792), (612, 792)], object_streams=True)


@pytest.fixture
def png_bytes():
    """200x100 opaque RGB PNG (aspect ratio 2)."""
    return make_image(200, 100, "PNG")


@pytest.fixture
def square_png_bytes():
    return make_image(100, 100, "PNG")


@pytest.fixture
def rgba_png_bytes():
    """200x100 semi-transparent PNG."""
    return make_image(200, 100, "PNG", mode="RGBA")


@pytest.fixture
def jpeg_bytes():
    """120x60 RGB JPEG."""
    return make_image(120, 60, "JPEG")
