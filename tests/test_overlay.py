"""Tests for sigburn.core.pdf.overlay -- burning an image into a page."""

from __future__ import annotations

import io

import pytest
from conftest import PAGE_CONTENT, make_pdf

from sigburn.core.geometry import Rect, ViewportFrame
from sigburn.core.integrity import compute_digest
from sigburn.core.pdf import overlay_image
from sigburn.core.placement import SignaturePlacement
from sigburn.errors import (
    InvalidGeometry,
    MalformedDocument,
    PageIndexOutOfRange,
    UnsupportedImageFormat,
)

BOX = Rect(100, 200, 200, 100, "document")


def _placement(image: bytes, page_index: int = 0, encoding: str | None = "png"):
    return SignaturePlacement(
        rect=Rect(0, 0, 1, 1, "viewport"),
        viewport=ViewportFrame(612, 792),
        page_index=page_index,
        image=image,
        encoding=encoding,
    )


def _open(pdf_bytes: bytes):
    import pikepdf

    return pikepdf.open(io.BytesIO(pdf_bytes))


def _last_stream(pdf, page_index: int = 0) -> bytes:
    return pdf.pages[page_index].obj.Contents[-1].read_bytes()


def test_original_bytes_preserved_as_prefix(valid_pdf_bytes, png_bytes):
    result = overlay_image(valid_pdf_bytes, _placement(png_bytes), BOX)
    assert result.document.startswith(valid_pdf_bytes)
    assert len(result.document) > len(valid_pdf_bytes)
    assert result.document.rstrip().endswith(b"%%EOF")


def test_digests(valid_pdf_bytes, png_bytes):
    result = overlay_image(valid_pdf_bytes, _placement(png_bytes), BOX)
    assert result.before_digest == compute_digest(valid_pdf_bytes)
    assert result.after_digest == compute_digest(result.document)
    assert result.before_digest != result.after_digest


def test_output_is_deterministic(valid_pdf_bytes, png_bytes):
    a = overlay_image(valid_pdf_bytes, _placement(png_bytes), BOX)
    b = overlay_image(valid_pdf_bytes, _placement(png_bytes), BOX)
    assert a.document == b.document
    assert a.after_digest == b.after_digest


def test_page_content_is_wrapped(valid_pdf_bytes, png_bytes):
    with _open(valid_pdf_bytes) as original:
        original_contents = original.pages[0].obj.Contents.objgen

    result = overlay_image(valid_pdf_bytes, _placement(png_bytes), BOX)
    with _open(result.document) as pdf:
        contents = pdf.pages[0].obj.Contents
        assert len(contents) == 3
        assert contents[0].read_bytes() == b"q\n"
        assert contents[1].objgen == original_contents
        assert contents[1].read_bytes() == PAGE_CONTENT
        assert _last_stream(pdf).startswith(b"\nQ\nq\n")


def test_image_xobject_embedded(valid_pdf_bytes, png_bytes):
    result = overlay_image(valid_pdf_bytes, _placement(png_bytes), BOX)
    name = f"/SbImg{result.image_object_number}"
    with _open(result.document) as pdf:
        xobjects = pdf.pages[0].obj.Resources.XObject
        assert name in xobjects
        image = xobjects[name]
        assert image.Subtype == "/Image"
        assert int(image.Width) == 200
        assert int(image.Height) == 100
        assert "/SMask" not in image
        assert image.objgen[0] == result.image_object_number


def test_transparent_image_gets_smask(valid_pdf_bytes, rgba_png_bytes):
    result = overlay_image(valid_pdf_bytes, _placement(rgba_png_bytes), BOX)
    with _open(result.document) as pdf:
        image = pdf.pages[0].obj.Resources.XObject[f"/SbImg{result.image_object_number}"]
        smask = image.SMask
        assert smask.ColorSpace == "/DeviceGray"
        assert int(smask.Width) == 200


def test_image_drawn_at_fitted_position(valid_pdf_bytes, square_png_bytes):
    """A square image in a 200x100 box is 100x100, centered horizontally."""
    result = overlay_image(valid_pdf_bytes, _placement(square_png_bytes), BOX)
    assert result.applied_fit.width == pytest.approx(100)
    assert result.applied_fit.offset_x == pytest.approx(50)
    with _open(result.document) as pdf:
        assert b"100 0 0 100 150 200 cm" in _last_stream(pdf)


def test_aspect_preserving_fit_fills_matching_box(valid_pdf_bytes, png_bytes):
    result = overlay_image(valid_pdf_bytes, _placement(png_bytes), BOX)
    assert result.applied_fit.width == pytest.approx(200)
    assert result.applied_fit.height == pytest.approx(100)
    with _open(result.document) as pdf:
        assert b"200 0 0 100 100 200 cm" in _last_stream(pdf)


def test_drawing_offset_by_cropbox_origin(png_bytes):
    pdf_bytes = make_pdf(cropbox=[50, 40, 562, 740])
    result = overlay_image(pdf_bytes, _placement(png_bytes), BOX)
    with _open(result.document) as pdf:
        assert b"200 0 0 100 150 240 cm" in _last_stream(pdf)


def test_bounding_box_outline(valid_pdf_bytes, square_png_bytes):
    result = overlay_image(
        valid_pdf_bytes, _placement(square_png_bytes), BOX, draw_bounding_box=True
    )
    with _open(result.document) as pdf:
        stream = _last_stream(pdf)
        assert b"1 0 0 RG" in stream
        assert b"100 200 200 100 re S" in stream


def test_only_target_page_changes(multi_page_pdf_bytes, png_bytes):
    with _open(multi_page_pdf_bytes) as original:
        untouched = [original.pages[i].obj.Contents.objgen for i in (0, 2)]

    result = overlay_image(multi_page_pdf_bytes, _placement(png_bytes, page_index=1), BOX)
    assert result.page_index == 1
    with _open(result.document) as pdf:
        assert len(pdf.pages) == 3
        assert len(pdf.pages[1].obj.Contents) == 3
        assert [pdf.pages[i].obj.Contents.objgen for i in (0, 2)] == untouched


def test_inherited_resources_copied_to_page(png_bytes):
    import pikepdf

    pdf = pikepdf.Pdf.new()
    page = pdf.add_blank_page(page_size=(612, 792))
    page.obj.Contents = pdf.make_stream(PAGE_CONTENT)
    font = pdf.make_indirect(
        pikepdf.Dictionary(
            Type=pikepdf.Name.Font,
            Subtype=pikepdf.Name.Type1,
            BaseFont=pikepdf.Name.Helvetica,
        )
    )
    pdf.Root.Pages.Resources = pikepdf.Dictionary(Font=pikepdf.Dictionary(F1=font))
    if "/Resources" in page.obj:
        del page.obj["/Resources"]
    buf = io.BytesIO()
    pdf.save(buf)

    result = overlay_image(buf.getvalue(), _placement(png_bytes), BOX)
    with _open(result.document) as out:
        resources = out.pages[0].obj.Resources
        assert "/F1" in resources.Font
        assert len(resources.XObject) == 1


def test_jpeg_declared_as_png_still_embeds(valid_pdf_bytes, jpeg_bytes):
    result = overlay_image(valid_pdf_bytes, _placement(jpeg_bytes, encoding="png"), BOX)
    assert result.image_encoding == "jpeg"
    assert (result.image_width, result.image_height) == (120, 60)


# ── Errors ──────────────────────────────────────────────────────────


def test_page_index_out_of_range(valid_pdf_bytes, png_bytes):
    with pytest.raises(PageIndexOutOfRange) as exc_info:
        overlay_image(valid_pdf_bytes, _placement(png_bytes, page_index=3), BOX)
    assert exc_info.value.page_count == 1


def test_malformed_document(png_bytes):
    with pytest.raises(MalformedDocument):
        overlay_image(b"not a pdf", _placement(png_bytes), BOX)


def test_undecodable_image(valid_pdf_bytes):
    with pytest.raises(UnsupportedImageFormat):
        overlay_image(valid_pdf_bytes, _placement(b"\x89PNG garbage"), BOX)


def test_rect_must_be_in_document_space(valid_pdf_bytes, png_bytes):
    with pytest.raises(InvalidGeometry, match="document"):
        overlay_image(valid_pdf_bytes, _placement(png_bytes), Rect(1, 1, 10, 10, "viewport"))


def test_zero_size_box_rejected(valid_pdf_bytes, png_bytes):
    with pytest.raises(InvalidGeometry):
        overlay_image(valid_pdf_bytes, _placement(png_bytes), Rect(1, 1, 0, 10, "document"))
