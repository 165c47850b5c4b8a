"""Tests for sigburn.core.pdf building blocks -- page lookup, objects, xref assembly."""

from __future__ import annotations

import io
from decimal import Decimal

import pytest
from conftest import make_pdf

from sigburn.core.pdf import (
    allocate_overlay_objects,
    build_page_override,
    build_xref_and_trailer,
    find_prev_startxref,
    find_root_obj_num,
    get_page_box,
    get_page_count,
    image_resource_name,
    inspect_page,
    open_document,
    read_page_geometry,
    resolve_page_index,
)
from sigburn.core.pdf.objects import _serialize_pikepdf_obj
from sigburn.core.pdf.render import build_draw_stream, build_prefix_stream, fmt_num
from sigburn.errors import MalformedDocument, PageIndexOutOfRange

# ── open_document ───────────────────────────────────────────────────


def test_open_rejects_non_pdf():
    with pytest.raises(MalformedDocument, match="not appear to be a PDF"):
        open_document(b"hello world")


def test_open_rejects_empty():
    with pytest.raises(MalformedDocument):
        open_document(b"")


def test_open_rejects_unparsable_pdf():
    with pytest.raises(MalformedDocument):
        open_document(b"%PDF-1.4\n" + b"\x00" * 64)


def test_open_rejects_encrypted_pdf():
    import pikepdf

    pdf = pikepdf.Pdf.new()
    pdf.add_blank_page()
    buf = io.BytesIO()
    pdf.save(buf, encryption=pikepdf.Encryption(owner="owner-pw", user="user-pw"))
    with pytest.raises(MalformedDocument, match="Encrypted"):
        open_document(buf.getvalue())


def test_open_valid(valid_pdf_bytes):
    with open_document(valid_pdf_bytes) as pdf:
        assert get_page_count(pdf) == 1


# ── Page lookup and geometry ────────────────────────────────────────


def test_resolve_page_index(multi_page_pdf_bytes):
    with open_document(multi_page_pdf_bytes) as pdf:
        assert resolve_page_index(pdf, 0) == 0
        assert resolve_page_index(pdf, 2) == 2
        with pytest.raises(PageIndexOutOfRange) as exc_info:
            resolve_page_index(pdf, 3)
        assert exc_info.value.page_count == 3
        with pytest.raises(PageIndexOutOfRange):
            resolve_page_index(pdf, -1)


def test_read_page_geometry_per_page(multi_page_pdf_bytes):
    assert read_page_geometry(multi_page_pdf_bytes, 0).width == pytest.approx(612)
    a4 = read_page_geometry(multi_page_pdf_bytes, 1)
    assert (a4.width, a4.height) == pytest.approx((595.275591, 841.889764), abs=1e-3)
    landscape = read_page_geometry(multi_page_pdf_bytes, 2)
    assert (landscape.width, landscape.height) == pytest.approx((792, 612))


def test_read_page_geometry_out_of_range(valid_pdf_bytes):
    with pytest.raises(PageIndexOutOfRange):
        read_page_geometry(valid_pdf_bytes, 1)


def test_cropbox_takes_priority():
    pdf_bytes = make_pdf(cropbox=[50, 40, 562, 740])
    with open_document(pdf_bytes) as pdf:
        assert get_page_box(pdf, 0) == pytest.approx((50, 40, 562, 740))
    geometry = read_page_geometry(pdf_bytes, 0)
    assert (geometry.width, geometry.height) == pytest.approx((512, 700))


def test_inverted_box_is_normalized():
    pdf_bytes = make_pdf(cropbox=[562, 740, 50, 40])
    with open_document(pdf_bytes) as pdf:
        assert get_page_box(pdf, 0) == pytest.approx((50, 40, 562, 740))


# ── Structure analysis ──────────────────────────────────────────────


def test_find_root_and_startxref(valid_pdf_bytes):
    with open_document(valid_pdf_bytes) as pdf:
        root_num, root_gen = find_root_obj_num(pdf)
        prev_xref, size, extra = find_prev_startxref(valid_pdf_bytes, pdf)
        assert root_num > 0
        assert root_gen == 0
        assert size > root_num
    assert valid_pdf_bytes[prev_xref : prev_xref + 4] == b"xref"
    assert any(e.startswith("/ID") for e in extra)


def test_missing_startxref_is_malformed(valid_pdf_bytes):
    with open_document(valid_pdf_bytes) as pdf, pytest.raises(MalformedDocument):
        find_prev_startxref(b"%PDF-1.4 no xref here", pdf)


def test_inspect_page(valid_pdf_bytes):
    with open_document(valid_pdf_bytes) as pdf:
        target = inspect_page(pdf, 0)
        page_obj = pdf.pages[0].obj
        assert target["obj_num"] == page_obj.objgen[0]
        assert len(target["contents"]) == 1
        assert target["contents"][0].endswith(" R")
        assert any(e.startswith("/Parent") for e in target["entries"])
        assert not any(e.startswith("/Contents") for e in target["entries"])
        assert target["box"] == pytest.approx((0, 0, 612, 792))


# ── Object construction ─────────────────────────────────────────────


def test_allocate_overlay_objects_with_smask():
    nums = allocate_overlay_objects(10, has_smask=True)
    assert nums == {"img": 10, "smask": 11, "prefix": 12, "draw": 13, "new_size": 14}


def test_allocate_overlay_objects_without_smask():
    nums = allocate_overlay_objects(10, has_smask=False)
    assert nums == {"img": 10, "smask": None, "prefix": 11, "draw": 12, "new_size": 13}


def test_build_page_override_wraps_contents():
    target = {
        "obj_num": 3,
        "gen": 0,
        "contents": ["4 0 R"],
        "entries": ["/Type /Page", "/Parent 2 0 R", "/MediaBox [ 0 0 612 792 ]"],
        "resources": ["/Font << /F1 5 0 R >>"],
        "xobjects": ["/Im0 6 0 R"],
        "box": (0.0, 0.0, 612.0, 792.0),
    }
    nums = allocate_overlay_objects(20, has_smask=False)
    raw = build_page_override(target, nums)  # type: ignore[arg-type]
    assert raw.startswith("3 0 obj\n<<")
    assert raw.endswith(">>\nendobj\n")
    assert "/Contents [21 0 R 4 0 R 22 0 R]" in raw
    assert "/XObject << /Im0 6 0 R /SbImg20 20 0 R >>" in raw
    assert "/Font << /F1 5 0 R >>" in raw
    assert "/Parent 2 0 R" in raw


def test_image_resource_name():
    assert image_resource_name(42) == "/SbImg42"


def test_serialize_decimal_and_plain_types():
    assert _serialize_pikepdf_obj(Decimal("595.275591")) == "595.275591"
    assert _serialize_pikepdf_obj(12) == "12"
    assert _serialize_pikepdf_obj(True) == "true"
    assert _serialize_pikepdf_obj(None) == "null"
    assert _serialize_pikepdf_obj(2.0) == "2"


# ── Content streams ─────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("value", "text"),
    [(12.5, "12.5"), (100.0, "100"), (-0.00001, "0"), (1 / 3, "0.3333"), (-2.25, "-2.25")],
)
def test_fmt_num(value, text):
    assert fmt_num(value) == text


def test_prefix_stream():
    assert build_prefix_stream(7) == b"7 0 obj\n<< /Length 2 >>\nstream\nq\n\nendstream\nendobj\n"


def test_draw_stream_operators():
    raw = build_draw_stream(8, "/SbImg5", 150, 200, 100, 50)
    assert b"\nQ\nq\n100 0 0 50 150 200 cm\n/SbImg5 Do\nQ\n" in raw
    assert b" RG" not in raw


def test_draw_stream_with_bounding_box():
    raw = build_draw_stream(8, "/SbImg5", 150, 200, 100, 50, bounding_box=(140, 190, 120, 70))
    assert b"1 0 0 RG 1 w" in raw
    assert b"140 190 120 70 re S" in raw


# ── Xref table ──────────────────────────────────────────────────────


def test_xref_entries_are_twenty_bytes():
    data = build_xref_and_trailer(
        xref_entries={5: (1000, 0), 6: (1200, 0), 9: (1500, 0)},
        new_size=10,
        prev_xref=500,
        root_obj_num=1,
        root_gen=0,
        trailer_extra=["/ID [<aa> <bb>]"],
        xref_offset=1800,
    )
    lines = data.split(b"\n")
    assert lines[0] == b"xref"
    assert lines[1] == b"5 2"
    assert lines[2] == b"0000001000 00000 n\r"
    assert len(lines[2]) + 1 == 20
    assert lines[4] == b"9 1"
    assert b"/Prev 500" in data
    assert b"/Size 10" in data
    assert b"/Root 1 0 R" in data
    assert b"/ID [<aa> <bb>]" in data
    assert data.endswith(b"startxref\n1800\n%%EOF\n")


def test_xref_requires_entries():
    with pytest.raises(MalformedDocument):
        build_xref_and_trailer({}, 1, 0, 1, 0, [], 0)
