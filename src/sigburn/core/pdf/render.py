"""Raw PDF objects for an image overlay.

Builds the image XObject (with optional soft mask) and the two content
streams that draw it: a prefix stream that saves the graphics state before
the page's own content, and a draw stream that restores it and paints the
image at its fitted position.

Output is a pure function of the inputs -- no dates, IDs, or other
per-run values -- so identical inputs produce identical bytes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..image import SignatureImageData

__all__ = [
    "BOUNDING_BOX_RGB",
    "build_draw_stream",
    "build_image_object",
    "build_prefix_stream",
    "build_smask_object",
    "fmt_num",
]

# Stroke color of the optional placement outline (red)
BOUNDING_BOX_RGB = (1, 0, 0)


def fmt_num(value: float) -> str:
    """Format a coordinate for a content stream: 4 decimals, no trailing zeros.

    >>> fmt_num(12.5)
    '12.5'
    >>> fmt_num(100.0)
    '100'
    >>> fmt_num(-0.00001)
    '0'
    """
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _stream_object(obj_num: int, dict_body: str, data: bytes) -> bytes:
    entries = f"{dict_body} /Length {len(data)}" if dict_body else f"/Length {len(data)}"
    header = f"{obj_num} 0 obj\n<< {entries} >>\nstream\n"
    return header.encode("latin-1") + data + b"\nendstream\nendobj\n"


def build_image_object(
    img_obj_num: int, img_data: SignatureImageData, smask_obj_num: int | None
) -> bytes:
    """Build a raw PDF image XObject."""
    smask_ref = ""
    if smask_obj_num is not None:
        smask_ref = f" /SMask {smask_obj_num} 0 R"
    dict_body = (
        f"/Type /XObject /Subtype /Image"
        f" /Width {img_data['width']} /Height {img_data['height']}"
        f" /ColorSpace /DeviceRGB /BitsPerComponent {img_data['bpc']}"
        f" /Filter /FlateDecode{smask_ref}"
    )
    return _stream_object(img_obj_num, dict_body, img_data["samples"])


def build_smask_object(
    smask_obj_num: int, smask_data: bytes, width: int, height: int, bpc: int
) -> bytes:
    """Build a raw PDF soft mask image XObject."""
    dict_body = (
        f"/Type /XObject /Subtype /Image"
        f" /Width {width} /Height {height}"
        f" /ColorSpace /DeviceGray /BitsPerComponent {bpc}"
        f" /Filter /FlateDecode"
    )
    return _stream_object(smask_obj_num, dict_body, smask_data)


def build_prefix_stream(obj_num: int) -> bytes:
    """Content stream placed before the page's own content."""
    return _stream_object(obj_num, "", b"q\n")


def build_draw_stream(
    obj_num: int,
    image_name: str,
    x: float,
    y: float,
    width: float,
    height: float,
    bounding_box: tuple[float, float, float, float] | None = None,
) -> bytes:
    """Content stream that restores the graphics state and paints the image.

    Args:
        obj_num: Object number of the stream.
        image_name: Resource name of the image XObject (e.g. "/SbImg12").
        x, y: Lower-left corner of the image in page user space.
        width, height: Painted image size in points.
        bounding_box: Optional (x, y, w, h) outline to stroke in red.
    """
    ops = [
        # Leading newline separates us from the last token of the page content.
        "",
        "Q",
        "q",
        f"{fmt_num(width)} 0 0 {fmt_num(height)} {fmt_num(x)} {fmt_num(y)} cm",
        f"{image_name} Do",
        "Q",
    ]
    if bounding_box is not None:
        bx, by, bw, bh = bounding_box
        r, g, b = BOUNDING_BOX_RGB
        ops += [
            "q",
            f"{r} {g} {b} RG 1 w",
            f"{fmt_num(bx)} {fmt_num(by)} {fmt_num(bw)} {fmt_num(bh)} re S",
            "Q",
        ]
    return _stream_object(obj_num, "", ("\n".join(ops) + "\n").encode("latin-1"))
