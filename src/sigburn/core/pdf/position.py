"""
Page lookup and page geometry helpers.

Resolves a 0-based page index against the document and reads the visible
page box (CropBox, else MediaBox) that placements are measured against.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from ...constants import PDF_MAGIC
from ...errors import MalformedDocument, PageIndexOutOfRange
from .. import require_pikepdf as _require_pikepdf
from ..geometry import PageGeometry

if TYPE_CHECKING:
    import pikepdf

__all__ = [
    "get_page_box",
    "get_page_count",
    "get_page_dimensions",
    "open_document",
    "read_page_geometry",
    "resolve_page_index",
]


def open_document(pdf_bytes: bytes) -> pikepdf.Pdf:
    """Open a PDF buffer read-only with pikepdf.

    Uses BytesIO for in-memory access (no temp files). The caller owns
    the returned object and should close it (use it as a context manager).

    Raises:
        MalformedDocument: If the buffer is not a PDF, cannot be parsed,
            or is encrypted.
    """
    if not pdf_bytes or not pdf_bytes.startswith(PDF_MAGIC):
        raise MalformedDocument("Input does not appear to be a PDF file.")

    pikepdf = _require_pikepdf()
    try:
        pdf = pikepdf.open(io.BytesIO(pdf_bytes))
    except pikepdf.PasswordError as exc:
        raise MalformedDocument(f"Encrypted PDF is not supported: {exc}") from exc
    except pikepdf.PdfError as exc:
        raise MalformedDocument(f"Cannot parse PDF: {exc}") from exc

    if pdf.is_encrypted:
        pdf.close()
        raise MalformedDocument("Encrypted PDF is not supported.")
    return pdf


def get_page_count(pdf: pikepdf.Pdf) -> int:
    return len(pdf.pages)


def resolve_page_index(pdf: pikepdf.Pdf, page_index: int) -> int:
    """Validate a 0-based page index against the document.

    Raises:
        PageIndexOutOfRange: If ``page_index < 0`` or ``>= page count``.
    """
    total = get_page_count(pdf)
    idx = int(page_index)
    if idx < 0 or idx >= total:
        raise PageIndexOutOfRange(idx, total)
    return idx


def get_page_box(pdf: pikepdf.Pdf, page_index: int) -> tuple[float, float, float, float]:
    """Return the visible box of a page as (x0, y0, x1, y1), normalized so x0<x1, y0<y1.

    CropBox takes priority over MediaBox. Both may be inherited from an
    ancestor /Pages node; pikepdf's page helper resolves that and falls
    back to the MediaBox when no CropBox is set.
    """
    box = pdf.pages[page_index].cropbox
    # pikepdf Array supports indexing; extract 4 values explicitly
    x0, y0, x1, y1 = float(box[0]), float(box[1]), float(box[2]), float(box[3])
    return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)


def get_page_dimensions(pdf: pikepdf.Pdf, page_index: int) -> tuple[float, float]:
    """Get (width, height) in points of the page's visible box.

    /Rotate is not applied: dimensions are in the page's own user space,
    the same space the overlay draws in.
    """
    x0, y0, x1, y1 = get_page_box(pdf, page_index)
    return x1 - x0, y1 - y0


def read_page_geometry(pdf_bytes: bytes, page_index: int) -> PageGeometry:
    """Read the PageGeometry of one page of a PDF buffer.

    Raises:
        MalformedDocument: If the buffer cannot be parsed.
        PageIndexOutOfRange: If the page does not exist.
    """
    with open_document(pdf_bytes) as pdf:
        idx = resolve_page_index(pdf, page_index)
        width, height = get_page_dimensions(pdf, idx)
    return PageGeometry(width, height)
