"""PDF structure analysis and incremental update assembly.

Functions for reading existing PDF structure (root object, xref offsets,
trailer entries) and appending an incremental update: new objects, an xref
table, and a trailer chained to the previous one via /Prev.

The original bytes are never rewritten, so everything already in the file
is preserved byte-for-byte.

Object-level construction is in objects.py and render.py.
The overlay orchestration is in overlay.py.
"""

from __future__ import annotations

import re
from itertools import groupby
from typing import TYPE_CHECKING

from ...errors import MalformedDocument
from .. import require_pikepdf as _require_pikepdf

if TYPE_CHECKING:
    import pikepdf

__all__ = [
    "assemble_incremental_update",
    "build_xref_and_trailer",
    "find_prev_startxref",
    "find_root_obj_num",
]

# ── PDF structure analysis ───────────────────────────────────────────


def find_root_obj_num(pdf: pikepdf.Pdf) -> tuple[int, int]:
    """Return the (number, generation) of the catalog object.

    Read through pikepdf so cross-reference streams (where /Root lives in
    the stream dictionary, not a textual trailer) are handled.
    """
    root = pdf.trailer.get("/Root")
    if root is None or not root.is_indirect:
        raise MalformedDocument("Cannot find an indirect /Root reference in the PDF trailer.")
    return root.objgen[0], root.objgen[1]


def find_prev_startxref(pdf_bytes: bytes, pdf: pikepdf.Pdf) -> tuple[int, int, list[str]]:
    """Find the last startxref offset, /Size, and trailer entries to carry forward.

    Returns:
        (prev_xref, size, trailer_extra) where trailer_extra is a list
        of raw trailer entries to carry forward (/Info and /ID).
    """
    # Find the LAST startxref in the file -- PDFs with incremental updates
    # have multiple startxref/%%EOF pairs; the last one is authoritative.
    # The regex is lenient: some PDFs have trailing junk after %%EOF.
    matches = list(re.finditer(rb"startxref\s+(\d+)\s+%%EOF", pdf_bytes))
    if not matches:
        raise MalformedDocument("Cannot find startxref in PDF.")
    prev_xref = int(matches[-1].group(1))

    # /Size from pikepdf, which resolves cross-reference streams and
    # hybrid-reference files correctly (a regex over trailers does not).
    pikepdf = _require_pikepdf()
    try:
        size = int(pdf.trailer["/Size"])
    except (pikepdf.PdfError, KeyError) as e:
        raise MalformedDocument(f"Cannot determine /Size from PDF trailer: {e}") from e

    return prev_xref, size, _extract_trailer_entries(pdf)


def _extract_trailer_entries(pdf: pikepdf.Pdf) -> list[str]:
    """Extract /Info and /ID entries from the trailer.

    Per PDF spec S7.5.6, an incremental update trailer must repeat the
    entries of the previous trailer (except /Prev and /Size).
    """
    pikepdf = _require_pikepdf()
    trailer_extra: list[str] = []
    trailer = pdf.trailer
    if "/Info" in trailer:
        info_obj = trailer["/Info"]
        if isinstance(info_obj, pikepdf.Object) and info_obj.is_indirect:
            trailer_extra.append(f"/Info {info_obj.objgen[0]} {info_obj.objgen[1]} R")
    if "/ID" in trailer:
        id_array = trailer["/ID"]
        trailer_extra.append(f"/ID {id_array.unparse(resolved=True).decode('latin-1')}")
    return trailer_extra


# ── Incremental update assembly ─────────────────────────────────────


def assemble_incremental_update(
    pdf_bytes: bytes,
    raw_objects: list[tuple[bytes, int, int]],
    new_size: int,
    prev_xref: int,
    root_obj_num: int,
    root_gen: int,
    trailer_extra: list[str],
) -> bytes:
    """Append objects, an xref section, and a trailer to the original bytes.

    Args:
        pdf_bytes: Original PDF bytes (kept verbatim as the prefix).
        raw_objects: (raw_bytes, obj_num, gen) tuples in append order.
        new_size: /Size of the updated document.
        prev_xref: Offset of the previous xref section (/Prev).
        root_obj_num: Catalog object number.
        root_gen: Catalog generation.
        trailer_extra: Entries carried forward from the previous trailer.
    """
    out = bytearray(pdf_bytes)
    if not out.endswith(b"\n"):
        out += b"\n"

    xref_entries: dict[int, tuple[int, int]] = {}
    for raw, obj_num, gen in raw_objects:
        xref_entries[obj_num] = (len(out), gen)
        out += raw

    out += build_xref_and_trailer(
        xref_entries=xref_entries,
        new_size=new_size,
        prev_xref=prev_xref,
        root_obj_num=root_obj_num,
        root_gen=root_gen,
        trailer_extra=trailer_extra,
        xref_offset=len(out),
    )
    return bytes(out)


# ── Xref table builder ──────────────────────────────────────────────


def _subsections(obj_nums: list[int]) -> list[list[int]]:
    """Split sorted object numbers into runs of consecutive numbers.

    >>> _subsections([3, 4, 5, 9, 11, 12])
    [[3, 4, 5], [9], [11, 12]]
    """
    runs: list[list[int]] = []
    for _, run in groupby(enumerate(obj_nums), key=lambda item: item[1] - item[0]):
        runs.append([num for _, num in run])
    return runs


def build_xref_and_trailer(
    xref_entries: dict[int, tuple[int, int]],
    new_size: int,
    prev_xref: int,
    root_obj_num: int,
    root_gen: int,
    trailer_extra: list[str],
    xref_offset: int,
) -> bytes:
    """Build the xref section, trailer, and %%EOF marker of an update.

    Args:
        xref_entries: Object number -> (byte offset, generation).
        new_size: /Size of the updated document.
        prev_xref: Offset of the previous xref section.
        root_obj_num: Catalog object number.
        root_gen: Catalog generation.
        trailer_extra: Entries carried forward (/Info, /ID).
        xref_offset: Byte offset at which this xref section starts.

    Raises:
        MalformedDocument: If there is nothing to reference.
    """
    if not xref_entries:
        raise MalformedDocument("Cannot build xref table: no objects to reference.")

    lines = ["xref"]
    for run in _subsections(sorted(xref_entries)):
        lines.append(f"{run[0]} {len(run)}")
        # Entries are exactly 20 bytes: 18 characters, then \r plus the joining \n.
        lines.extend(
            f"{xref_entries[num][0]:010d} {xref_entries[num][1]:05d} n\r" for num in run
        )

    trailer = [
        f"/Size {new_size}",
        f"/Prev {prev_xref}",
        f"/Root {root_obj_num} {root_gen} R",
        *trailer_extra,
    ]
    lines += ["trailer", "<<", *(f"  {entry}" for entry in trailer), ">>"]
    lines += ["startxref", str(xref_offset), "%%EOF", ""]
    return "\n".join(lines).encode("latin-1")
