"""
Burn a raster image into one page of a PDF.

The overlay is written as a true incremental update: the original bytes
are kept exactly and the image, two content streams, and an override of
the page object are appended after the original %%EOF. Nothing time- or
run-dependent is written, so identical inputs give identical output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...errors import InvalidGeometry
from ..geometry import FitResult, Rect, calculate_fit_dimensions
from ..image import ImageEncoding, decode_signature_image
from ..integrity import compute_digest
from .incremental import assemble_incremental_update, find_prev_startxref, find_root_obj_num
from .objects import (
    allocate_overlay_objects,
    build_page_override,
    image_resource_name,
    inspect_page,
)
from .position import open_document, resolve_page_index
from .render import (
    build_draw_stream,
    build_image_object,
    build_prefix_stream,
    build_smask_object,
)

if TYPE_CHECKING:
    from ..placement import SignaturePlacement

__all__ = ["OverlayResult", "overlay_image"]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlayResult:
    """Output of one overlay step.

    Attributes:
        document: The updated PDF bytes.
        before_digest: Digest of the input buffer.
        after_digest: Digest of ``document``.
        applied_fit: How the image was scaled and centered in its box.
        page_index: Page that was drawn on.
        image_width: Decoded image width in pixels.
        image_height: Decoded image height in pixels.
        image_encoding: Decoder that read the payload.
        image_object_number: Object number of the embedded image XObject.
    """

    document: bytes
    before_digest: str
    after_digest: str
    applied_fit: FitResult
    page_index: int
    image_width: int
    image_height: int
    image_encoding: ImageEncoding
    image_object_number: int


def overlay_image(
    pdf_bytes: bytes,
    placement: SignaturePlacement,
    document_rect: Rect,
    *,
    draw_bounding_box: bool = False,
) -> OverlayResult:
    """Draw the placement's image into its page, fitted inside *document_rect*.

    Args:
        pdf_bytes: Input PDF. Never modified.
        placement: Supplies the page index and the image payload.
        document_rect: Target box in PDF points (origin bottom-left,
            relative to the page's visible box).
        draw_bounding_box: Also stroke the target box in red.

    Returns:
        OverlayResult with the new document and both digests.

    Raises:
        InvalidGeometry: If the rectangle is not in document space or has
            a non-positive size.
        MalformedDocument: If the PDF cannot be parsed or updated.
        PageIndexOutOfRange: If the page does not exist.
        UnsupportedImageFormat: If no supported decoder reads the image.
    """
    if document_rect.space != "document":
        raise InvalidGeometry(
            f"Expected a document rectangle, got a {document_rect.space} rectangle"
        )

    before_digest = compute_digest(pdf_bytes)

    # ── Read-only analysis of the input PDF ─────────────────────
    with open_document(pdf_bytes) as pdf:
        page_index = resolve_page_index(pdf, placement.page_index)
        root_obj_num, root_gen = find_root_obj_num(pdf)
        prev_xref, prev_size, trailer_extra = find_prev_startxref(pdf_bytes, pdf)
        target = inspect_page(pdf, page_index)

    img_data = decode_signature_image(placement.image, placement.encoding)
    fit = calculate_fit_dimensions(
        img_data["width"], img_data["height"], document_rect.width, document_rect.height
    )

    obj_nums = allocate_overlay_objects(prev_size, has_smask=img_data["smask"] is not None)
    _logger.debug(
        "Overlay on page %d (obj %d): image obj %d, streams %d/%d, fit %s",
        page_index,
        target["obj_num"],
        obj_nums["img"],
        obj_nums["prefix"],
        obj_nums["draw"],
        fit,
    )

    # Placement coordinates are relative to the visible box's lower-left corner.
    box_x0, box_y0 = target["box"][0], target["box"][1]
    origin_x = box_x0 + document_rect.x
    origin_y = box_y0 + document_rect.y
    outline = None
    if draw_bounding_box:
        outline = (origin_x, origin_y, document_rect.width, document_rect.height)

    raw_objects: list[tuple[bytes, int, int]] = [
        (build_image_object(obj_nums["img"], img_data, obj_nums["smask"]), obj_nums["img"], 0),
    ]
    smask_num = obj_nums["smask"]
    smask_bytes = img_data["smask"]
    if smask_num is not None and smask_bytes is not None:
        raw_objects.append(
            (
                build_smask_object(
                    smask_num, smask_bytes, img_data["width"], img_data["height"], img_data["bpc"]
                ),
                smask_num,
                0,
            )
        )
    raw_objects.append((build_prefix_stream(obj_nums["prefix"]), obj_nums["prefix"], 0))
    raw_objects.append(
        (
            build_draw_stream(
                obj_nums["draw"],
                image_resource_name(obj_nums["img"]),
                origin_x + fit.offset_x,
                origin_y + fit.offset_y,
                fit.width,
                fit.height,
                bounding_box=outline,
            ),
            obj_nums["draw"],
            0,
        )
    )
    page_override = build_page_override(target, obj_nums)
    raw_objects.append((page_override.encode("latin-1"), target["obj_num"], target["gen"]))

    document = assemble_incremental_update(
        pdf_bytes=pdf_bytes,
        raw_objects=raw_objects,
        new_size=obj_nums["new_size"],
        prev_xref=prev_xref,
        root_obj_num=root_obj_num,
        root_gen=root_gen,
        trailer_extra=trailer_extra,
    )
    after_digest = compute_digest(document)
    _logger.debug("Overlay digests: before=%s after=%s", before_digest, after_digest)

    return OverlayResult(
        document=document,
        before_digest=before_digest,
        after_digest=after_digest,
        applied_fit=fit,
        page_index=page_index,
        image_width=img_data["width"],
        image_height=img_data["height"],
        image_encoding=img_data["encoding"],
        image_object_number=obj_nums["img"],
    )
