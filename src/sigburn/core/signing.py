"""
Placement resolution and multi-placement signing.

A placement arrives in viewport pixels. Resolving it means reading the
target page's geometry from the current document, transforming the
rectangle into document points, validating the normalized form, and
handing the result to the overlay engine.

Several placements are applied as an explicit left fold: each step reads
the buffer produced by the previous one, so later images draw over
earlier ones and every step's digests chain together.
"""

from __future__ import annotations

__all__ = [
    "AuditFragment",
    "MultiOverlayResult",
    "SignaturePlacement",
    "overlay_images",
    "place_signature",
    "resolve_placement",
]

import logging
from dataclasses import dataclass, field
from functools import partial, reduce
from typing import TYPE_CHECKING, Any

from ..constants import MIN_NORMALIZED_EXTENT
from ..errors import InvalidGeometry
from .geometry import FitResult, Rect, ViewportFrame, require_positive
from .integrity import compute_digest
from .pdf import OverlayResult, overlay_image, read_page_geometry
from .placement import SignaturePlacement
from .transform import (
    TransformResult,
    is_valid_normalized_coordinate,
    transform_viewport_to_document,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .image import ImageEncoding

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditFragment:
    """Everything one overlay step contributes to an audit record.

    The core produces fragments; persisting them is the caller's job.
    """

    page_index: int
    viewport_rect: Rect
    viewport: ViewportFrame
    normalized_rect: Rect
    document_rect: Rect
    applied_fit: FitResult
    image_width: int
    image_height: int
    image_encoding: ImageEncoding
    before_digest: str
    after_digest: str
    clamped: bool = False
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_index": self.page_index,
            "viewport_rect": self.viewport_rect.to_dict(),
            "viewport": {"width": self.viewport.width, "height": self.viewport.height},
            "normalized_rect": self.normalized_rect.to_dict(),
            "document_rect": self.document_rect.to_dict(),
            "applied_fit": self.applied_fit.to_dict(),
            "image": {
                "width": self.image_width,
                "height": self.image_height,
                "encoding": self.image_encoding,
            },
            "before_digest": self.before_digest,
            "after_digest": self.after_digest,
            "clamped": self.clamped,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class MultiOverlayResult:
    """Result of applying an ordered list of placements.

    Attributes:
        document: Final PDF bytes (the input unchanged if there were no
            placements).
        original_digest: Digest of the input buffer.
        final_digest: Digest of ``document``.
        fragments: One AuditFragment per placement, in application order.
    """

    document: bytes
    original_digest: str
    final_digest: str
    fragments: tuple[AuditFragment, ...] = ()


def resolve_placement(pdf_bytes: bytes, placement: SignaturePlacement) -> TransformResult:
    """Transform a placement into document points against its target page.

    Raises:
        InvalidGeometry: If the placement or viewport has a non-positive
            size, or the rectangle does not land on the page.
        MalformedDocument: If the PDF cannot be parsed.
        PageIndexOutOfRange: If the target page does not exist.
    """
    require_positive(
        placement_width=placement.rect.width,
        placement_height=placement.rect.height,
    )
    page = read_page_geometry(pdf_bytes, placement.page_index)
    transformed = transform_viewport_to_document(placement.rect, placement.viewport, page)
    normalized = transformed.normalized
    # Clamping never fails, but a rect entirely off the page collapses to a sliver.
    off_page = min(normalized.width, normalized.height) < 2 * MIN_NORMALIZED_EXTENT
    if off_page or not is_valid_normalized_coordinate(normalized):
        raise InvalidGeometry(
            f"Placement {placement.rect.as_tuple()} does not resolve to a valid "
            f"page region (normalized {normalized.as_tuple()})"
        )
    if transformed.clamped:
        _logger.info(
            "Placement on page %d extended past the page and was clamped",
            placement.page_index,
        )
    return transformed


def place_signature(
    pdf_bytes: bytes,
    placement: SignaturePlacement,
    *,
    draw_bounding_box: bool = False,
) -> tuple[OverlayResult, AuditFragment]:
    """Resolve one placement and burn its image into the document.

    Args:
        pdf_bytes: Current document buffer.
        placement: Viewport-space placement and image payload.
        draw_bounding_box: Also outline the placement box in red.

    Returns:
        (OverlayResult, AuditFragment) for this step.
    """
    transformed = resolve_placement(pdf_bytes, placement)
    result = overlay_image(
        pdf_bytes,
        placement,
        transformed.document_rect,
        draw_bounding_box=draw_bounding_box,
    )
    fragment = AuditFragment(
        page_index=result.page_index,
        viewport_rect=placement.rect,
        viewport=placement.viewport,
        normalized_rect=transformed.normalized,
        document_rect=transformed.document_rect,
        applied_fit=result.applied_fit,
        image_width=result.image_width,
        image_height=result.image_height,
        image_encoding=result.image_encoding,
        before_digest=result.before_digest,
        after_digest=result.after_digest,
        clamped=transformed.clamped,
        metadata=dict(placement.metadata),
    )
    return result, fragment


def _fold_step(
    state: tuple[bytes, tuple[AuditFragment, ...]],
    placement: SignaturePlacement,
    *,
    draw_bounding_box: bool,
) -> tuple[bytes, tuple[AuditFragment, ...]]:
    document, fragments = state
    result, fragment = place_signature(document, placement, draw_bounding_box=draw_bounding_box)
    return result.document, (*fragments, fragment)


def overlay_images(
    pdf_bytes: bytes,
    placements: Sequence[SignaturePlacement],
    *,
    draw_bounding_box: bool = False,
) -> MultiOverlayResult:
    """Apply placements in order, each on the output of the previous one.

    The first failing placement aborts the whole operation; no partial
    document is returned.

    Args:
        pdf_bytes: Input PDF.
        placements: Ordered placements. Later ones draw over earlier ones.
        draw_bounding_box: Outline every placement box in red.

    Returns:
        MultiOverlayResult. For an empty list the input buffer is returned
        unchanged and both digests are equal.
    """
    original_digest = compute_digest(pdf_bytes)
    step = partial(_fold_step, draw_bounding_box=draw_bounding_box)
    initial: tuple[bytes, tuple[AuditFragment, ...]] = (pdf_bytes, ())
    document, fragments = reduce(step, placements, initial)

    final_digest = compute_digest(document)
    _logger.debug(
        "Applied %d placement(s): %s -> %s", len(fragments), original_digest, final_digest
    )
    return MultiOverlayResult(
        document=document,
        original_digest=original_digest,
        final_digest=final_digest,
        fragments=fragments,
    )
