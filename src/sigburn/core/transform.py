"""
Viewport <-> document coordinate transforms.

A placement drawn on screen is stored in a page-relative normalized form
(0..1, origin top-left) and burned into the PDF in points (origin
bottom-left). The page is assumed to be rendered into the viewport with a
contain fit, centered, so the same viewport/page pair always reproduces
the same mapping.

All functions are pure. Page-size defaults are never global: callers pass
a PageGeometry explicitly (see :func:`page_geometry_for`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..constants import DEFAULT_PAGE_FORMAT, MIN_NORMALIZED_EXTENT, PAGE_FORMATS
from ..errors import InvalidGeometry
from .geometry import (
    ContainFit,
    CoordinateSpace,
    PageGeometry,
    Rect,
    ViewportFrame,
    compute_contain_fit,
    require_positive,
)

__all__ = [
    "TransformResult",
    "document_to_normalized",
    "is_valid_normalized_coordinate",
    "normalize_viewport_rect",
    "normalized_to_document",
    "page_geometry_for",
    "page_in_viewport",
    "transform_document_to_viewport",
    "transform_viewport_to_document",
]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformResult:
    """Output of the forward transform."""

    document_rect: Rect
    normalized: Rect
    clamped: bool = False


def page_geometry_for(format_name: str = DEFAULT_PAGE_FORMAT) -> PageGeometry:
    """Return the PageGeometry of a named page format ("A4", "Letter").

    Lookup is case-insensitive.

    Raises:
        InvalidGeometry: For unknown format names.
    """
    for name, (width, height) in PAGE_FORMATS.items():
        if name.lower() == format_name.strip().lower():
            return PageGeometry(width, height)
    valid = ", ".join(sorted(PAGE_FORMATS))
    raise InvalidGeometry(f"Unknown page format {format_name!r}. Valid: {valid}")


def _require_space(rect: Rect, expected: CoordinateSpace) -> None:
    if rect.space != expected:
        raise InvalidGeometry(f"Expected a {expected} rectangle, got a {rect.space} rectangle")


def page_in_viewport(viewport: ViewportFrame, page: PageGeometry) -> ContainFit:
    """Contain fit of the page inside the viewport; scale is pixels per point."""
    require_positive(page_width=page.width, page_height=page.height)
    return compute_contain_fit(
        viewport.width,
        viewport.height,
        page.width / page.height,
        inner_height=page.height,
    )


def _clamp_axis(origin: float, extent: float) -> tuple[float, float]:
    """Clamp one axis of a normalized rectangle into the page.

    The origin stays in [0, 1 - MIN_NORMALIZED_EXTENT] and the extent in
    [MIN_NORMALIZED_EXTENT, 1 - origin], so origin + extent never exceeds 1.
    """
    origin = min(max(origin, 0.0), 1.0 - MIN_NORMALIZED_EXTENT)
    extent = min(max(extent, MIN_NORMALIZED_EXTENT), 1.0 - origin)
    return origin, extent


def normalize_viewport_rect(
    rect: Rect, viewport: ViewportFrame, page: PageGeometry
) -> tuple[Rect, bool]:
    """Map a viewport rectangle to page-relative fractions, clamped to the page.

    Returns:
        (normalized_rect, clamped) -- ``clamped`` is True when any
        component had to be pulled back into the page.

    Raises:
        InvalidGeometry: On non-positive viewport/page dimensions or a
            rectangle that is not in viewport space.
    """
    _require_space(rect, "viewport")
    fit = page_in_viewport(viewport, page)
    _logger.debug(
        "Page %.2fx%.2f pt in viewport %sx%s px: scale=%.6f offset=(%.3f, %.3f)",
        page.width,
        page.height,
        viewport.width,
        viewport.height,
        fit.scale,
        fit.offset_x,
        fit.offset_y,
    )

    raw_x = (rect.x - fit.offset_x) / fit.scale / page.width
    raw_y = (rect.y - fit.offset_y) / fit.scale / page.height
    raw_w = rect.width / fit.scale / page.width
    raw_h = rect.height / fit.scale / page.height

    x, width = _clamp_axis(raw_x, raw_w)
    y, height = _clamp_axis(raw_y, raw_h)
    clamped = (x, y, width, height) != (raw_x, raw_y, raw_w, raw_h)
    if clamped:
        _logger.debug(
            "Clamped normalized rect (%.6f, %.6f, %.6f, %.6f) -> (%.6f, %.6f, %.6f, %.6f)",
            raw_x,
            raw_y,
            raw_w,
            raw_h,
            x,
            y,
            width,
            height,
        )
    return Rect(x, y, width, height, "normalized"), clamped


def normalized_to_document(normalized: Rect, page: PageGeometry) -> Rect:
    """Convert a normalized rectangle to PDF points, flipping the Y axis."""
    _require_space(normalized, "normalized")
    require_positive(page_width=page.width, page_height=page.height)
    return Rect(
        x=normalized.x * page.width,
        y=page.height - (normalized.y + normalized.height) * page.height,
        width=normalized.width * page.width,
        height=normalized.height * page.height,
        space="document",
    )


def document_to_normalized(rect: Rect, page: PageGeometry) -> Rect:
    """Convert a PDF-point rectangle to page fractions (origin top-left).

    No clamping is applied; use :func:`is_valid_normalized_coordinate`
    to check the result.
    """
    _require_space(rect, "document")
    require_positive(page_width=page.width, page_height=page.height)
    return Rect(
        x=rect.x / page.width,
        y=(page.height - (rect.y + rect.height)) / page.height,
        width=rect.width / page.width,
        height=rect.height / page.height,
        space="normalized",
    )


def transform_viewport_to_document(
    rect: Rect, viewport: ViewportFrame, page: PageGeometry
) -> TransformResult:
    """Forward pipeline: viewport pixels -> normalized -> document points.

    Rectangles reaching outside the rendered page (drag overshoot) are
    clamped to the page edge rather than rejected.

    Args:
        rect: Placement in viewport space.
        viewport: Viewport size at placement time.
        page: Target page size in points.

    Returns:
        TransformResult with the document-point and normalized rectangles.

    Raises:
        InvalidGeometry: On non-positive viewport/page dimensions.
    """
    normalized, clamped = normalize_viewport_rect(rect, viewport, page)
    document_rect = normalized_to_document(normalized, page)
    return TransformResult(document_rect=document_rect, normalized=normalized, clamped=clamped)


def transform_document_to_viewport(
    rect: Rect, viewport: ViewportFrame, page: PageGeometry
) -> Rect:
    """Reverse pipeline: document points -> viewport pixels.

    The contain fit is recomputed from the viewport/page pair given here,
    not the pair used when the placement was made. Only the document-point
    rectangle is authoritative across viewport changes.
    """
    _require_space(rect, "document")
    fit = page_in_viewport(viewport, page)

    norm_x = rect.x / page.width
    norm_y_top = (page.height - (rect.y + rect.height)) / page.height

    return Rect(
        x=norm_x * page.width * fit.scale + fit.offset_x,
        y=norm_y_top * page.height * fit.scale + fit.offset_y,
        width=rect.width * fit.scale,
        height=rect.height * fit.scale,
        space="viewport",
    )


def is_valid_normalized_coordinate(rect: Rect) -> bool:
    """True iff the rectangle is a non-degenerate placement inside the page.

    >>> is_valid_normalized_coordinate(Rect(0.1, 0.1, 0.2, 0.1, "normalized"))
    True
    >>> is_valid_normalized_coordinate(Rect(0.9, 0.1, 0.2, 0.1, "normalized"))
    False
    """
    if rect.space != "normalized":
        return False
    x, y, w, h = rect.as_tuple()
    return (
        0.0 <= x <= 1.0
        and 0.0 <= y <= 1.0
        and 0.0 < w <= 1.0
        and 0.0 < h <= 1.0
        and x + w <= 1.0
        and y + h <= 1.0
    )
