"""
sigburn -- burn handwritten signature images into PDF pages.

Maps a placement made in a resizable on-screen viewport to stable PDF
page coordinates, draws the image into the page as an incremental update,
and reports SHA-256 digests of the document before and after.
"""

from __future__ import annotations

from .constants import __version__
from .core.geometry import (
    ContainFit,
    FitResult,
    PageGeometry,
    Rect,
    ViewportFrame,
    calculate_fit_dimensions,
    compute_contain_fit,
)
from .core.integrity import compute_digest, integrity_status, verify_digest
from .core.pdf import OverlayResult, overlay_image, read_page_geometry
from .core.signing import (
    AuditFragment,
    MultiOverlayResult,
    SignaturePlacement,
    overlay_images,
    place_signature,
)
from .core.transform import (
    TransformResult,
    is_valid_normalized_coordinate,
    page_geometry_for,
    transform_document_to_viewport,
    transform_viewport_to_document,
)
from .errors import (
    AuditError,
    ConfigError,
    InvalidGeometry,
    MalformedDocument,
    PageIndexOutOfRange,
    SigburnError,
    UnsupportedImageFormat,
)

__all__ = [
    "AuditError",
    "AuditFragment",
    "ConfigError",
    "ContainFit",
    "FitResult",
    "InvalidGeometry",
    "MalformedDocument",
    "MultiOverlayResult",
    "OverlayResult",
    "PageGeometry",
    "PageIndexOutOfRange",
    "Rect",
    "SigburnError",
    "SignaturePlacement",
    "TransformResult",
    "UnsupportedImageFormat",
    "ViewportFrame",
    "__version__",
    "calculate_fit_dimensions",
    "compute_contain_fit",
    "compute_digest",
    "integrity_status",
    "is_valid_normalized_coordinate",
    "overlay_image",
    "overlay_images",
    "page_geometry_for",
    "place_signature",
    "read_page_geometry",
    "transform_document_to_viewport",
    "transform_viewport_to_document",
    "verify_digest",
]
