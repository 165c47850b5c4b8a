"""
Application-wide constants for sigburn.

Page sizes, size limits, tolerances, and environment variable names are
centralized here for easy maintenance and configuration.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("sigburn")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.3.0"

__all__ = [
    "A4_HEIGHT_POINTS",
    "A4_WIDTH_POINTS",
    "BYTES_PER_MB",
    "DEFAULT_PAGE_FORMAT",
    "ENV_AUDIT_LOG",
    "ENV_DEBUG_BOX",
    "ENV_PAGE_FORMAT",
    "ENV_SIGNER_EMAIL",
    "ENV_SIGNER_NAME",
    "LETTER_HEIGHT_POINTS",
    "LETTER_WIDTH_POINTS",
    "MAX_IMAGE_BYTES",
    "MAX_IMAGE_PIXELS",
    "MIN_NORMALIZED_EXTENT",
    "MM_PER_INCH",
    "PAGE_FORMATS",
    "PDF_MAGIC",
    "PDF_WARN_SIZE",
    "POINTS_PER_INCH",
    "ROUND_TRIP_TOLERANCE",
    "__version__",
]

# ── Page geometry (PDF points, 72 per inch) ───────────────────────────

POINTS_PER_INCH = 72
MM_PER_INCH = 25.4

# ISO 216 A4, 210 x 297 mm
A4_WIDTH_POINTS = 210 / MM_PER_INCH * POINTS_PER_INCH
A4_HEIGHT_POINTS = 297 / MM_PER_INCH * POINTS_PER_INCH

# US Letter, 8.5 x 11 in
LETTER_WIDTH_POINTS = 8.5 * POINTS_PER_INCH
LETTER_HEIGHT_POINTS = 11.0 * POINTS_PER_INCH

# Named page formats -> (width, height) in points
PAGE_FORMATS = {
    "A4": (A4_WIDTH_POINTS, A4_HEIGHT_POINTS),
    "Letter": (LETTER_WIDTH_POINTS, LETTER_HEIGHT_POINTS),
}

DEFAULT_PAGE_FORMAT = "A4"


# ── Coordinate tolerances ────────────────────────────────────────────

# Smallest extent a clamped normalized rectangle may have. Keeps every
# clamped rectangle non-degenerate (0 < width, height).
MIN_NORMALIZED_EXTENT = 1e-6

# Maximum deviation (in viewport pixels) allowed for a forward/reverse
# transform round trip when no clamping occurred.
ROUND_TRIP_TOLERANCE = 1.0


# ── Size units ────────────────────────────────────────────────────────

BYTES_PER_MB = 1024 * 1024


# ── Size limits ──────────────────────────────────────────────────────

# Maximum raster payload size (10 MB). Anything larger is certainly not a
# reasonable signature image.
MAX_IMAGE_BYTES = 10 * 1024 * 1024

# Maximum decoded pixel count, guards against decompression bombs (CWE-400).
MAX_IMAGE_PIXELS = 4000 * 4000

# PDF size above which the CLI warns before signing (50 MB)
PDF_WARN_SIZE = 50 * 1024 * 1024


# ── Environment variable names ──────────────────────────────────────

ENV_PAGE_FORMAT = "SIGBURN_PAGE_FORMAT"
ENV_SIGNER_NAME = "SIGBURN_SIGNER_NAME"
ENV_SIGNER_EMAIL = "SIGBURN_SIGNER_EMAIL"
ENV_AUDIT_LOG = "SIGBURN_AUDIT_LOG"
ENV_DEBUG_BOX = "SIGBURN_DEBUG_BOX"


# ── File format markers ─────────────────────────────────────────────

PDF_MAGIC = b"%PDF-"
