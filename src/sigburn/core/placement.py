"""Signature placement request type."""

from __future__ import annotations

from dataclasses import dataclass, field

from .geometry import Rect, ViewportFrame

__all__ = ["SignaturePlacement"]


@dataclass(frozen=True)
class SignaturePlacement:
    """One image to burn into one page, as placed by the user on screen.

    Attributes:
        rect: Placement in viewport pixels (origin top-left).
        viewport: Viewport size when the placement was made.
        page_index: 0-based target page.
        image: Raster payload -- raw bytes, base64 text, or a data URI.
        encoding: Declared encoding ("png" or "jpeg"); None lets a data
            URI decide, else PNG is tried first.
        metadata: Caller-supplied fields carried into audit fragments
            (signer name/email, reason, ...). Never interpreted by the core.
    """

    rect: Rect
    viewport: ViewportFrame
    page_index: int
    image: bytes | str
    encoding: str | None = "png"
    metadata: dict[str, str] = field(default_factory=dict)
