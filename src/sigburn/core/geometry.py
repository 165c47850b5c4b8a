"""
Geometry value types and the contain-fit rule.

One scaling rule serves two callers: mapping a document page into a
viewport (page aspect inside viewport pixels) and fitting a raster image
into a placement box (image aspect inside box points).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from ..errors import InvalidGeometry

__all__ = [
    "ContainFit",
    "CoordinateSpace",
    "FitResult",
    "PageGeometry",
    "Rect",
    "ViewportFrame",
    "calculate_fit_dimensions",
    "compute_contain_fit",
    "require_positive",
]

# viewport:   pixels, origin top-left
# normalized: fraction of the page (0..1), origin top-left
# document:   PDF points, origin bottom-left
CoordinateSpace = Literal["viewport", "normalized", "document"]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle tagged with the coordinate space it lives in."""

    x: float
    y: float
    width: float
    height: float
    space: CoordinateSpace

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height

    def to_dict(self) -> dict[str, float | str]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "space": self.space,
        }


@dataclass(frozen=True)
class ViewportFrame:
    """Pixel size of the rendering surface when a placement was made."""

    width: float
    height: float


@dataclass(frozen=True)
class PageGeometry:
    """Page size in PDF points."""

    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class ContainFit:
    """How an inner box was scaled and centered inside a container.

    Attributes:
        scale: Container units per inner unit.
        offset_x: Horizontal gap left of the fitted box (container units).
        offset_y: Vertical gap above/below the fitted box (container units).
        fitted_width: Width of the fitted box (container units).
        fitted_height: Height of the fitted box (container units).
    """

    scale: float
    offset_x: float
    offset_y: float
    fitted_width: float
    fitted_height: float


@dataclass(frozen=True)
class FitResult:
    """Fitted image size and the offsets that center it inside its box."""

    width: float
    height: float
    offset_x: float
    offset_y: float

    def to_dict(self) -> dict[str, float]:
        return {
            "width": self.width,
            "height": self.height,
            "offset_x": self.offset_x,
            "offset_y": self.offset_y,
        }


def require_positive(**values: float) -> None:
    """Raise InvalidGeometry unless every named value is finite and > 0.

    >>> require_positive(width=10, height=2)
    >>> require_positive(width=0)
    Traceback (most recent call last):
    ...
    sigburn.errors.InvalidGeometry: width must be a positive finite number, got 0
    """
    for name, value in values.items():
        if not (isinstance(value, (int, float)) and math.isfinite(value) and value > 0):
            raise InvalidGeometry(f"{name} must be a positive finite number, got {value!r}")


def compute_contain_fit(
    container_width: float,
    container_height: float,
    inner_aspect_ratio: float,
    inner_height: float = 1.0,
) -> ContainFit:
    """Scale an inner box to the largest size that fits inside a container.

    If the inner box is relatively wider than the container it is fit by
    width and centered vertically; otherwise it is fit by height and
    centered horizontally. The binding side equals the container side
    exactly.

    Args:
        container_width: Container width (any unit).
        container_height: Container height (same unit).
        inner_aspect_ratio: Inner width / inner height.
        inner_height: Inner height in its own unit; ``scale`` is expressed
            per this unit (e.g. page height in points gives pixels/point).

    Returns:
        ContainFit with scale, centering offsets, and fitted size.

    Raises:
        InvalidGeometry: If any input is non-positive or non-finite.
    """
    require_positive(
        container_width=container_width,
        container_height=container_height,
        inner_aspect_ratio=inner_aspect_ratio,
        inner_height=inner_height,
    )
    container_aspect_ratio = container_width / container_height

    if inner_aspect_ratio > container_aspect_ratio:
        fitted_width = float(container_width)
        fitted_height = container_width / inner_aspect_ratio
    else:
        fitted_height = float(container_height)
        fitted_width = container_height * inner_aspect_ratio

    return ContainFit(
        scale=fitted_height / inner_height,
        offset_x=(container_width - fitted_width) / 2.0,
        offset_y=(container_height - fitted_height) / 2.0,
        fitted_width=fitted_width,
        fitted_height=fitted_height,
    )


def calculate_fit_dimensions(
    image_width: float,
    image_height: float,
    box_width: float,
    box_height: float,
) -> FitResult:
    """Fit an image into a box without distortion, centered.

    >>> calculate_fit_dimensions(256, 128, 100, 100)
    FitResult(width=100.0, height=50.0, offset_x=0.0, offset_y=25.0)

    Raises:
        InvalidGeometry: If any dimension is non-positive or non-finite.
    """
    require_positive(image_width=image_width, image_height=image_height)
    fit = compute_contain_fit(box_width, box_height, image_width / image_height)
    return FitResult(
        width=fit.fitted_width,
        height=fit.fitted_height,
        offset_x=fit.offset_x,
        offset_y=fit.offset_y,
    )
