"""Core geometry, transform, integrity, and PDF overlay operations.

The C-extension backed libraries (pikepdf, Pillow) are imported on first
use so that the pure geometry and transform code, and ``sigburn --help``,
load without them.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

from ..errors import SigburnError

if TYPE_CHECKING:
    import types

__all__: list[str] = []


def _require(module: str, distribution: str) -> types.ModuleType:
    try:
        return importlib.import_module(module)
    except ImportError as exc:
        raise SigburnError(
            f"{distribution} is required for this operation.\n"
            f"Install with: pip install {distribution}"
        ) from exc


def require_pikepdf() -> types.ModuleType:
    """Import pikepdf, raising SigburnError with an install hint if missing."""
    return _require("pikepdf", "pikepdf")


def require_pil_image() -> types.ModuleType:
    """Import ``PIL.Image``, raising SigburnError with an install hint if missing."""
    return _require("PIL.Image", "Pillow")
