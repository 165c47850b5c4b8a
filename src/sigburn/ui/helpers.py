"""
Common CLI helper functions for sigburn.

File I/O with uniform error reporting, and parsers for the geometry
arguments the commands accept.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from .._fileio import atomic_write

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "atomic_write",
    "default_output_path",
    "format_size_kb",
    "parse_rect",
    "parse_size",
    "safe_read_file",
]

_BYTES_PER_KB = 1024


def format_size_kb(size_bytes: int) -> str:
    """Format a byte count as a human-readable KB string (e.g. '123.4 KB')."""
    return f"{size_bytes / _BYTES_PER_KB:.1f} KB"


def default_output_path(pdf_path: Path) -> Path:
    """Compute default output path for a signed PDF: '<stem>_signed.pdf'."""
    return pdf_path.with_name(f"{pdf_path.stem}_signed.pdf")


def _parse_numbers(text: str, separators: str, count: int, what: str) -> list[float]:
    parts = text.strip().lower()
    for sep in separators[1:]:
        parts = parts.replace(sep, separators[0])
    items = [p for p in parts.split(separators[0]) if p.strip()]
    if len(items) != count:
        raise ValueError(f"Invalid {what} {text!r}: expected {count} numbers")
    try:
        return [float(p) for p in items]
    except ValueError:
        raise ValueError(f"Invalid {what} {text!r}: not a number") from None


def parse_rect(text: str) -> tuple[float, float, float, float]:
    """Parse 'X,Y,W,H' into four floats.

    >>> parse_rect("10,20,150,60")
    (10.0, 20.0, 150.0, 60.0)

    Raises:
        ValueError: On anything other than four comma-separated numbers.
    """
    x, y, w, h = _parse_numbers(text, ",", 4, "rectangle")
    return x, y, w, h


def parse_size(text: str) -> tuple[float, float]:
    """Parse 'WxH' (or 'W,H') into two floats.

    >>> parse_size("800x600")
    (800.0, 600.0)

    Raises:
        ValueError: On anything other than two numbers.
    """
    w, h = _parse_numbers(text, "x,", 2, "size")
    return w, h


def safe_read_file(path: Path, kind: str = "file") -> bytes | None:
    """Read *path*, or print an error naming the *kind* of file and return None."""
    if not path.exists():
        print(f"Error: {kind} not found: {path}", file=sys.stderr)
        return None
    try:
        return path.read_bytes()
    except OSError as e:
        print(f"Error reading {kind}: {e}", file=sys.stderr)
        return None
