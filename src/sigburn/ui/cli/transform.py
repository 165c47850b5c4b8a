"""Coordinate transform command for the sigburn CLI."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...config import get_page_format
from ...core.geometry import PageGeometry, Rect, ViewportFrame
from ...core.transform import (
    document_to_normalized,
    page_geometry_for,
    transform_document_to_viewport,
    transform_viewport_to_document,
)
from ...errors import SigburnError
from ..helpers import parse_rect, parse_size, safe_read_file

if TYPE_CHECKING:
    import argparse


def _resolve_page(args: argparse.Namespace) -> PageGeometry:
    """Page geometry from --page-size, --pdf, --format, or the configured default."""
    if args.page_size:
        w, h = parse_size(args.page_size)
        return PageGeometry(w, h)
    if args.pdf:
        from ...core.pdf import read_page_geometry

        pdf_bytes = safe_read_file(Path(args.pdf), "PDF")
        if pdf_bytes is None:
            sys.exit(1)
        return read_page_geometry(pdf_bytes, args.page)
    return page_geometry_for(args.format or get_page_format())


def _fmt_rect(rect: Rect) -> str:
    return f"x={rect.x:.4f} y={rect.y:.4f} w={rect.width:.4f} h={rect.height:.4f}"


def cmd_transform(args: argparse.Namespace) -> None:
    """Handle the 'transform' subcommand."""
    try:
        x, y, w, h = parse_rect(args.rect)
        vw, vh = parse_size(args.viewport)
        page = _resolve_page(args)
        viewport = ViewportFrame(vw, vh)

        if args.reverse:
            document_rect = Rect(x, y, w, h, "document")
            viewport_rect = transform_document_to_viewport(document_rect, viewport, page)
            normalized = document_to_normalized(document_rect, page)
            clamped = False
        else:
            viewport_rect = Rect(x, y, w, h, "viewport")
            result = transform_viewport_to_document(viewport_rect, viewport, page)
            document_rect = result.document_rect
            normalized = result.normalized
            clamped = result.clamped
    except (SigburnError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        payload = {
            "page": {"width": page.width, "height": page.height},
            "viewport": {"width": viewport.width, "height": viewport.height},
            "viewport_rect": viewport_rect.to_dict(),
            "normalized": normalized.to_dict(),
            "document_rect": document_rect.to_dict(),
            "clamped": clamped,
        }
        print(json.dumps(payload, indent=2))
        return

    print(f"Page:       {page.width:.2f} x {page.height:.2f} pt")
    print(f"Viewport:   {viewport.width:g} x {viewport.height:g} px")
    print(f"Viewport:   {_fmt_rect(viewport_rect)}")
    print(f"Normalized: {_fmt_rect(normalized)}")
    print(f"Document:   {_fmt_rect(document_rect)}")
    if clamped:
        print("  (placement extended past the page and was clamped)")
