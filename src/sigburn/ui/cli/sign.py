"""Signing command handler for the sigburn CLI."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...config import get_audit_log_path, get_draw_bounding_box, get_signer_info
from ...constants import BYTES_PER_MB, PDF_WARN_SIZE, __version__
from ...core.geometry import Rect, ViewportFrame
from ...core.signing import SignaturePlacement
from ..helpers import default_output_path, format_size_kb, parse_rect, parse_size, safe_read_file
from ..workflows import sign_one

if TYPE_CHECKING:
    import argparse


def _build_placements(args: argparse.Namespace, image_bytes: bytes) -> list[SignaturePlacement]:
    """Turn --rect/--viewport/--page and signer options into placements."""
    vw, vh = parse_size(args.viewport)
    viewport = ViewportFrame(vw, vh)

    metadata: dict[str, str] = {}
    signer = get_signer_info()
    name = args.signer_name or signer["name"]
    email = args.signer_email or signer["email"]
    if name:
        metadata["signer_name"] = name
    if email:
        metadata["signer_email"] = email
    if args.reason:
        metadata["reason"] = args.reason

    placements = []
    for rect_text in args.rect:
        x, y, w, h = parse_rect(rect_text)
        placements.append(
            SignaturePlacement(
                rect=Rect(x, y, w, h, "viewport"),
                viewport=viewport,
                page_index=args.page,
                image=image_bytes,
                encoding=args.encoding,
                metadata=metadata,
            )
        )
    return placements


def cmd_sign(args: argparse.Namespace) -> None:
    """Handle the 'sign' subcommand."""
    from ...audit import JsonAuditStore

    pdf_path = Path(args.pdf)
    image_path = Path(args.image)

    pdf_bytes = safe_read_file(pdf_path, "PDF")
    if pdf_bytes is None:
        sys.exit(1)
    image_bytes = safe_read_file(image_path, "image")
    if image_bytes is None:
        sys.exit(1)

    if len(pdf_bytes) > PDF_WARN_SIZE:
        size_mb = len(pdf_bytes) / BYTES_PER_MB
        warn_mb = PDF_WARN_SIZE // BYTES_PER_MB
        print(
            f"  Warning: {pdf_path.name} is {size_mb:.0f} MB. "
            f"Files over {warn_mb} MB may be slow.",
            file=sys.stderr,
        )

    try:
        placements = _build_placements(args, image_bytes)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    out = Path(args.output) if args.output else default_output_path(pdf_path)
    draw_box = args.box or get_draw_bounding_box()

    audit_path = Path(args.audit_log) if args.audit_log else get_audit_log_path()
    store = JsonAuditStore(audit_path) if audit_path else None

    print(f"sigburn v{__version__}")
    print(f"  Signing {pdf_path.name} ({format_size_kb(len(pdf_bytes))})...", end=" ", flush=True)

    result = sign_one(
        pdf_bytes,
        out,
        placements,
        draw_bounding_box=draw_box,
        audit_store=store,
        document_id=args.document_id,
    )

    if not result.ok:
        print("FAILED", file=sys.stderr)
        print(f"  {result.error_message}", file=sys.stderr)
        sys.exit(1)

    print(f"OK -> {out.name} ({format_size_kb(result.output_size)})")
    for i, fragment in enumerate(result.fragments, 1):
        doc = fragment.document_rect
        note = " (clamped to page)" if fragment.clamped else ""
        print(
            f"  Placement {i}: page {fragment.page_index}, "
            f"{doc.width:.2f}x{doc.height:.2f} pt at ({doc.x:.2f}, {doc.y:.2f}){note}"
        )
    print(f"  Original SHA-256: {result.original_digest}")
    print(f"  Signed SHA-256:   {result.signed_digest}")

    if result.audit_record_id:
        print(f"  Audit record: {result.audit_record_id} ({audit_path})")
    elif result.audit_error:
        print(f"  Warning: audit entry not recorded: {result.audit_error}", file=sys.stderr)
