"""Signing and integrity-check workflows behind the CLI commands.

Each function takes bytes and paths, calls the core and the audit store,
and returns a result object. Nothing here prints, exits, or parses
arguments, and business errors come back in the result instead of being
raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from ..core.integrity import DIGEST_HEX_LENGTH, compute_digest, integrity_status
from ..errors import AuditError, SigburnError
from .helpers import atomic_write

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from ..audit import JsonAuditStore
    from ..core.signing import AuditFragment, SignaturePlacement

_logger = logging.getLogger(__name__)


# ── Result types ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SigningResult:
    """Result of a single signing operation.

    ``audit_error`` is set when the document was written but recording
    the audit entry failed.
    """

    ok: bool
    error_message: str | None = None
    output_path: Path | None = None
    output_size: int = 0
    original_digest: str | None = None
    signed_digest: str | None = None
    fragments: tuple[AuditFragment, ...] = ()
    audit_record_id: str | None = None
    audit_error: str | None = None


@dataclass(frozen=True, slots=True)
class VerifyResult:
    """Outcome of checking a document against an expected digest."""

    status: Literal["valid", "tampered", "not_found", "error"]
    current_digest: str | None = None
    expected_digest: str | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "valid"


# ── Error classification ──────────────────────────────────────────


def _classify_error(error: Exception) -> SigningResult:
    """Convert a caught exception into a SigningResult."""
    if isinstance(error, (SigburnError, ValueError)):
        return SigningResult(ok=False, error_message=str(error))

    _logger.exception("Unexpected error during signing")
    return SigningResult(
        ok=False,
        error_message="An unexpected error occurred. Check logs for details.",
    )


# ── Signing workflow ─────────────────────────────────────────────


def sign_one(
    pdf_bytes: bytes,
    output_path: Path,
    placements: Sequence[SignaturePlacement],
    *,
    draw_bounding_box: bool = False,
    audit_store: JsonAuditStore | None = None,
    document_id: str | None = None,
) -> SigningResult:
    """Burn one or more signature placements into a PDF and write it.

    Calls the core fold, writes output atomically, and optionally records
    one audit entry covering the whole run. Never raises on business
    errors -- all captured in the result.

    Args:
        pdf_bytes: Raw PDF file content (caller reads the file).
        output_path: Where to write the signed PDF.
        placements: Placements to apply, in order.
        draw_bounding_box: Outline placement boxes in red.
        audit_store: Store to record the signing event in, if any.
        document_id: Audit document identifier (defaults to the output
            file name).

    Returns:
        SigningResult with outcome, output path, size, and digests.
    """
    if not placements:
        return SigningResult(ok=False, error_message="No signature placements given.")

    try:
        from ..core.signing import overlay_images

        result = overlay_images(pdf_bytes, placements, draw_bounding_box=draw_bounding_box)
    except Exception as e:
        return _classify_error(e)

    try:
        atomic_write(output_path, result.document)
    except PermissionError:
        return SigningResult(
            ok=False,
            error_message=f"Permission denied: {output_path}",
        )
    except OSError as e:
        return SigningResult(ok=False, error_message=f"Cannot write {output_path}: {e}")

    audit_record_id = None
    audit_error = None
    if audit_store is not None:
        from ..audit import AuditRecord

        record = AuditRecord.from_fragment(
            result.fragments[-1],
            document_id=document_id or output_path.name,
            original_digest=result.original_digest,
            signed_digest=result.final_digest,
            signature_count=len(result.fragments),
        )
        try:
            audit_store.create(record)
            audit_record_id = record.record_id
        except (AuditError, OSError) as e:
            _logger.warning("Signed document written but audit entry failed: %s", e)
            audit_error = str(e)

    return SigningResult(
        ok=True,
        output_path=output_path,
        output_size=len(result.document),
        original_digest=result.original_digest,
        signed_digest=result.final_digest,
        fragments=result.fragments,
        audit_record_id=audit_record_id,
        audit_error=audit_error,
    )


# ── Verification workflows ───────────────────────────────────────


def verify_against_digest(pdf_bytes: bytes, expected_digest: str) -> VerifyResult:
    """Compare a document with a known signed digest."""
    expected = expected_digest.strip().lower()
    current = compute_digest(pdf_bytes)
    if len(expected) != DIGEST_HEX_LENGTH:
        return VerifyResult(
            status="error",
            current_digest=current,
            expected_digest=expected,
            message=f"Expected digest must be {DIGEST_HEX_LENGTH} hex characters.",
        )
    status = integrity_status(expected, current)
    message = (
        "Document matches the signed digest"
        if status == "valid"
        else "Document has been tampered with"
    )
    return VerifyResult(
        status="valid" if status == "valid" else "tampered",
        current_digest=current,
        expected_digest=expected,
        message=message,
    )


def verify_against_audit(
    pdf_bytes: bytes, document_id: str, audit_store: JsonAuditStore
) -> VerifyResult:
    """Compare a document with the latest audit record for *document_id*.

    The check is recorded in the audit store.
    """
    current = compute_digest(pdf_bytes)
    try:
        check = audit_store.verify_integrity(document_id, current)
    except (AuditError, OSError) as e:
        return VerifyResult(status="error", current_digest=current, message=str(e))
    return VerifyResult(
        status=check.status,
        current_digest=current,
        expected_digest=check.signed_digest,
        message=check.message,
    )
