"""
Digest, integrity verification, and audit trail commands.

All checks are integrity-only: a matching digest proves the bytes are
unchanged since signing, not who signed them.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...config import get_audit_log_path
from ...core.integrity import compute_digest
from ...errors import AuditError
from ..helpers import format_size_kb, safe_read_file
from ..workflows import verify_against_audit, verify_against_digest

if TYPE_CHECKING:
    import argparse

    from ...audit import AuditRecord, JsonAuditStore


def _open_store(audit_log: str | None) -> JsonAuditStore:
    from ...audit import JsonAuditStore

    path = Path(audit_log) if audit_log else get_audit_log_path()
    if path is None:
        print(
            "Error: no audit log configured. Use --audit-log or set SIGBURN_AUDIT_LOG.",
            file=sys.stderr,
        )
        sys.exit(1)
    return JsonAuditStore(path)


def cmd_hash(args: argparse.Namespace) -> None:
    """Print the SHA-256 digest of a file."""
    path = Path(args.file)
    data = safe_read_file(path, "file")
    if data is None:
        sys.exit(1)
    print(f"{compute_digest(data)}  {path.name}")


def cmd_verify(args: argparse.Namespace) -> None:
    """Check a PDF against a known digest or its audit record."""
    pdf_path = Path(args.pdf)
    pdf_bytes = safe_read_file(pdf_path, "PDF")
    if pdf_bytes is None:
        sys.exit(1)

    print(f"Verifying {pdf_path.name} ({format_size_kb(len(pdf_bytes))})...")
    if args.digest:
        result = verify_against_digest(pdf_bytes, args.digest)
    else:
        result = verify_against_audit(pdf_bytes, args.document_id, _open_store(args.audit_log))

    print(f"  Current SHA-256:  {result.current_digest}")
    if result.expected_digest:
        print(f"  Expected SHA-256: {result.expected_digest}")

    if result.status == "valid":
        print(f"  VALID: {result.message}")
    elif result.status == "tampered":
        print(f"  TAMPERED: {result.message}")
        sys.exit(1)
    elif result.status == "not_found":
        print(f"  NOT FOUND: {result.message}", file=sys.stderr)
        sys.exit(1)
    else:
        print(f"  ERROR: {result.message}", file=sys.stderr)
        sys.exit(1)


def _print_record(record: AuditRecord) -> None:
    print(f"  {record.created_at}  {record.document_id or '(no id)'}  [{record.integrity_status}]")
    print(f"    Signer: {record.signer_name} <{record.signer_email}>")
    print(f"    Page: {record.page_index}, signatures: {record.signature_count}")
    if record.reason:
        print(f"    Reason: {record.reason}")
    print(f"    Original: {record.original_digest}")
    print(f"    Signed:   {record.signed_digest}")
    if record.verifications:
        last = record.verifications[-1]
        print(
            f"    Verified {len(record.verifications)} time(s), "
            f"last {last.verified_at} ({last.status})"
        )


def cmd_audit(args: argparse.Namespace) -> None:
    """List audit records for a document or a signer."""
    store = _open_store(args.audit_log)
    try:
        if args.document_id:
            records = store.get_audit_trail(args.document_id)
            label = f"document {args.document_id}"
        else:
            records = store.get_signer_audit_trail(args.signer_email)
            label = f"signer {args.signer_email}"
    except AuditError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not records:
        print(f"No audit records for {label}.")
        return

    print(f"{len(records)} audit record(s) for {label}:")
    for record in records:
        _print_record(record)
