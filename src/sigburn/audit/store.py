"""
File-backed audit store.

Keeps every AuditRecord in one JSON document. A missing file is an empty
log; a corrupt one raises AuditError instead of reading as empty. Every
write replaces the file atomically.
"""

from __future__ import annotations

__all__ = ["JsonAuditStore"]

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .._fileio import atomic_write
from ..core.integrity import verify_digest
from ..errors import AuditError
from .records import AuditRecord, IntegrityCheck, VerificationEvent, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable

_logger = logging.getLogger(__name__)

_FORMAT_VERSION = 1


class JsonAuditStore:
    """Create/query interface over a JSON audit log file.

    Args:
        path: Location of the log. Created on first write, with its
            parent directory.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def __repr__(self) -> str:
        return f"JsonAuditStore({str(self.path)!r})"

    # ── Persistence ──────────────────────────────────────────────────

    def _load(self) -> list[AuditRecord]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise AuditError(f"Cannot read audit log {self.path}: {e}") from e

        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise AuditError(f"Audit log {self.path} is corrupted: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise AuditError(f"Audit log {self.path} has an unexpected structure.")
        return [AuditRecord.from_dict(item) for item in data["records"]]

    def _save(self, records: list[AuditRecord]) -> None:
        payload = {"version": _FORMAT_VERSION, "records": [r.to_dict() for r in records]}
        content = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(self.path, content.encode("utf-8"))
        except OSError as e:
            raise AuditError(f"Cannot write audit log {self.path}: {e}") from e

    @staticmethod
    def _newest_first(records: list[AuditRecord]) -> list[AuditRecord]:
        # Insertion order breaks ties between records created in the same instant.
        indexed = list(enumerate(records))
        indexed.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [record for _, record in indexed]

    # ── Create / query ───────────────────────────────────────────────

    def create(self, record: AuditRecord) -> AuditRecord:
        """Append a record to the log and return it."""
        records = self._load()
        records.append(record)
        self._save(records)
        _logger.debug(
            "Audit record %s created for document %s", record.record_id, record.document_id
        )
        return record

    def all_records(self) -> list[AuditRecord]:
        """Every record, newest first."""
        return self._newest_first(self._load())

    def search(self, predicate: Callable[[AuditRecord], bool]) -> list[AuditRecord]:
        """Records matching *predicate*, newest first."""
        return [r for r in self.all_records() if predicate(r)]

    def get_audit_trail(self, document_id: str) -> list[AuditRecord]:
        """Records for one document, newest first."""
        return self.search(lambda r: r.document_id == document_id)

    def get_signer_audit_trail(self, email: str) -> list[AuditRecord]:
        """Records signed by one email address (case-insensitive), newest first."""
        wanted = email.strip().lower()
        return self.search(lambda r: r.signer_email.lower() == wanted)

    # ── Integrity verification ───────────────────────────────────────

    def verify_integrity(
        self,
        document_id: str,
        current_digest: str,
        verified_at: str | None = None,
        verified_by: str = "system",
    ) -> IntegrityCheck:
        """Compare a document's current digest with its latest audit record.

        The check is recorded on that record: a VerificationEvent is
        appended and its integrity status updated.

        Returns:
            IntegrityCheck with status "valid", "tampered", or "not_found"
            (no record for this document; nothing is written).
        """
        records = self._load()
        trail = self._newest_first([r for r in records if r.document_id == document_id])
        if not trail:
            return IntegrityCheck(
                status="not_found",
                message="No audit log found for this document",
                current_digest=current_digest,
            )

        latest = trail[0]
        is_valid = verify_digest(latest.signed_digest, current_digest)
        timestamp = verified_at or utc_now()
        event = VerificationEvent(
            verified_at=timestamp,
            status="valid" if is_valid else "invalid",
            digest_compared=current_digest,
            verified_by=verified_by,
        )
        updated = replace(
            latest,
            verifications=(*latest.verifications, event),
            integrity_status="valid" if is_valid else "tampered",
            updated_at=timestamp,
        )
        self._save([updated if r.record_id == latest.record_id else r for r in records])

        if not is_valid:
            _logger.warning(
                "Integrity check failed for document %s: expected %s, got %s",
                document_id,
                latest.signed_digest,
                current_digest,
            )
        return IntegrityCheck(
            status="valid" if is_valid else "tampered",
            message=(
                "Document signature is valid" if is_valid else "Document has been tampered with"
            ),
            current_digest=current_digest,
            original_digest=latest.original_digest,
            signed_digest=latest.signed_digest,
            original_created=latest.created_at,
            verified_at=timestamp,
        )
