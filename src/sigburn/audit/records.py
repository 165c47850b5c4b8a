"""
Audit record types.

An AuditRecord captures one signing event: which document, the digests
before and after, where the image landed in every coordinate space, who
signed, and every later integrity check. Records are plain data with a
JSON-friendly dict form; persistence lives in store.py.
"""

from __future__ import annotations

__all__ = [
    "AuditRecord",
    "IntegrityCheck",
    "VerificationEvent",
    "utc_now",
]

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Literal

from ..errors import AuditError

if TYPE_CHECKING:
    from ..core.integrity import IntegrityStatus
    from ..core.signing import AuditFragment

VerificationOutcome = Literal["valid", "invalid"]
CheckStatus = Literal["valid", "tampered", "not_found"]

_UNKNOWN_SIGNER = "unknown"


def utc_now() -> str:
    """Current UTC time as an ISO 8601 string (the audit layer's clock)."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class VerificationEvent:
    """One integrity check against a stored record."""

    verified_at: str
    status: VerificationOutcome
    digest_compared: str
    verified_by: str = "system"

    def to_dict(self) -> dict[str, str]:
        return {
            "verified_at": self.verified_at,
            "status": self.status,
            "digest_compared": self.digest_compared,
            "verified_by": self.verified_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VerificationEvent:
        return cls(
            verified_at=str(data["verified_at"]),
            status="valid" if data["status"] == "valid" else "invalid",
            digest_compared=str(data["digest_compared"]),
            verified_by=str(data.get("verified_by", "system")),
        )


@dataclass(frozen=True)
class AuditRecord:
    """A persisted signing event.

    Attributes:
        document_id: Caller-chosen document identifier (may be None).
        original_digest: Digest of the document before signing.
        signed_digest: Digest of the signed document.
        page_index: Page the signature was placed on.
        signature_count: Placements applied in this signing event.
        signer_name: Signer display name ("unknown" if not given).
        signer_email: Signer email ("unknown" if not given).
        normalized_rect: Placement as page fractions.
        document_rect: Placement in PDF points.
        viewport: Reference viewport size at placement time.
        image: Original pixel size, fitted size, and encoding of the image.
        created_at: ISO 8601 creation time.
        updated_at: ISO 8601 time of the last status change.
        integrity_status: Result of the latest check ("pending" never
            happens for freshly signed records, which start "valid").
        verifications: Append-only history of integrity checks.
        metadata: Free-form caller fields (reason, location, ...).
        record_id: Unique record identifier.
    """

    document_id: str | None
    original_digest: str
    signed_digest: str
    created_at: str
    page_index: int = 0
    signature_count: int = 1
    signer_name: str = _UNKNOWN_SIGNER
    signer_email: str = _UNKNOWN_SIGNER
    normalized_rect: dict[str, Any] | None = None
    document_rect: dict[str, Any] | None = None
    viewport: dict[str, Any] | None = None
    image: dict[str, Any] | None = None
    updated_at: str | None = None
    integrity_status: IntegrityStatus = "valid"
    verifications: tuple[VerificationEvent, ...] = ()
    metadata: dict[str, str] = field(default_factory=dict)
    record_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def reason(self) -> str | None:
        return self.metadata.get("reason")

    @classmethod
    def from_fragment(
        cls,
        fragment: AuditFragment,
        *,
        document_id: str | None,
        created_at: str | None = None,
        original_digest: str | None = None,
        signed_digest: str | None = None,
        signature_count: int = 1,
    ) -> AuditRecord:
        """Build a record from an overlay step's audit fragment.

        Signer identity is read from the fragment metadata keys
        ``signer_name`` and ``signer_email``; every other metadata key is
        kept in ``metadata``. The digests default to the fragment's own;
        pass the run's first/last digests when recording a multi-placement
        run as one event.
        """
        meta = dict(fragment.metadata)
        signer_name = meta.pop("signer_name", None) or _UNKNOWN_SIGNER
        signer_email = meta.pop("signer_email", None) or _UNKNOWN_SIGNER
        timestamp = created_at or utc_now()
        fit = fragment.applied_fit
        return cls(
            document_id=document_id,
            original_digest=original_digest or fragment.before_digest,
            signed_digest=signed_digest or fragment.after_digest,
            created_at=timestamp,
            updated_at=timestamp,
            page_index=fragment.page_index,
            signature_count=signature_count,
            signer_name=signer_name,
            signer_email=signer_email,
            normalized_rect=fragment.normalized_rect.to_dict(),
            document_rect=fragment.document_rect.to_dict(),
            viewport={"width": fragment.viewport.width, "height": fragment.viewport.height},
            image={
                "original": {"width": fragment.image_width, "height": fragment.image_height},
                "fitted": {"width": fit.width, "height": fit.height},
                "encoding": fragment.image_encoding,
            },
            metadata=meta,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "document_id": self.document_id,
            "original_digest": self.original_digest,
            "signed_digest": self.signed_digest,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "page_index": self.page_index,
            "signature_count": self.signature_count,
            "signer": {"name": self.signer_name, "email": self.signer_email},
            "coordinates": {
                "normalized": self.normalized_rect,
                "document": self.document_rect,
                "viewport": self.viewport,
            },
            "image": self.image,
            "integrity_status": self.integrity_status,
            "verifications": [v.to_dict() for v in self.verifications],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditRecord:
        """Rebuild a record from its dict form.

        Raises:
            AuditError: If required fields are missing or malformed.
        """
        try:
            signer = data.get("signer") or {}
            coords = data.get("coordinates") or {}
            status = data.get("integrity_status", "pending")
            if status not in ("valid", "tampered", "pending"):
                raise ValueError(f"unknown integrity status {status!r}")
            return cls(
                record_id=str(data["record_id"]),
                document_id=data.get("document_id"),
                original_digest=str(data["original_digest"]),
                signed_digest=str(data["signed_digest"]),
                created_at=str(data["created_at"]),
                updated_at=data.get("updated_at"),
                page_index=int(data.get("page_index", 0)),
                signature_count=int(data.get("signature_count", 1)),
                signer_name=str(signer.get("name", _UNKNOWN_SIGNER)),
                signer_email=str(signer.get("email", _UNKNOWN_SIGNER)),
                normalized_rect=coords.get("normalized"),
                document_rect=coords.get("document"),
                viewport=coords.get("viewport"),
                image=data.get("image"),
                integrity_status=status,
                verifications=tuple(
                    VerificationEvent.from_dict(v) for v in data.get("verifications", [])
                ),
                metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise AuditError(f"Malformed audit record: {e}") from e


@dataclass(frozen=True)
class IntegrityCheck:
    """Result of checking a document's current digest against the audit log."""

    status: CheckStatus
    message: str
    current_digest: str
    original_digest: str | None = None
    signed_digest: str | None = None
    original_created: str | None = None
    verified_at: str | None = None

    @property
    def found(self) -> bool:
        return self.status != "not_found"
