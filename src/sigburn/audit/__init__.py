"""Audit records and the file-backed audit store."""

from .records import AuditRecord, IntegrityCheck, VerificationEvent, utc_now
from .store import JsonAuditStore

__all__ = [
    "AuditRecord",
    "IntegrityCheck",
    "JsonAuditStore",
    "VerificationEvent",
    "utc_now",
]
