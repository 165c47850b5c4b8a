"""
Content digests for tamper detection.

A digest covers every byte of a document buffer, including metadata the
serializer writes. It proves integrity only: no key is involved, so it says
nothing about who produced the document.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Literal

__all__ = [
    "DIGEST_HEX_LENGTH",
    "IntegrityStatus",
    "compute_digest",
    "integrity_status",
    "verify_digest",
]

IntegrityStatus = Literal["valid", "tampered", "pending"]

DIGEST_HEX_LENGTH = 64  # SHA-256


def compute_digest(data: bytes) -> str:
    """Return the lowercase hex SHA-256 digest of *data*."""
    return hashlib.sha256(data).hexdigest()


def verify_digest(expected: str, actual: str) -> bool:
    """Exact digest equality; any difference means the document was altered.

    Both sides must already be lowercase hex as produced by compute_digest.
    User input is normalized where it enters, not here.
    """
    return hmac.compare_digest(expected, actual)


def integrity_status(expected: str, actual: str) -> IntegrityStatus:
    """Map a digest comparison onto an audit integrity status."""
    return "valid" if verify_digest(expected, actual) else "tampered"
