"""sigburn error types."""

from __future__ import annotations

from typing import Any

__all__ = [
    "AuditError",
    "ConfigError",
    "InvalidGeometry",
    "MalformedDocument",
    "PageIndexOutOfRange",
    "SigburnError",
    "UnsupportedImageFormat",
]


class SigburnError(Exception):
    """Base error for sigburn operations."""


class InvalidGeometry(SigburnError, ValueError):
    """Non-positive or non-finite dimensions, or a degenerate placement."""


class MalformedDocument(SigburnError):
    """PDF buffer cannot be parsed or updated."""


class PageIndexOutOfRange(SigburnError, IndexError):
    """Requested page does not exist in the document.

    Args:
        page_index: The 0-based page index that was requested.
        page_count: Number of pages the document actually has.
    """

    def __init__(self, page_index: int, page_count: int) -> None:
        super().__init__(
            f"Page index {page_index} out of range "
            f"(document has {page_count} page(s), 0-based)."
        )
        self.page_index = page_index
        self.page_count = page_count

    def __reduce__(
        self,
    ) -> tuple[type[PageIndexOutOfRange], tuple[int, int], dict[str, Any]]:
        """Preserve page_index/page_count across pickle/unpickle."""
        return (type(self), (self.page_index, self.page_count), {})


class UnsupportedImageFormat(SigburnError):
    """Raster payload could not be decoded by any supported decoder."""


class ConfigError(SigburnError):
    """Configuration validation error."""


class AuditError(SigburnError):
    """Audit store cannot be read or written."""
