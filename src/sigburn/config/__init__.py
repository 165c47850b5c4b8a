"""
Configuration management.

Import from this package directly rather than from the submodules.
"""

from __future__ import annotations

from .config import (
    CONFIG_FILE,
    get_audit_log_path,
    get_draw_bounding_box,
    get_page_format,
    get_signer_info,
    reset_all,
    save_preferences,
    save_signer_info,
)

__all__ = [
    "CONFIG_FILE",
    "get_audit_log_path",
    "get_draw_bounding_box",
    "get_page_format",
    "get_signer_info",
    "reset_all",
    "save_preferences",
    "save_signer_info",
]
