"""
Configuration management for sigburn.

Stores signer identity and signing preferences in ~/.sigburn/config.json.
Environment variables take priority over the file. Only the UI layer reads
configuration; the core receives every value as an explicit argument.
"""

from __future__ import annotations

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "get_audit_log_path",
    "get_draw_bounding_box",
    "get_page_format",
    "get_signer_info",
    "reset_all",
    "save_preferences",
    "save_signer_info",
]

import logging
import os
from pathlib import Path

from ..constants import (
    DEFAULT_PAGE_FORMAT,
    ENV_AUDIT_LOG,
    ENV_DEBUG_BOX,
    ENV_PAGE_FORMAT,
    ENV_SIGNER_EMAIL,
    ENV_SIGNER_NAME,
    PAGE_FORMATS,
)
from ..errors import ConfigError
from ._storage import CONFIG_DIR, CONFIG_FILE, load_config, load_raw_config, save_config

_logger = logging.getLogger(__name__)

_TRUTHY = frozenset(("1", "true", "yes", "on"))
_FALSY = frozenset(("0", "false", "no", "off"))


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def _canonical_page_format(value: str) -> str | None:
    """Match a page format name case-insensitively ("a4" -> "A4")."""
    for name in PAGE_FORMATS:
        if name.lower() == value.lower():
            return name
    return None


# ── Page format ──────────────────────────────────────────────────────


def get_page_format() -> str:
    """
    Resolve the default page format for viewport transforms.

    Priority: env var > config file > "A4". An unknown env value is
    ignored with a warning.
    """
    env_value = _env(ENV_PAGE_FORMAT)
    if env_value:
        name = _canonical_page_format(env_value)
        if name is not None:
            return name
        _logger.warning("Invalid %s value %r, ignoring", ENV_PAGE_FORMAT, env_value)

    return load_config().get("page_format", DEFAULT_PAGE_FORMAT)


def get_draw_bounding_box() -> bool:
    """Whether placement boxes should be outlined in red (debug aid)."""
    env_value = _env(ENV_DEBUG_BOX).lower()
    if env_value:
        if env_value in _TRUTHY:
            return True
        if env_value in _FALSY:
            return False
        _logger.warning("Invalid %s value %r, ignoring", ENV_DEBUG_BOX, env_value)
    return load_config().get("draw_bounding_box", False)


def get_audit_log_path() -> Path | None:
    """
    Resolve the audit log location.

    Returns:
        Path from env var or config file, or None if auditing is not set up.
    """
    value = _env(ENV_AUDIT_LOG) or load_config().get("audit_log")
    return Path(value).expanduser() if value else None


def save_preferences(
    page_format: str | None = None,
    audit_log: str | None = None,
    draw_bounding_box: bool | None = None,
) -> None:
    """Update signing preferences; arguments left as None are unchanged.

    Raises:
        ConfigError: If *page_format* is not a known format.
    """
    config = load_raw_config()
    if page_format is not None:
        name = _canonical_page_format(page_format)
        if name is None:
            valid = ", ".join(sorted(PAGE_FORMATS))
            raise ConfigError(f"Unknown page format {page_format!r}. Valid: {valid}")
        config["page_format"] = name
    if audit_log is not None:
        config["audit_log"] = audit_log
    if draw_bounding_box is not None:
        config["draw_bounding_box"] = draw_bounding_box
    save_config(config)


# ── Signer identity ─────────────────────────────────────────────────


def get_signer_info() -> dict[str, str | None]:
    """
    Get the signer identity, env vars first.

    Returns:
        dict with keys: name, email (either may be None).
    """
    config = load_config()
    return {
        "name": _env(ENV_SIGNER_NAME) or config.get("signer_name"),
        "email": _env(ENV_SIGNER_EMAIL) or config.get("signer_email"),
    }


def save_signer_info(name: str, email: str | None = None) -> None:
    """Save signer identity to config file.

    Clears a previously saved email when none is given, so stale data from
    a prior identity doesn't persist.
    """
    if not name.strip():
        raise ConfigError("Signer name must not be empty.")
    config = load_raw_config()
    config["signer_name"] = name
    if email:
        config["signer_email"] = email
    else:
        config.pop("signer_email", None)
    save_config(config)


def reset_all() -> None:
    """Clear all config: signer identity and preferences."""
    save_config({})
