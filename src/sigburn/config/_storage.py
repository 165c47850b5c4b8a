"""
Low-level config file I/O for sigburn.

Reads, validates, and writes ~/.sigburn/config.json. Unknown keys survive a
load-modify-save cycle; only known keys with valid values reach callers.
"""

from __future__ import annotations

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "ConfigDict",
    "load_config",
    "load_raw_config",
    "save_config",
]

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypedDict, cast

from .._fileio import atomic_write
from ..constants import PAGE_FORMATS

if TYPE_CHECKING:
    from collections.abc import Callable

_logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".sigburn"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ConfigDict(TypedDict, total=False):
    """Validated view of config.json."""

    page_format: str
    signer_name: str
    signer_email: str
    audit_log: str
    draw_bounding_box: bool


def _non_empty_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _known_page_format(value: object) -> bool:
    return isinstance(value, str) and value in PAGE_FORMATS


_FIELD_CHECKS: dict[str, Callable[[object], bool]] = {
    "page_format": _known_page_format,
    "signer_name": _non_empty_str,
    "signer_email": _non_empty_str,
    "audit_log": _non_empty_str,
    "draw_bounding_box": lambda value: isinstance(value, bool),
}


def load_raw_config() -> dict[str, object]:
    """Everything in config.json, unknown keys included.

    A missing, unreadable, or corrupt file reads as ``{}`` (the latter two
    with a warning).
    """
    try:
        text = CONFIG_FILE.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        _logger.warning("Cannot read config file: %s", e)
        return {}

    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        _logger.warning("Config file corrupted, ignoring: %s", e)
        return {}
    if not isinstance(data, dict):
        _logger.warning("Config file is not a JSON object, ignoring")
        return {}
    return cast("dict[str, object]", data)


def _validate_config_dict(data: dict[str, object]) -> ConfigDict:
    result: dict[str, object] = {}
    for key, is_valid in _FIELD_CHECKS.items():
        if key not in data:
            continue
        value = data[key]
        if is_valid(value):
            result[key] = value
        else:
            _logger.warning("Config %s=%r is invalid, ignoring", key, value)
    return cast("ConfigDict", result)


def load_config() -> ConfigDict:
    """Known keys of config.json whose values pass validation."""
    return _validate_config_dict(load_raw_config())


def _ensure_private_dir() -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True, mode=0o700)
    # mkdir's mode is ignored for a directory that already exists
    if os.name != "nt":
        try:
            CONFIG_DIR.chmod(0o700)
        except OSError:
            _logger.warning("Failed to set restrictive permissions on %s", CONFIG_DIR)


def save_config(config: dict[str, object]) -> None:
    """Write config.json atomically, readable by the owner only (0600)."""
    _ensure_private_dir()
    content = json.dumps(config, indent=2, ensure_ascii=False) + "\n"
    atomic_write(CONFIG_FILE, content.encode("utf-8"), mode=0o600)
