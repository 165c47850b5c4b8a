"""Show or change the saved signer identity and signing preferences."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from ...config import (
    CONFIG_FILE,
    get_audit_log_path,
    get_draw_bounding_box,
    get_page_format,
    get_signer_info,
    reset_all,
    save_preferences,
    save_signer_info,
)
from ...errors import ConfigError

if TYPE_CHECKING:
    import argparse

_NOT_SET = "(not set)"


def _show() -> None:
    signer = get_signer_info()
    name = signer["name"] or _NOT_SET
    if signer["email"]:
        name = f"{name} <{signer['email']}>"
    audit_log = get_audit_log_path()

    print(f"  Config file:  {CONFIG_FILE}")
    print(f"  Signer:       {name}")
    print(f"  Page format:  {get_page_format()}")
    print(f"  Audit log:    {audit_log or _NOT_SET}")
    print(f"  Debug box:    {'on' if get_draw_bounding_box() else 'off'}")


def _resolve_signer(name: str | None, email: str | None) -> tuple[str, str | None]:
    """Fill whichever of name and email was not given from the current identity."""
    current = get_signer_info()
    name = name if name is not None else current["name"]
    if not name or not name.strip():
        raise ConfigError("A signer name is required. Pass a non-empty --signer-name.")
    return name, email if email is not None else current["email"]


def cmd_config(args: argparse.Namespace) -> None:
    """Apply the given settings, or print the effective configuration."""
    preferences = (args.page_format, args.audit_log, args.box)
    signer_given = args.signer_name is not None or args.signer_email is not None
    has_changes = signer_given or any(value is not None for value in preferences)

    if args.reset:
        if has_changes:
            print("Error: --reset cannot be combined with other options", file=sys.stderr)
            sys.exit(1)
        try:
            reset_all()
        except OSError as e:
            print(f"Error: cannot write {CONFIG_FILE}: {e}", file=sys.stderr)
            sys.exit(1)
        print("All configuration cleared.")
        return

    if not has_changes:
        _show()
        return

    # Signer problems surface before anything is written.
    try:
        signer = _resolve_signer(args.signer_name, args.signer_email) if signer_given else None
        if any(value is not None for value in preferences):
            save_preferences(
                page_format=args.page_format,
                audit_log=args.audit_log,
                draw_bounding_box=args.box,
            )
        if signer is not None:
            save_signer_info(*signer)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: cannot write {CONFIG_FILE}: {e}", file=sys.stderr)
        sys.exit(1)

    print("Configuration saved.")
    _show()
