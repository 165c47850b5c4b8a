"""
Command-line interface for sigburn.

Argument parsing, dispatch, and logging setup.
Command handlers live in ``sign``, ``transform``, ``verify``, and ``config``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ...constants import __version__
from ...core.image import SUPPORTED_ENCODINGS
from .config import cmd_config
from .sign import cmd_sign
from .transform import cmd_transform
from .verify import cmd_audit, cmd_hash, cmd_verify

__all__ = ["build_parser", "main"]


def _page_index(value: str) -> int:
    try:
        index = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid page index {value!r}") from None
    if index < 0:
        raise argparse.ArgumentTypeError("page index is 0-based and must be >= 0")
    return index


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigburn",
        description="Burn handwritten signature images into PDF pages.",
        epilog=(
            "Environment variables:\n"
            "  SIGBURN_PAGE_FORMAT   Default page format for transforms (A4, Letter)\n"
            "  SIGBURN_SIGNER_NAME   Signer name recorded in audit entries\n"
            "  SIGBURN_SIGNER_EMAIL  Signer email recorded in audit entries\n"
            "  SIGBURN_AUDIT_LOG     Audit log file\n"
            "  SIGBURN_DEBUG_BOX     Outline placement boxes in red (1/true/yes)\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"sigburn {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # sign
    p_sign = sub.add_parser("sign", help="Burn a signature image into a PDF page")
    p_sign.add_argument("pdf", help="PDF file to sign")
    p_sign.add_argument("image", help="Signature image (PNG or JPEG)")
    p_sign.add_argument(
        "--rect",
        action="append",
        required=True,
        help="Placement in viewport pixels as X,Y,W,H (origin top-left); repeatable",
    )
    p_sign.add_argument(
        "--viewport",
        required=True,
        help="Viewport size in pixels when the placement was made, as WxH",
    )
    p_sign.add_argument(
        "--page",
        type=_page_index,
        default=0,
        help="0-based page index (default: 0)",
    )
    p_sign.add_argument(
        "--encoding",
        choices=list(SUPPORTED_ENCODINGS),
        default=None,
        help="Declared image encoding (default: PNG, falling back to JPEG)",
    )
    p_sign.add_argument("-o", "--output", help="Output file (default: <stem>_signed.pdf)")
    p_sign.add_argument("--document-id", default=None, help="Document id for the audit log")
    p_sign.add_argument("--signer-name", default=None, help="Signer name (overrides config)")
    p_sign.add_argument("--signer-email", default=None, help="Signer email (overrides config)")
    p_sign.add_argument("--reason", default=None, help="Signing reason for the audit log")
    p_sign.add_argument("--audit-log", default=None, help="Record the signing in this audit log")
    p_sign.add_argument(
        "--box",
        action="store_true",
        default=False,
        help="Outline the placement box in red",
    )

    # transform
    p_tr = sub.add_parser("transform", help="Convert a placement between viewport and PDF points")
    p_tr.add_argument("--rect", required=True, help="Rectangle as X,Y,W,H")
    p_tr.add_argument("--viewport", required=True, help="Viewport size as WxH")
    page_src = p_tr.add_mutually_exclusive_group()
    page_src.add_argument("--page-size", help="Page size in points as WxH")
    page_src.add_argument("--format", choices=["A4", "Letter"], help="Named page format")
    page_src.add_argument("--pdf", help="Read the page size from this PDF")
    p_tr.add_argument("--page", type=_page_index, default=0, help="Page index for --pdf")
    p_tr.add_argument(
        "--reverse",
        action="store_true",
        default=False,
        help="Treat --rect as PDF points and map it back to viewport pixels",
    )
    p_tr.add_argument("--json", action="store_true", default=False, help="Print JSON")

    # hash
    p_hash = sub.add_parser("hash", help="Print the SHA-256 digest of a file")
    p_hash.add_argument("file", help="File to hash")

    # verify
    p_verify = sub.add_parser("verify", help="Check a signed PDF for tampering")
    p_verify.add_argument("pdf", help="Signed PDF file")
    target = p_verify.add_mutually_exclusive_group(required=True)
    target.add_argument("--digest", help="Expected SHA-256 of the signed PDF")
    target.add_argument("--document-id", help="Compare with this document's audit record")
    p_verify.add_argument("--audit-log", default=None, help="Audit log file")

    # audit
    p_audit = sub.add_parser("audit", help="Show audit records")
    who = p_audit.add_mutually_exclusive_group(required=True)
    who.add_argument("--document-id", help="Records for one document")
    who.add_argument("--signer-email", help="Records for one signer")
    p_audit.add_argument("--audit-log", default=None, help="Audit log file")

    # config
    p_cfg = sub.add_parser("config", help="Show or change saved signer and preferences")
    p_cfg.add_argument("--signer-name", default=None, help="Save the signer name")
    p_cfg.add_argument("--signer-email", default=None, help="Save the signer email")
    p_cfg.add_argument("--page-format", default=None, help="Default page format (A4, Letter)")
    p_cfg.add_argument("--audit-log", default=None, help="Default audit log file")
    box = p_cfg.add_mutually_exclusive_group()
    box.add_argument(
        "--box",
        dest="box",
        action="store_const",
        const=True,
        default=None,
        help="Always outline placement boxes in red",
    )
    box.add_argument(
        "--no-box",
        dest="box",
        action="store_const",
        const=False,
        help="Stop outlining placement boxes",
    )
    p_cfg.add_argument(
        "--reset",
        action="store_true",
        default=False,
        help="Clear all saved configuration",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "sign":
        cmd_sign(args)
    elif args.command == "transform":
        cmd_transform(args)
    elif args.command == "hash":
        cmd_hash(args)
    elif args.command == "verify":
        cmd_verify(args)
    elif args.command == "audit":
        cmd_audit(args)
    elif args.command == "config":
        cmd_config(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
