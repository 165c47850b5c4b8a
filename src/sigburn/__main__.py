"""
Entry point for `python -m sigburn`.

Usage:
    python -m sigburn sign document.pdf signature.png --rect 100,600,200,80 --viewport 800x1131
    python -m sigburn verify document_signed.pdf --digest <sha256>
    python -m sigburn hash document_signed.pdf
"""

from .ui.cli import main

main()
