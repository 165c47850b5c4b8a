"""Atomic file replacement shared by the config, audit, and output writers."""

from __future__ import annotations

__all__ = ["atomic_write"]

import logging
import os
import tempfile
from pathlib import Path

_logger = logging.getLogger(__name__)


def atomic_write(path: Path, data: bytes, *, mode: int | None = None) -> None:
    """Replace *path* with *data* via a synced temp file in the same directory.

    Readers see either the old file or the complete new one, never a
    partial write.

    Args:
        path: Target file. Its directory must exist.
        data: Full new content.
        mode: Permission bits applied to the temp file before the rename
            (POSIX only). A failed chmod is logged, not raised.

    Raises:
        OSError: If the temp file cannot be created, written, or renamed.
    """
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None and os.name != "nt":
            try:
                tmp.chmod(mode)
            except OSError:
                _logger.warning("Failed to set permissions %o on %s", mode, tmp)
        tmp.replace(path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
