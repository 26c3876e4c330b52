"""Filesystem helpers for crash-safe writes.

Both helpers stage the content in a temporary file next to the target and
only make it visible once it has been fully written and flushed to disk.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

import structlog

logger = structlog.get_logger()


def _default_mode() -> int:
    """Mode a plain `open()` would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_temp(directory: Path, content: str, mode: int) -> Path:
    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        # mkstemp always creates 0600.
        os.fchmod(fd, mode)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return tmp_path


def atomic_replace(path: Path, content: str) -> None:
    """Write `content` to `path`, replacing any existing file atomically.

    Readers observe either the previous file or the new one, never a partial
    write. An existing file keeps its permission bits; a new one gets the
    umask default.

    Raises:
        OSError: If the temporary file cannot be written or renamed.
    """

    path = Path(path)
    mode = stat.S_IMODE(path.stat().st_mode) if path.is_file() else _default_mode()
    tmp_path = _write_temp(path.parent, content, mode)
    try:
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug("atomic_replace_completed", path=str(path), size=len(content))


def write_exclusive(path: Path, content: str) -> None:
    """Create `path` with `content`, failing if it already exists.

    The file is hard-linked into place from a fully written temporary file,
    so the create is both exclusive and all-or-nothing. The new file gets
    the umask default permissions.

    Raises:
        FileExistsError: If `path` already exists.
        OSError: For any other filesystem failure.
    """

    path = Path(path)
    tmp_path = _write_temp(path.parent, content, _default_mode())
    try:
        os.link(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)
    logger.debug("exclusive_create_completed", path=str(path), size=len(content))
