"""
File access for Swift manifests.

Reading, rewriting, backing up and discovering ``Package.swift`` /
``Package.resolved`` files all go through here so that every failure
surfaces as :class:`~spm_audit.exceptions.FileOperationError` with the
path and operation attached.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Iterator, Optional, Union

from spm_audit.utils.logger import get_logger
from spm_audit.exceptions import FileOperationError
from spm_audit.constants import (
    BUILD_DIR_MARKER,
    MAX_FILE_SIZE,
    PACKAGE_RESOLVED,
    PACKAGE_SWIFT,
)

logger = get_logger("filesystem")

PathLike = Union[str, Path]

MANIFEST_NAMES = frozenset({PACKAGE_SWIFT, PACKAGE_RESOLVED})


def _fail(
    message: str,
    path: PathLike,
    operation: str,
    cause: Optional[Exception] = None,
) -> FileOperationError:
    return FileOperationError(
        message,
        file_path=str(path),
        operation=operation,
        original_error=cause,
    )


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Return the text of a manifest.

    Args:
        file_path: File to read.
        max_size: Refuse files larger than this many bytes; ``None`` reads
            anything.
        encoding: Text encoding of the file.

    Raises:
        FileOperationError: The path is missing, is not a regular file, is
            over ``max_size``, or cannot be decoded.
    """
    path = Path(file_path)
    if not path.exists():
        raise _fail(f"File not found: {path}", path, "read")
    if not path.is_file():
        raise _fail(f"Not a file: {path}", path, "read")

    path = path.resolve()
    size = path.stat().st_size
    if max_size is not None and size > max_size:
        raise _fail(f"File too large: {size} bytes (max {max_size})", path, "read")

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise _fail(f"Failed to read file: {exc}", path, "read", exc) from exc


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def create_timestamped_backup(file_path: PathLike) -> Path:
    """Copy ``file_path`` to ``<name>.<YYYYmmdd_HHMMSS_micro>.backup`` beside it."""
    path = Path(file_path)
    if not path.is_file():
        raise _fail(f"Cannot backup invalid file: {path}", path, "backup")

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = path.with_name(f"{path.name}.{stamp}.backup")

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise _fail(f"Failed to create backup: {exc}", path, "backup", exc) from exc

    logger.debug("Backed up %s to %s", path, backup_path)
    return backup_path


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    create_backup: bool = False,
) -> Optional[Path]:
    """Replace the contents of a manifest atomically.

    The new text is written to a temporary file in the same directory and
    moved over the original, so a crash never leaves a half-written
    manifest. Returns the backup path when ``create_backup`` is set and
    the file already existed.
    """
    target = Path(file_path)
    backup = create_timestamped_backup(target) if create_backup and target.is_file() else None

    try:
        fd, temp_name = tempfile.mkstemp(
            dir=str(target.parent),
            prefix=f".{target.name}.",
            suffix=".tmp",
        )
    except OSError as exc:
        raise _fail(f"Atomic write failed: {exc}", target, "write", exc) from exc
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        temp_path.replace(target)
    except OSError as exc:
        _discard(temp_path)
        raise _fail(f"Atomic write failed: {exc}", target, "write", exc) from exc

    return backup


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", temp_path, exc)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def is_build_path(path: PathLike) -> bool:
    """Return ``True`` when ``path`` lies inside a SwiftPM ``.build`` directory."""
    return BUILD_DIR_MARKER in Path(path).parts


def find_manifest_files(directory: PathLike = ".") -> Iterator[Path]:
    """Yield every ``Package.swift`` and ``Package.resolved`` under ``directory``.

    The walk is top-down with directories and files in sorted order, so
    results are stable between runs. ``.build`` directories are pruned.
    Subdirectories that cannot be listed are skipped with a debug message.

    Raises:
        FileOperationError: ``directory`` is not an existing directory.
    """
    root = Path(directory).resolve()
    if not root.is_dir():
        raise _fail(f"Not a directory: {directory}", directory, "scan")

    def _unlistable(exc: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_unlistable):
        dirnames[:] = sorted(name for name in dirnames if not is_build_path(name))
        for filename in sorted(filenames):
            if filename in MANIFEST_NAMES:
                yield Path(dirpath) / filename
