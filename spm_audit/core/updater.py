"""Rewriting of exact version pins for spm-audit.

Only ``Package.swift`` declarations pinned with ``exact:`` can be updated::

    .package(url: "https://github.com/apple/swift-algorithms", exact: "1.0.0")

The pin that follows the record's URL is replaced and nothing else in the
file changes. Xcode projects keep their requirements in ``project.pbxproj``,
which is not edited, and lockfiles are regenerated by SwiftPM, so records
coming from a ``Package.resolved`` are refused.

Typical usage::

    updater = ManifestUpdater()
    updater.update_file(record, "1.2.0", backup=True)
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from spm_audit.constants import PACKAGE_RESOLVED, PACKAGE_SWIFT
from spm_audit.exceptions import UpdateError
from spm_audit.models.dependency import DependencyRecord, is_xcode_resolved_path
from spm_audit.utils.filesystem import safe_read_file, safe_write_file
from spm_audit.utils.logger import get_logger
from spm_audit.utils.version_utils import is_valid_version

logger = get_logger("updater")

__all__ = ["ManifestUpdater", "rewrite_exact_pin"]

XCODE_UNSUPPORTED_MESSAGE = "Xcode project updates are not currently supported"
LOCKFILE_UNSUPPORTED_MESSAGE = (
    "Package.resolved is generated by SwiftPM; update Package.swift and "
    "re-resolve instead"
)


def _declaration_pattern(url: str) -> "re.Pattern[str]":
    # The manifest may spell the URL with a trailing ".git" or "/".
    return re.compile(
        r'(url:\s*"' + re.escape(url) + r'(?:\.git)?/?",\s*exact:\s*")([^"]+)(")'
    )


def rewrite_exact_pin(content: str, url: str, new_version: str) -> Tuple[str, int]:
    """Replace the ``exact:`` version declared for *url* in *content*.

    Returns:
        The new content and the number of declarations rewritten.
    """
    return _declaration_pattern(url).subn(
        lambda match: match.group(1) + new_version + match.group(3),
        content,
    )


class ManifestUpdater:
    """Apply new versions to the manifests dependencies were found in."""

    @staticmethod
    def unsupported_reason(record: DependencyRecord) -> Optional[str]:
        """Return why *record* cannot be updated, or ``None`` if it can."""
        name = Path(record.origin_path).name

        if is_xcode_resolved_path(record.origin_path):
            return XCODE_UNSUPPORTED_MESSAGE
        if name == PACKAGE_RESOLVED:
            return LOCKFILE_UNSUPPORTED_MESSAGE
        if name != PACKAGE_SWIFT:
            return f"Unsupported manifest: {name}"
        return None

    def _validate(self, record: DependencyRecord, new_version: str) -> None:
        if not is_valid_version(new_version):
            raise UpdateError(
                f"Invalid version format: {new_version!r}",
                package_name=record.name,
                file_path=record.origin_path,
            )

        reason = self.unsupported_reason(record)
        if reason is not None:
            raise UpdateError(
                reason,
                package_name=record.name,
                file_path=record.origin_path,
            )

    def update_file(
        self,
        record: DependencyRecord,
        new_version: str,
        *,
        backup: bool = False,
    ) -> Optional[Path]:
        """Pin *record* to *new_version* in the file it was declared in.

        Returns:
            Path of the backup file when *backup* is set, else ``None``.

        Raises:
            UpdateError: The version is malformed, the manifest type cannot
                be edited, or the declaration is not in the file.
            FileOperationError: The file cannot be read or written.
        """
        backups = self.apply([(record, new_version)], backup=backup)
        return backups[0] if backups else None

    def apply(
        self,
        updates: Iterable[Tuple[DependencyRecord, str]],
        *,
        backup: bool = False,
    ) -> List[Path]:
        """Apply several updates, writing each affected file once.

        Every update is validated before any file is touched.

        Returns:
            Backup paths created, in file order.
        """
        by_file: Dict[str, List[Tuple[DependencyRecord, str]]] = {}
        for record, new_version in updates:
            self._validate(record, new_version)
            by_file.setdefault(record.origin_path, []).append((record, new_version))

        planned: List[Tuple[str, str]] = []
        for path, file_updates in by_file.items():
            content = safe_read_file(path)
            for record, new_version in file_updates:
                content, count = rewrite_exact_pin(
                    content, record.source_url, new_version
                )
                if count == 0:
                    raise UpdateError(
                        f"No exact declaration for {record.source_url} in {path}",
                        package_name=record.name,
                        file_path=path,
                    )
                logger.debug(
                    "%s: %s -> %s in %s",
                    record.name,
                    record.pinned_version,
                    new_version,
                    path,
                )
            planned.append((path, content))

        backups: List[Path] = []
        for path, content in planned:
            created = safe_write_file(path, content, create_backup=backup)
            if created is not None:
                logger.info("Created backup: %s", created)
                backups.append(created)

        return backups
