"""Direct vs. transitive classification for Xcode lockfiles.

``Package.resolved`` lists every package SwiftPM resolved, including the
dependencies of dependencies. Only the packages the project declares itself
appear as ``XCRemoteSwiftPackageReference`` blocks in the sibling
``project.pbxproj``, together with their requirement kind::

    XCRemoteSwiftPackageReference "swift-algorithms" */ = {
        isa = XCRemoteSwiftPackageReference;
        repositoryURL = "https://github.com/apple/swift-algorithms";
        requirement = {
            kind = exactVersion;
            version = 1.0.0;
        };
    };

:class:`ResolvedLockCorrelator` reads that mapping and merges it into the
lockfile pins. A pin with no entry is transitive and is dropped unless the
caller asks for transitive dependencies.
"""

from __future__ import annotations

import re
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from spm_audit.constants import GITHUB_HOST, PBXPROJ_FILE, XCODE_RESOLVED_SUBPATH
from spm_audit.exceptions import FileOperationError
from spm_audit.models.dependency import (
    DependencyRecord,
    RequirementKind,
    canonical_url,
    is_xcode_resolved_path,
    name_from_url,
)
from spm_audit.utils.filesystem import safe_read_file
from spm_audit.utils.logger import get_logger

logger = get_logger("correlator")

__all__ = ["ResolvedLockCorrelator", "ResolvedPin"]

# [^}] keeps each match inside one reference block and spans newlines.
_PACKAGE_REFERENCE_RE = re.compile(
    r'XCRemoteSwiftPackageReference[^}]+repositoryURL = "([^"]+)";'
    r"[^}]+requirement = \{[^}]*kind = (\w+);",
    re.DOTALL,
)


@dataclass(frozen=True)
class ResolvedPin:
    """One entry of the ``pins`` array of a ``Package.resolved`` file."""

    identity: str
    location: str
    version: Optional[str] = None


class ResolvedLockCorrelator:
    """Merge declared requirement kinds into lockfile pins.

    Args:
        include_transitive: Keep pins that the project does not declare
            (their ``requirement_kind`` is ``None``).
    """

    def __init__(self, include_transitive: bool = False) -> None:
        self.include_transitive = include_transitive

    @staticmethod
    def project_file_for(resolved_path: Path) -> Path:
        """Return the ``project.pbxproj`` that belongs to *resolved_path*.

        ``App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved``
        maps to ``App.xcodeproj/project.pbxproj``. A lockfile outside an
        Xcode project maps to a ``project.pbxproj`` next to it, which
        normally does not exist.
        """
        if is_xcode_resolved_path(str(resolved_path)):
            return resolved_path.parents[len(XCODE_RESOLVED_SUBPATH)] / PBXPROJ_FILE
        return resolved_path.parent / PBXPROJ_FILE

    @staticmethod
    def extract_requirement_kinds(project_path: Path) -> Dict[str, RequirementKind]:
        """Map canonical repository URLs to their declared requirement kind.

        Unknown kinds are ignored. An unreadable project file yields an empty
        mapping, which makes every pin of the lockfile transitive.
        """
        try:
            content = safe_read_file(project_path)
        except FileOperationError as exc:
            logger.debug("No project declarations for %s: %s", project_path, exc)
            return {}

        kinds: Dict[str, RequirementKind] = {}
        for match in _PACKAGE_REFERENCE_RE.finditer(content):
            url, kind = match.group(1), match.group(2)
            requirement = RequirementKind.from_kind(kind)
            if requirement is None:
                logger.debug("Ignoring unknown requirement kind %r for %s", kind, url)
                continue
            kinds[canonical_url(url)] = requirement

        return kinds

    def correlate(
        self,
        pins: Iterable[ResolvedPin],
        kinds: Dict[str, RequirementKind],
        origin_path: str,
    ) -> Iterator[DependencyRecord]:
        """Yield records for the versioned, GitHub-hosted pins to keep.

        Lookup uses the canonical URL first, then the raw location.
        """
        for pin in pins:
            if not pin.version:
                continue

            if GITHUB_HOST not in pin.location:
                continue

            url = canonical_url(pin.location)
            requirement = kinds.get(url) or kinds.get(pin.location)

            if requirement is None and not self.include_transitive:
                continue

            yield DependencyRecord(
                name=name_from_url(url) or pin.identity,
                source_url=url,
                pinned_version=pin.version,
                origin_path=origin_path,
                requirement_kind=requirement,
            )

    def records_for(
        self,
        resolved_path: Path,
        pins: Iterable[ResolvedPin],
    ) -> Iterator[DependencyRecord]:
        """Correlate *pins* of *resolved_path* with its project declarations."""
        kinds = self.extract_requirement_kinds(self.project_file_for(resolved_path))
        return self.correlate(pins, kinds, str(resolved_path))
