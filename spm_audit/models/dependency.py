"""
Dependency data model for spm-audit.

A :class:`DependencyRecord` is one dependency discovered in a manifest:
where it comes from, which version is pinned, and how the project declared
it. Records are immutable and keyed by their canonical source URL.
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from dataclasses import dataclass
from typing import Any, Dict, Optional

from spm_audit.constants import (
    PACKAGE_RESOLVED,
    PACKAGE_SWIFT,
    XCODE_RESOLVED_SUBPATH,
)


class RequirementKind(Enum):
    """Versioning policy declared for a dependency.

    Values are the ``kind`` identifiers written by Xcode into
    ``project.pbxproj``.
    """

    EXACT = "exactVersion"
    UP_TO_NEXT_MAJOR = "upToNextMajorVersion"
    UP_TO_NEXT_MINOR = "upToNextMinorVersion"
    RANGE = "versionRange"
    BRANCH = "branch"
    REVISION = "revision"

    @classmethod
    def from_kind(cls, kind: str) -> Optional["RequirementKind"]:
        """Map a ``kind`` identifier to a member, or ``None`` if unknown."""
        if kind == "exact":
            return cls.EXACT
        try:
            return cls(kind)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: Dict[RequirementKind, str] = {
    RequirementKind.EXACT: "Exact",
    RequirementKind.UP_TO_NEXT_MAJOR: "^Major",
    RequirementKind.UP_TO_NEXT_MINOR: "^Minor",
    RequirementKind.RANGE: "Range",
    RequirementKind.BRANCH: "Branch",
    RequirementKind.REVISION: "Revision",
}

#: Label shown for dependencies without a declared requirement.
TRANSITIVE_LABEL = "Transitive"


def canonical_url(url: str) -> str:
    """Return *url* without surrounding whitespace, trailing ``/`` or ``.git``.

    Example:
        >>> canonical_url("https://github.com/apple/swift-nio.git")
        'https://github.com/apple/swift-nio'
    """
    cleaned = url.strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    return cleaned


def name_from_url(url: str) -> str:
    """Return the last path segment of a (canonical) URL."""
    return canonical_url(url).rsplit("/", 1)[-1]


def is_xcode_resolved_path(path: str) -> bool:
    """Return ``True`` for a ``Package.resolved`` inside an ``.xcodeproj``."""
    parts = PurePath(path).parts
    tail = (*XCODE_RESOLVED_SUBPATH, PACKAGE_RESOLVED)
    if len(parts) < len(tail) + 1 or tuple(parts[-len(tail):]) != tail:
        return False
    return parts[-len(tail) - 1].endswith(".xcodeproj")


def describe_source(path: str) -> str:
    """Return a short human label for the file a dependency came from.

    Examples:
        >>> describe_source("/Users/test/MyProject/Package.swift")
        'MyProject (Package.swift)'
        >>> describe_source(
        ...     "/Users/test/App/App.xcodeproj/project.xcworkspace/"
        ...     "xcshareddata/swiftpm/Package.resolved"
        ... )
        'App (Xcode Project)'
        >>> describe_source("/Users/test/SomePackage/Package.resolved")
        'Package.resolved'
    """
    pure = PurePath(path)

    if pure.name == PACKAGE_SWIFT:
        return f"{pure.parent.name} ({PACKAGE_SWIFT})"

    if is_xcode_resolved_path(path):
        project = pure.parents[len(XCODE_RESOLVED_SUBPATH)]
        return f"{project.stem} (Xcode Project)"

    return pure.name


@dataclass(frozen=True)
class DependencyRecord:
    """One dependency discovered in a manifest.

    Attributes:
        name: Last path segment of ``source_url``.
        source_url: Canonical URL; the de-duplication key.
        pinned_version: Version as declared or resolved (not normalized).
        origin_path: Absolute path of the manifest it was found in.
        requirement_kind: Declared policy, or ``None`` for transitive /
            unknown dependencies.
    """

    name: str
    source_url: str
    pinned_version: str
    origin_path: str
    requirement_kind: Optional[RequirementKind] = None

    def __post_init__(self) -> None:
        if not self.source_url:
            raise ValueError("source_url must not be empty")

    @property
    def is_direct(self) -> bool:
        return self.requirement_kind is not None

    @property
    def requirement_label(self) -> str:
        """Display name of the requirement kind."""
        if self.requirement_kind is None:
            return TRANSITIVE_LABEL
        return self.requirement_kind.display_name

    @property
    def source_name(self) -> str:
        """Human label for :attr:`origin_path`."""
        return describe_source(self.origin_path)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "url": self.source_url,
            "version": self.pinned_version,
            "file": self.origin_path,
            "source": self.source_name,
            "requirement": (
                self.requirement_kind.value if self.requirement_kind else None
            ),
        }
