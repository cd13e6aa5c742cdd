"""
Release data models for spm-audit.

This module defines the upstream release entry returned by the GitHub
releases API and the per-dependency audit outcome.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from spm_audit.models.dependency import DependencyRecord


@dataclass(frozen=True)
class ReleaseInfo:
    """One published release of a repository.

    Attributes:
        tag: Tag name as returned by GitHub, e.g. ``"v1.2.0"``.
        is_prerelease: Whether GitHub flags the release as a prerelease.
    """

    tag: str
    is_prerelease: bool = False

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "ReleaseInfo":
        """Build a release from one element of the GitHub JSON array.

        Raises:
            KeyError: ``tag_name`` is missing.
            TypeError: ``tag_name`` is not a string.
        """
        tag = data["tag_name"]
        if not isinstance(tag, str):
            raise TypeError(f"tag_name must be a string, got {type(tag).__name__}")
        return cls(tag=tag, is_prerelease=bool(data.get("prerelease", False)))


class AuditStatus(Enum):
    """Outcome of checking a single dependency."""

    UP_TO_DATE = "up_to_date"
    UPDATE_AVAILABLE = "update_available"
    NO_RELEASES = "no_releases"
    ERROR = "error"


@dataclass(frozen=True)
class AuditResult:
    """Result of evaluating one :class:`DependencyRecord`.

    Use the class constructors rather than building instances by hand:

    - :meth:`up_to_date` carries the latest stable version
    - :meth:`update_available` carries the latest stable version, which is
      newer than the pin
    - :meth:`no_releases` means nothing stable is published (or 404)
    - :meth:`error` carries a human-readable message
    """

    record: DependencyRecord
    status: AuditStatus
    latest: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def up_to_date(cls, record: DependencyRecord, latest: str) -> "AuditResult":
        return cls(record=record, status=AuditStatus.UP_TO_DATE, latest=latest)

    @classmethod
    def update_available(
        cls,
        record: DependencyRecord,
        current: str,
        latest: str,
    ) -> "AuditResult":
        if current != record.pinned_version:
            raise ValueError(
                f"current {current!r} does not match pinned version "
                f"{record.pinned_version!r}"
            )
        return cls(record=record, status=AuditStatus.UPDATE_AVAILABLE, latest=latest)

    @classmethod
    def no_releases(cls, record: DependencyRecord) -> "AuditResult":
        return cls(record=record, status=AuditStatus.NO_RELEASES)

    @classmethod
    def error(cls, record: DependencyRecord, message: str) -> "AuditResult":
        return cls(record=record, status=AuditStatus.ERROR, message=message)

    @property
    def current(self) -> str:
        """The pinned version of the audited dependency."""
        return self.record.pinned_version

    @property
    def has_update(self) -> bool:
        return self.status is AuditStatus.UPDATE_AVAILABLE

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        entry: Dict[str, Any] = {
            **self.record.to_json(),
            "status": self.status.value,
        }
        if self.latest is not None:
            entry["latest"] = self.latest
        if self.message is not None:
            entry["error"] = self.message
        return entry
