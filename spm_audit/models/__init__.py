"""
Unified data model exports for spm-audit.

Example:
    >>> from spm_audit.models import DependencyRecord, AuditResult
"""

from __future__ import annotations

from spm_audit.models.dependency import (
    DependencyRecord,
    RequirementKind,
    canonical_url,
    describe_source,
)
from spm_audit.models.release import AuditResult, AuditStatus, ReleaseInfo

__all__ = [
    "AuditResult",
    "AuditStatus",
    "DependencyRecord",
    "ReleaseInfo",
    "RequirementKind",
    "canonical_url",
    "describe_source",
]
