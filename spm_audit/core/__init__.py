"""
Core functionality exports for spm-audit.

This module provides convenient access to the core subsystems of spm-audit.
Importing from here keeps user-facing imports clean and stable:

    from spm_audit.core import ManifestScanner, ReleaseAuditor
"""

from __future__ import annotations

from spm_audit.core.auditor import AuditReport, ReleaseAuditor, audit_directory
from spm_audit.core.correlator import ResolvedLockCorrelator, ResolvedPin
from spm_audit.core.dependency_set import DependencySet, deduplicate
from spm_audit.core.release_fetcher import ReleaseFetcher, parse_github_repository
from spm_audit.core.scanner import ManifestScanner, ParseOutcome
from spm_audit.core.updater import ManifestUpdater, rewrite_exact_pin

__all__ = [
    "AuditReport",
    "ReleaseAuditor",
    "audit_directory",
    "ResolvedLockCorrelator",
    "ResolvedPin",
    "DependencySet",
    "deduplicate",
    "ReleaseFetcher",
    "parse_github_repository",
    "ManifestScanner",
    "ParseOutcome",
    "ManifestUpdater",
    "rewrite_exact_pin",
]
