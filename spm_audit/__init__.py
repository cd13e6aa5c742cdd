"""
spm-audit — Swift Package Manager dependency auditor

spm-audit scans a directory tree for Swift Package Manager manifests
(``Package.swift``, ``Package.resolved`` and Xcode ``project.pbxproj``
files), then asks GitHub which of the pinned dependencies have newer
stable releases.

Features include:
    • Exact-pin discovery in Package.swift
    • Direct vs. transitive classification for Xcode projects
    • Concurrent GitHub release lookups with per-package error isolation
    • In-place updates of exact pins in Package.swift
"""

from __future__ import annotations

from spm_audit.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "spm-audit Contributors"
__license__ = "MIT"
__description__ = "Check Swift Package Manager dependencies for newer GitHub releases."

__all__ = [
    "__version__",
]
