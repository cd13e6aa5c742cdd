"""Manifest discovery and parsing for spm-audit.

Two kinds of files are read:

- ``Package.swift`` — only dependencies pinned with ``exact:`` are
  extracted, e.g. ``.package(url: "https://github.com/apple/swift-algorithms",
  exact: "1.0.0")``. Ranged, branch and revision declarations are not
  visible to the scanner.
- ``Package.resolved`` — every pin with a resolved ``version`` hosted on
  GitHub, classified direct or transitive by
  :class:`~spm_audit.core.correlator.ResolvedLockCorrelator`.

Each file is parsed into a :class:`ParseOutcome`. A file that cannot be read
or decoded produces an outcome carrying a :class:`ParseError` instead of
records; :meth:`ManifestScanner.iter_records` logs and skips those so that
one malformed manifest never aborts a directory-wide scan.

Typical usage::

    scanner = ManifestScanner(include_transitive=False)
    for record in scanner.iter_records(Path(".")):
        print(record.name, record.pinned_version)
"""

from __future__ import annotations

import re
import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from spm_audit.constants import PACKAGE_RESOLVED, PACKAGE_SWIFT
from spm_audit.core.correlator import ResolvedLockCorrelator, ResolvedPin
from spm_audit.exceptions import FileOperationError, ParseError
from spm_audit.models.dependency import (
    DependencyRecord,
    RequirementKind,
    canonical_url,
    name_from_url,
)
from spm_audit.utils.filesystem import find_manifest_files, safe_read_file
from spm_audit.utils.logger import get_logger

logger = get_logger("scanner")

__all__ = ["ManifestScanner", "ParseOutcome"]

_EXACT_DECLARATION_RE = re.compile(
    r'url:\s*"(https://github\.com/[^"]+)",\s*exact:\s*"([^"]+)"'
)


@dataclass(frozen=True)
class ParseOutcome:
    """Records extracted from one manifest, or the reason there are none.

    Attributes:
        path: The manifest that was parsed.
        records: Extracted records (empty when ``error`` is set).
        error: Why the file could not be parsed, if it could not.
    """

    path: Path
    records: List[DependencyRecord] = field(default_factory=list)
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, path: Path, message: str) -> "ParseOutcome":
        return cls(path=path, error=ParseError(message, file_path=str(path)))


class ManifestScanner:
    """Find Swift manifests under a directory and extract their dependencies.

    Args:
        include_transitive: Keep lockfile pins the project does not declare.
        correlator: Collaborator used to classify lockfile pins. Defaults to
            a :class:`ResolvedLockCorrelator` honouring *include_transitive*.
    """

    def __init__(
        self,
        include_transitive: bool = False,
        correlator: Optional[ResolvedLockCorrelator] = None,
    ) -> None:
        self.include_transitive = include_transitive
        self.correlator = correlator or ResolvedLockCorrelator(
            include_transitive=include_transitive
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def iter_manifest_files(root: Path) -> Iterator[Path]:
        """Yield manifest paths under *root*, skipping ``.build`` trees."""
        return find_manifest_files(root)

    def iter_manifests(self, root: Path) -> Iterator[ParseOutcome]:
        """Parse every manifest under *root*, in traversal order.

        Raises:
            FileOperationError: *root* is not a readable directory.
        """
        for path in self.iter_manifest_files(root):
            if path.name == PACKAGE_SWIFT:
                yield self.parse_declaration_file(path)
            elif path.name == PACKAGE_RESOLVED:
                yield self.parse_resolved_file(path)

    def iter_records(self, root: Path) -> Iterator[DependencyRecord]:
        """Lazily yield every dependency record found under *root*.

        Manifests that fail to parse are skipped.
        """
        for outcome in self.iter_manifests(root):
            if not outcome.ok:
                logger.debug("Skipping %s: %s", outcome.path, outcome.error)
                continue

            logger.debug(
                "Found %d dependency record(s) in %s",
                len(outcome.records),
                outcome.path,
            )
            yield from outcome.records

    def parse_declaration_file(self, path: Path) -> ParseOutcome:
        """Extract exact-pinned GitHub dependencies from a ``Package.swift``."""
        try:
            content = safe_read_file(path)
        except FileOperationError as exc:
            return ParseOutcome.failed(path, f"Cannot read manifest: {exc.message}")

        records = [
            DependencyRecord(
                name=name_from_url(url),
                source_url=canonical_url(url),
                pinned_version=version,
                origin_path=str(path),
                requirement_kind=RequirementKind.EXACT,
            )
            for url, version in _EXACT_DECLARATION_RE.findall(content)
        ]
        return ParseOutcome(path=path, records=records)

    def parse_resolved_file(self, path: Path) -> ParseOutcome:
        """Extract versioned GitHub pins from a ``Package.resolved``.

        Pins without a resolved version (branch or revision pins) are
        skipped, as are pins hosted outside GitHub. Pins the project does
        not declare are dropped unless ``include_transitive`` is set.
        """
        try:
            content = safe_read_file(path)
        except FileOperationError as exc:
            return ParseOutcome.failed(path, f"Cannot read lockfile: {exc.message}")

        try:
            pins = _parse_pins(json.loads(content))
        except json.JSONDecodeError as exc:
            return ParseOutcome.failed(path, f"Invalid JSON: {exc}")
        except (KeyError, TypeError) as exc:
            return ParseOutcome.failed(path, f"Unexpected lockfile layout: {exc}")

        records = list(self.correlator.records_for(path, pins))
        return ParseOutcome(path=path, records=records)


# ---------------------------------------------------------------------------
# Lockfile decoding helpers
# ---------------------------------------------------------------------------


def _parse_pins(document: Any) -> List[ResolvedPin]:
    """Decode the ``pins`` array of a version 2/3 ``Package.resolved``.

    Raises:
        KeyError: A required key is missing.
        TypeError: A value has the wrong type.
    """
    if not isinstance(document, dict):
        raise TypeError("top-level value is not an object")

    raw_pins = document["pins"]
    if not isinstance(raw_pins, list):
        raise TypeError("'pins' is not an array")

    pins: List[ResolvedPin] = []
    for raw in raw_pins:
        if not isinstance(raw, dict):
            raise TypeError("pin is not an object")

        identity = raw["identity"]
        location = raw["location"]
        state = raw["state"]
        if not isinstance(identity, str) or not isinstance(location, str):
            raise TypeError("pin identity and location must be strings")
        if not isinstance(state, dict):
            raise TypeError("pin state is not an object")

        version = state.get("version")
        if version is not None and not isinstance(version, str):
            raise TypeError("pin version must be a string")

        pins.append(ResolvedPin(identity=identity, location=location, version=version))

    return pins
