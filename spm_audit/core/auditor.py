"""Audit orchestration for spm-audit.

An audit runs in four stages:

1. **Scan** — :class:`~spm_audit.core.scanner.ManifestScanner` walks the
   tree and extracts records from every manifest.
2. **De-duplicate** — :class:`~spm_audit.core.dependency_set.DependencySet`
   keeps the first record per source URL.
3. **Fetch** — one task per unique record is handed to
   :class:`~spm_audit.core.release_fetcher.ReleaseFetcher`; all tasks run
   concurrently and each finishes with exactly one result.
4. **Collect** — results are gathered in completion order and then sorted
   by package name, which is the only ordering guarantee.

Typical usage::

    async with HTTPClient(max_concurrency=8) as http:
        auditor = ReleaseAuditor(ReleaseFetcher(http, token=token))
        report = await auditor.run(Path("."))

    for result in report.results:
        print(result.record.name, result.status.value)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from spm_audit.constants import DEFAULT_TIMEOUT
from spm_audit.core.dependency_set import DependencySet
from spm_audit.core.release_fetcher import ReleaseFetcher
from spm_audit.core.scanner import ManifestScanner
from spm_audit.models.dependency import DependencyRecord
from spm_audit.models.release import AuditResult, AuditStatus
from spm_audit.utils.http import HTTPClient
from spm_audit.utils.logger import get_logger

logger = get_logger("auditor")

__all__ = ["AuditReport", "ReleaseAuditor", "audit_directory"]


@dataclass
class AuditReport:
    """Outcome of a full audit run.

    Attributes:
        results: One result per unique dependency, sorted by package name.
        scanned_files: Number of manifests that were parsed successfully.
        skipped_files: Number of manifests that could not be parsed.
    """

    results: List[AuditResult] = field(default_factory=list)
    scanned_files: int = 0
    skipped_files: int = 0

    @property
    def updates_available(self) -> int:
        return sum(1 for result in self.results if result.has_update)

    @property
    def errors(self) -> int:
        return sum(1 for result in self.results if result.status is AuditStatus.ERROR)

    def outdated(self) -> List[AuditResult]:
        return [result for result in self.results if result.has_update]


class ReleaseAuditor:
    """Run a dependency audit over a directory tree.

    Args:
        fetcher: Release lookup used for every record.
        scanner: Manifest scanner. Defaults to one built with
            *include_transitive*.
        include_transitive: Audit lockfile pins the project does not
            declare. Ignored when *scanner* is given.
    """

    def __init__(
        self,
        fetcher: ReleaseFetcher,
        *,
        scanner: Optional[ManifestScanner] = None,
        include_transitive: bool = False,
    ) -> None:
        self.fetcher = fetcher
        self.scanner = scanner or ManifestScanner(
            include_transitive=include_transitive
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, root: Path) -> AuditReport:
        """Scan *root*, de-duplicate, and audit every unique dependency.

        Finding no dependencies is not an error; the report is then empty.

        Raises:
            FileOperationError: *root* is not a readable directory.
        """
        report = AuditReport()
        dependencies = DependencySet()

        for outcome in self.scanner.iter_manifests(root):
            if not outcome.ok:
                logger.debug("Skipping %s: %s", outcome.path, outcome.error)
                report.skipped_files += 1
                continue

            report.scanned_files += 1
            dependencies.update(outcome.records)

        logger.info(
            "Found %d unique dependencies in %d manifest(s)",
            len(dependencies),
            report.scanned_files,
        )

        if not dependencies:
            return report

        report.results = await self.audit_records(dependencies)
        return report

    async def audit_records(
        self,
        records: Iterable[DependencyRecord],
    ) -> List[AuditResult]:
        """Audit *records* concurrently and return results sorted by name.

        Records are expected to be unique; duplicates are audited twice.
        """
        tasks = [asyncio.ensure_future(self._audit_one(record)) for record in records]

        results: List[AuditResult] = []
        for next_done in asyncio.as_completed(tasks):
            results.append(await next_done)

        # sort() is stable, so equal names keep completion order.
        results.sort(key=lambda result: result.record.name)
        return results

    async def _audit_one(self, record: DependencyRecord) -> AuditResult:
        try:
            result = await self.fetcher.fetch(record)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error auditing %s", record.source_url)
            return AuditResult.error(record, f"Unexpected error: {exc}")

        logger.debug(
            "%s: %s (pinned %s, latest %s)",
            record.name,
            result.status.value,
            record.pinned_version,
            result.latest or "-",
        )
        return result


async def audit_directory(
    root: Path,
    *,
    include_transitive: bool = False,
    max_concurrency: Optional[int] = None,
    timeout: int = DEFAULT_TIMEOUT,
    token: Optional[str] = None,
) -> AuditReport:
    """Audit *root* with a fresh HTTP client.

    Args:
        root: Directory to scan.
        include_transitive: Audit undeclared lockfile pins as well.
        max_concurrency: Cap on concurrent GitHub requests (``None`` = none).
        timeout: Per-request timeout in seconds.
        token: Optional GitHub token.
    """
    async with HTTPClient(timeout=timeout, max_concurrency=max_concurrency) as http:
        auditor = ReleaseAuditor(
            ReleaseFetcher(http, token=token),
            include_transitive=include_transitive,
        )
        return await auditor.run(root)
