"""Check command implementation for spm-audit.

Scans a directory for Swift manifests and reports which pinned
dependencies have newer stable releases on GitHub.

The command drives the audit pipeline in :mod:`spm_audit.core.auditor`:

1. **ManifestScanner** — finds ``Package.swift`` and ``Package.resolved``
   files and extracts dependency records.
2. **DependencySet** — keeps one record per repository.
3. **ReleaseFetcher** — asks GitHub for each repository's latest stable
   release, concurrently.

Typical usage::

    # Audit the current directory
    $ spm-audit check

    # Include transitive dependencies from lockfiles
    $ spm-audit check --all path/to/App

    # Machine-readable output, failing CI when something is outdated
    $ spm-audit check --format json --fail-on-updates
"""

from __future__ import annotations

import sys
import json
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.markup import escape

from spm_audit.context import pass_context, SPMAuditContext
from spm_audit.commands import run_audit
from spm_audit.core import AuditReport
from spm_audit.exceptions import SPMAuditError
from spm_audit.models import AuditResult, AuditStatus
from spm_audit.utils import (
    get_logger,
    get_raw_console,
    get_update_type,
    print_info,
    print_success,
    print_error,
    print_warning,
    print_table,
    colorize_update_type,
    styled_label,
)

logger = get_logger("commands.check")

_STATUS_LABELS = {
    AuditStatus.UP_TO_DATE: ("OK", styled_label("✓ OK", "audit.ok")),
    AuditStatus.UPDATE_AVAILABLE: ("OUTDATED", styled_label("⬆ OUTDATED", "audit.outdated")),
    AuditStatus.NO_RELEASES: ("NO RELEASES", styled_label("- NO RELEASES", "audit.none")),
    AuditStatus.ERROR: ("ERROR", styled_label("✗ ERROR", "audit.failed")),
}


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.option(
    "--all",
    "-a",
    "include_transitive",
    is_flag=True,
    help="Include transitive dependencies from Package.resolved files.",
)
@click.option(
    "--outdated-only",
    is_flag=True,
    help="Show only dependencies with available updates.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--max-concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of concurrent GitHub requests (default: unlimited).",
)
@click.option(
    "--fail-on-updates",
    is_flag=True,
    help="Exit with status 1 when any update is available.",
)
@pass_context
def check(
    ctx: SPMAuditContext,
    directory: Path,
    include_transitive: bool,
    outdated_only: bool,
    format: str,
    max_concurrency: Optional[int],
    fail_on_updates: bool,
) -> None:
    """Check Swift dependencies for newer GitHub releases.

    DIRECTORY is searched recursively (default: current directory).
    Anything under a ``.build`` directory is ignored.

    Exits:
        0 on success, 1 if an error occurred or if ``--fail-on-updates`` is
        given and updates are available.
    """
    try:
        report = asyncio.run(
            run_audit(
                ctx,
                directory,
                include_transitive=include_transitive,
                max_concurrency=max_concurrency,
            )
        )
        _render(report, format=format.lower(), outdated_only=outdated_only)

    except SPMAuditError as e:
        print_error(f"{e}")
        sys.exit(1)

    if fail_on_updates and report.updates_available > 0:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _render(report: AuditReport, *, format: str, outdated_only: bool) -> None:
    results = report.outdated() if outdated_only else report.results

    if format == "json":
        _display_json(results)
        return

    if not report.results:
        print_warning("No dependencies found")
        return

    if results:
        if format == "table":
            _display_table(results)
        else:
            _display_simple(results)

    if report.errors:
        print_warning(f"{report.errors} dependency check(s) failed")

    if report.updates_available:
        print_info(f"\n{report.updates_available} update(s) available")
    else:
        print_success("\nAll dependencies are up to date!")


def _display_table(results: List[AuditResult]) -> None:
    """Render results as a Rich table.

    Example::

        ┏━━━━━━━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━━━━━┳━━━━━━━┳━━━━━━━━━┳━━━━━━━━┳━━━━━━━━┳━━━━━━━━━━━━┓
        ┃ Package         ┃ Source                  ┃ Type  ┃ Current ┃ Latest ┃ Change ┃ Status     ┃
        ┡━━━━━━━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━━━━━╇━━━━━━━╇━━━━━━━━━╇━━━━━━━━╇━━━━━━━━╇━━━━━━━━━━━━┩
        │ swift-algorithms│ App (Package.swift)     │ Exact │ 1.0.0   │ 1.2.0  │ minor  │ ⬆ OUTDATED │
        └─────────────────┴─────────────────────────┴───────┴─────────┴────────┴────────┴────────────┘
    """
    data = [_create_table_row(result) for result in results]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Source": {"style": "dim"},
        "Type": {"justify": "center"},
        "Current": {"justify": "center", "style": "dim"},
        "Latest": {"justify": "center", "style": "bold green"},
        "Change": {"justify": "center"},
        "Status": {"justify": "left", "no_wrap": True},
    }

    print_table(
        data,
        title="Swift Package Dependencies",
        column_styles=column_styles,
    )


def _create_table_row(result: AuditResult) -> Dict[str, str]:
    """Build a Rich-markup row for a single result."""
    record = result.record
    status = _STATUS_LABELS[result.status][1]

    if result.status is AuditStatus.ERROR:
        status = f"{status} [dim]{escape(result.message or '')}[/dim]"

    if result.has_update:
        change = colorize_update_type(get_update_type(result.current, result.latest))
    else:
        change = "[dim]-[/dim]"

    return {
        "Package": escape(record.name),
        "Source": escape(record.source_name),
        "Type": record.requirement_label,
        "Current": escape(result.current),
        "Latest": escape(result.latest) if result.latest else "[dim]-[/dim]",
        "Change": change,
        "Status": status,
    }


def _display_simple(results: List[AuditResult]) -> None:
    """Render results one per line.

    Example::

        [OUTDATED] swift-algorithms     1.0.0      → 1.2.0
        [OK] swift-nio                  2.62.0     → 2.62.0
        [ERROR] private-lib             1.0.0      → -          API error (status 403)
    """
    console = get_raw_console()

    for result in results:
        label = _STATUS_LABELS[result.status][0]
        latest = result.latest or "-"
        line = f"[{label}] {result.record.name:20} {result.current:10} → {latest:10}"
        if result.message:
            line = f"{line} {result.message}"
        console.print(line, markup=False, highlight=False)


def _display_json(results: List[AuditResult]) -> None:
    """Render results as a JSON array for machine consumption."""
    data = [result.to_json() for result in results]
    print(json.dumps(data, indent=2))
