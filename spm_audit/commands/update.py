"""Update command implementation for spm-audit.

Runs the same audit as ``check`` and then bumps every outdated
``exact:`` pin in ``Package.swift`` to the latest stable release.

Dependencies found only in an Xcode project or a ``Package.resolved`` are
listed as skipped: Xcode keeps its requirements in ``project.pbxproj`` and
lockfiles are regenerated by SwiftPM.

Typical usage::

    # Preview changes without applying
    $ spm-audit update --dry-run

    # Update only specific packages
    $ spm-audit update -p swift-nio -p swift-log

    # Create backups and skip confirmation
    $ spm-audit update --backup -y
"""

from __future__ import annotations

import sys
import asyncio
from pathlib import Path
from typing import Dict, List, Tuple

import click
from rich.markup import escape

from spm_audit.commands import run_audit
from spm_audit.context import pass_context, SPMAuditContext
from spm_audit.core import ManifestUpdater
from spm_audit.exceptions import SPMAuditError
from spm_audit.models import AuditResult, DependencyRecord
from spm_audit.utils import (
    colorize_update_type,
    confirm,
    get_logger,
    get_update_type,
    is_valid_version,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.update")


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
    "--dry-run",
    is_flag=True,
    help="Preview changes without applying them.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Skip confirmation prompt.",
)
@click.option(
    "--backup",
    is_flag=True,
    help="Create a backup of each manifest before updating.",
)
@click.option(
    "--packages",
    "-p",
    multiple=True,
    help="Update only specific packages (can be repeated).",
)
@pass_context
def update(
    ctx: SPMAuditContext,
    directory: Path,
    include_transitive: bool,
    dry_run: bool,
    yes: bool,
    backup: bool,
    packages: Tuple[str, ...],
) -> None:
    """Update exact pins in Package.swift to the latest releases.

    DIRECTORY is searched recursively (default: current directory).

    Exits:
        0 if updates were applied or none were needed, 1 if an error
        occurred.
    """
    try:
        report = asyncio.run(
            run_audit(ctx, directory, include_transitive=include_transitive)
        )
    except SPMAuditError as e:
        print_error(f"{e}")
        sys.exit(1)

    outdated = report.outdated()
    if packages:
        wanted = {name.lower() for name in packages}
        outdated = [r for r in outdated if r.record.name.lower() in wanted]
        if not outdated:
            print_warning(f"No matching outdated packages: {', '.join(packages)}")
            return

    if not outdated:
        print_success("All dependencies are up to date!")
        return

    updater = ManifestUpdater()
    updatable, skipped = _partition(updater, outdated)

    _display_update_plan(updatable, skipped, dry_run)

    if not updatable:
        print_warning("Nothing can be updated automatically")
        return

    if dry_run:
        print_warning("\nDry run mode - no changes applied")
        return

    if not yes and not confirm(f"\nUpdate {len(updatable)} package(s)?", default=True):
        logger.info("Update cancelled by user")
        return

    try:
        backups = updater.apply(
            [(result.record, result.latest) for result in updatable],
            backup=backup,
        )
    except SPMAuditError as e:
        print_error(f"Failed to apply updates: {e}")
        sys.exit(1)

    for path in backups:
        print_info(f"Backup written to {path}")

    print_success(f"\nUpdated {len(updatable)} package(s)")
    print_warning("Run 'swift package update' to refresh Package.resolved")


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _partition(
    updater: ManifestUpdater,
    results: List[AuditResult],
) -> Tuple[List[AuditResult], List[Tuple[AuditResult, str]]]:
    """Split results into updatable ones and ``(result, reason)`` skips."""
    updatable: List[AuditResult] = []
    skipped: List[Tuple[AuditResult, str]] = []

    for result in results:
        reason = updater.unsupported_reason(result.record)
        if reason is None and not is_valid_version(result.latest or ""):
            reason = f"unrecognized version {result.latest!r}"
        if reason is None:
            updatable.append(result)
        else:
            logger.debug("Skipping %s: %s", result.record.name, reason)
            skipped.append((result, reason))

    return updatable, skipped


def _plan_row(record: DependencyRecord, latest: str, note: str) -> Dict[str, str]:
    update_type = get_update_type(record.pinned_version, latest)
    return {
        "Package": escape(record.name),
        "Source": escape(record.source_name),
        "Current": escape(record.pinned_version),
        "New Version": f"[bold green]{escape(latest)}[/bold green]",
        "Change": colorize_update_type(update_type),
        "Action": note,
    }


def _display_update_plan(
    updatable: List[AuditResult],
    skipped: List[Tuple[AuditResult, str]],
    dry_run: bool,
) -> None:
    """Display planned and skipped updates as a Rich table."""
    title = "Update Plan (Dry Run)" if dry_run else "Update Plan"

    data = [
        _plan_row(result.record, result.latest or "", "[green]update[/green]")
        for result in updatable
    ]
    for result, reason in skipped:
        note = f"[dim]skip: {escape(reason)}[/dim]"
        data.append(_plan_row(result.record, result.latest or "", note))

    column_styles = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Source": {"style": "dim"},
        "Current": {"justify": "center", "style": "dim"},
        "New Version": {"justify": "center"},
        "Change": {"justify": "center"},
        "Action": {"justify": "left"},
    }

    print_table(data, title=title, column_styles=column_styles)
