"""
Terminal output for spm-audit.

Every message, table and prompt meant for the person running the audit
goes through one shared Rich console themed for audit results. Anything
diagnostic belongs in :mod:`spm_audit.utils.logger` instead.

The console is built on first use so that ``NO_COLOR`` and the
``--color/--no-color`` flag are honored, and so that test runners which
swap ``sys.stdout`` see the output.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

SPM_AUDIT_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        # Audit outcomes
        "audit.ok": "green",
        "audit.outdated": "yellow",
        "audit.none": "dim",
        "audit.failed": "red",
        # Version change severity
        "change.major": "red",
        "change.minor": "yellow",
        "change.patch": "green",
    }
)

_CHANGE_COLORS = {
    "major": "red",
    "minor": "yellow",
    "patch": "green",
    "update": "yellow",
}

_YES = frozenset({"y", "yes"})
_NO = frozenset({"n", "no"})

# ---------------------------------------------------------------------------
# Shared console
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _color_enabled() -> bool:
    # NO_COLOR and CI both force plain output; otherwise follow the terminal.
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


def get_raw_console() -> Console:
    """Return the shared console, creating it on first use."""
    global _console

    console = _console
    if console is not None:
        return console

    with _console_lock:
        if _console is None:
            colored = _color_enabled()
            _console = Console(
                theme=SPM_AUDIT_THEME,
                no_color=not colored,
                highlight=colored,
            )
        return _console


def reconfigure_console() -> None:
    """Drop the shared console so the next call rebuilds it.

    Called after the color flags or ``NO_COLOR`` change.
    """
    global _console
    with _console_lock:
        _console = None


# ---------------------------------------------------------------------------
# Status lines
# ---------------------------------------------------------------------------


def _emit(text: str, style: str) -> None:
    # Messages carry file paths and server text, never markup.
    get_raw_console().print(text, style=style, markup=False, highlight=False)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _emit(f"{prefix} {message}", "success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _emit(f"{prefix} {message}", "error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _emit(f"{prefix} {message}", "warning")


def print_info(message: str) -> None:
    """Print a progress line such as the scan summary."""
    _emit(message, "info")


# ---------------------------------------------------------------------------
# Tables and labels
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[Iterable[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> None:
    """Render rows of audit data as a table.

    Args:
        data: One dictionary per row. Values may contain Rich markup, so
            anything coming from a manifest must be escaped by the caller.
        headers: Columns to show, in order. Defaults to the keys of the
            first row.
        title: Caption printed above the table.
        column_styles: Keyword arguments for ``Table.add_column`` keyed by
            header, e.g. ``{"Package": {"style": "bold cyan"}}``.
    """
    if not data:
        return

    columns = list(headers) if headers is not None else list(data[0])
    styles = column_styles or {}

    table = Table(
        title=title,
        box=box.SIMPLE_HEAVY,
        header_style="bold",
        title_justify="left",
    )
    for column in columns:
        options = dict(styles.get(column, {}))
        options.setdefault("overflow", "fold")
        table.add_column(column, **options)

    for row in data:
        table.add_row(*[str(row.get(column, "")) for column in columns])

    get_raw_console().print(table)


def colorize_update_type(update_type: str) -> str:
    """Wrap a version change label (major/minor/patch) in its color."""
    color = _CHANGE_COLORS.get(update_type.lower())
    if color is None:
        return update_type
    return f"[{color}]{update_type}[/{color}]"


def styled_label(text: str, style: str) -> str:
    """Return ``text`` wrapped in a theme style, e.g. ``audit.outdated``."""
    return f"[{style}]{text}[/{style}]"


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question before files are rewritten.

    Empty or unrecognized answers fall back to ``default``. Closing
    stdin or pressing Ctrl+C always declines.
    """
    console = get_raw_console()
    hint = "[Y/n]" if default else "[y/N]"
    console.print(f"{message} {hint}: ", end="", style="info", markup=False)

    try:
        answer = input().strip().lower()
    except (EOFError, KeyboardInterrupt):
        console.print()
        return False

    if answer in _YES:
        return True
    if answer in _NO:
        return False
    return default
