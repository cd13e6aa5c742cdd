"""
The ``spm-audit`` command group.

Global options are applied and settings loaded here before
control passes to ``check`` or ``update``. :func:`main` is the console
script entry point.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from spm_audit.config import load_config
from spm_audit.__version__ import __version__
from spm_audit.context import SPMAuditContext
from spm_audit.exceptions import ConfigError, SPMAuditError
from spm_audit.utils.logger import get_logger, level_for_verbosity, setup_logging
from spm_audit.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read settings from this TOML file instead of searching for one.",
    envvar="SPM_AUDIT_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Show progress (-v) or debug output (-vv) on stderr.",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Force colored output on or off.",
    envvar="SPM_AUDIT_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="spm-audit",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """spm-audit: audit Swift Package Manager dependencies against GitHub releases.

    \b
    Available commands:
      spm-audit check              Report dependencies with newer releases
      spm-audit update             Bump exact pins in Package.swift

    \b
    Examples:
      spm-audit check
      spm-audit check --all path/to/project
      spm-audit -v update --dry-run

    Set GITHUB_TOKEN (or log in with ``gh auth login``) to raise the GitHub
    API rate limit.
    """
    # Rich and the log formatter both read NO_COLOR.
    _apply_color_preference(color)
    _configure_logging(verbose)

    try:
        settings = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    ctx.obj = SPMAuditContext(
        config_path=config or settings.source_path,
        verbose=verbose,
        color=color,
        config=settings,
    )

    logger.debug("spm-audit %s starting", __version__)
    if settings.source_path:
        logger.debug("Settings from %s: %s", settings.source_path, settings.to_log_dict())
    else:
        logger.debug("No configuration file found; using defaults")


def _apply_color_preference(color: bool) -> None:
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()


def _configure_logging(verbose: int) -> None:
    """Install the stderr log handler at the level chosen by ``-v`` flags."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Log level %s", logging.getLevelName(level))


from spm_audit.commands.check import check  # noqa: E402
from spm_audit.commands.update import update  # noqa: E402

cli.add_command(check)
cli.add_command(update)


def main() -> int:
    """Run the CLI and translate the outcome into a process exit code.

    ``0`` success, ``1`` audit failure or updates found with
    ``--fail-on-updates``, ``2`` usage error, ``130`` interrupted.
    """
    try:
        # Outside standalone mode click returns the code passed to ctx.exit()
        result = cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except (click.Abort, KeyboardInterrupt):
        print_warning("\nAudit cancelled by user")
        return 130
    except SPMAuditError as exc:
        print_error(str(exc))
        logger.debug("Run aborted by %s", type(exc).__name__, exc_info=True)
        return 1

    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())
