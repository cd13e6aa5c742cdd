"""
Per-invocation state shared by the ``spm-audit`` group and its commands.

The group callback builds one :class:`SPMAuditContext` from the global
options and the loaded ``[spm-audit]`` settings. Subcommands receive
it through :data:`pass_context`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from spm_audit.config import AuditConfig


class SPMAuditContext:
    """Global options plus the effective audit configuration.

    ``verbose`` counts ``-v`` flags. ``config`` holds defaults when no
    configuration file was found.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(
        self,
        *,
        config_path: Optional[Path] = None,
        verbose: int = 0,
        color: bool = True,
        config: Optional[AuditConfig] = None,
    ) -> None:
        self.config_path = config_path
        self.verbose = verbose
        self.color = color
        self.config = config if config is not None else AuditConfig()

    def __repr__(self) -> str:
        return (
            f"SPMAuditContext(config_path={self.config_path!r}, "
            f"verbose={self.verbose}, color={self.color})"
        )


#: Injects the current :class:`SPMAuditContext`, creating a default one
#: when a command runs outside the group (as in tests).
pass_context = click.make_pass_decorator(SPMAuditContext, ensure=True)
