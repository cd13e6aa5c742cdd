"""
CLI subcommands for spm-audit.

Both commands run the same audit; :func:`run_audit` layers command-line
flags over the loaded configuration and resolves the GitHub token.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from spm_audit.context import SPMAuditContext
from spm_audit.core import AuditReport, audit_directory
from spm_audit.utils import default_credential_provider, get_logger

logger = get_logger("commands")


async def run_audit(
    ctx: SPMAuditContext,
    directory: Path,
    *,
    include_transitive: bool = False,
    max_concurrency: Optional[int] = None,
) -> AuditReport:
    """Audit *directory* with CLI flags layered over ``ctx.config``."""
    config = ctx.config
    include_transitive = include_transitive or config.include_transitive
    if max_concurrency is None:
        max_concurrency = config.max_concurrency

    # The gh CLI lookup is a blocking subprocess call.
    provider = default_credential_provider(use_gh_cli=config.use_gh_cli)
    token = await asyncio.get_running_loop().run_in_executor(None, provider.get_token)

    logger.info("Scanning %s...", directory)
    return await audit_directory(
        directory,
        include_transitive=include_transitive,
        max_concurrency=max_concurrency,
        timeout=config.timeout,
        token=token,
    )


__all__ = ["run_audit"]
