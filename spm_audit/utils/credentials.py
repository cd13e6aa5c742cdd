"""
GitHub credential providers for spm-audit.

A token raises the GitHub rate limit and grants access to private
repositories. Tokens are looked up through a priority chain:

1. ``GITHUB_TOKEN`` environment variable
2. ``gh auth token`` (GitHub CLI), if installed and logged in

No token is not an error; requests are then sent unauthenticated.

Typical usage::

    provider = default_credential_provider()
    token = provider.get_token()
"""

from __future__ import annotations

import os
import subprocess
from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping, Optional, Sequence

from spm_audit.utils.logger import get_logger
from spm_audit.constants import (
    GH_TOKEN_COMMAND,
    GH_TOKEN_TIMEOUT,
    GITHUB_TOKEN_ENV,
)

logger = get_logger("credentials")


class CredentialProvider(ABC):
    """Source of an optional bearer token."""

    #: Short label used in log messages.
    name: str = "credential provider"

    @abstractmethod
    def get_token(self) -> Optional[str]:
        """Return a token, or ``None`` when this source has none."""


class EnvironmentCredentialProvider(CredentialProvider):
    """Read the token from an environment variable.

    Empty or whitespace-only values count as unset.
    """

    def __init__(
        self,
        variable: str = GITHUB_TOKEN_ENV,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.variable = variable
        self.environ = environ
        self.name = f"${variable}"

    def get_token(self) -> Optional[str]:
        environ = os.environ if self.environ is None else self.environ
        token = environ.get(self.variable, "").strip()
        return token or None


class GhCliCredentialProvider(CredentialProvider):
    """Ask the GitHub CLI for the token of the logged-in user.

    Any failure (``gh`` missing, not logged in, timeout) yields ``None``.
    """

    name = "gh auth token"

    def __init__(
        self,
        command: Sequence[str] = GH_TOKEN_COMMAND,
        timeout: int = GH_TOKEN_TIMEOUT,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout

    def get_token(self) -> Optional[str]:
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("Could not run %s: %s", " ".join(self.command), exc)
            return None

        if result.returncode != 0:
            logger.debug(
                "%s exited with status %d", " ".join(self.command), result.returncode
            )
            return None

        token = result.stdout.strip()
        return token or None


class ChainedCredentialProvider(CredentialProvider):
    """Try several providers in order; the first token found wins."""

    name = "credential chain"

    def __init__(self, providers: Iterable[CredentialProvider]) -> None:
        self.providers: List[CredentialProvider] = list(providers)

    def get_token(self) -> Optional[str]:
        for provider in self.providers:
            token = provider.get_token()
            if token:
                logger.info("Using GitHub token from %s", provider.name)
                return token

        logger.info("No GitHub token found; using unauthenticated requests")
        return None


def default_credential_provider(*, use_gh_cli: bool = True) -> CredentialProvider:
    """Build the standard ``GITHUB_TOKEN`` → ``gh auth token`` chain."""
    providers: List[CredentialProvider] = [EnvironmentCredentialProvider()]
    if use_gh_cli:
        providers.append(GhCliCredentialProvider())
    return ChainedCredentialProvider(providers)
