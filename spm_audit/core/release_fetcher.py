"""GitHub release lookup for spm-audit.

For every unique dependency one request is sent to the GitHub releases API::

    GET https://api.github.com/repos/{owner}/{repo}/releases

The first non-prerelease entry of the (newest-first) response is taken as
the latest stable release and compared against the pinned version.

:meth:`ReleaseFetcher.fetch` never raises for problems that concern a single
dependency. Malformed URLs, HTTP errors, transport failures and unexpected
payloads all become an :class:`~spm_audit.models.release.AuditResult` so
that one bad repository cannot abort an audit. Requests are never retried.

Typical usage::

    async with HTTPClient() as http:
        fetcher = ReleaseFetcher(http, token=os.environ.get("GITHUB_TOKEN"))
        result = await fetcher.fetch(record)
        print(result.status, result.latest)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from spm_audit.constants import (
    GITHUB_ACCEPT_HEADER,
    GITHUB_HOST,
    GITHUB_RELEASES_API,
)
from spm_audit.exceptions import GitHubError, NetworkError
from spm_audit.models.dependency import DependencyRecord
from spm_audit.models.release import AuditResult, ReleaseInfo
from spm_audit.utils.http import HTTPClient
from spm_audit.utils.logger import get_logger
from spm_audit.utils.version_utils import is_newer, normalize_version

logger = get_logger("release_fetcher")

__all__ = ["ReleaseFetcher", "parse_github_repository"]

UNPARSEABLE_URL_MESSAGE = "Could not parse GitHub URL"


def parse_github_repository(url: str) -> Optional[Tuple[str, str]]:
    """Extract ``(owner, repo)`` from a GitHub repository URL.

    The URL is split on ``/`` and must contain a segment that is exactly
    ``github.com``; the next two non-empty segments are the owner and the
    repository, minus a trailing ``.git``. Anything else, including
    look-alike hosts and SCP-style ``git@github.com:owner/repo`` locations,
    does not name a repository.

    Examples:
        >>> parse_github_repository("https://github.com/apple/swift-nio.git")
        ('apple', 'swift-nio')
        >>> parse_github_repository("https://github.com/apple") is None
        True
        >>> parse_github_repository("https://notgithub.com/apple/swift-nio") is None
        True
    """
    # Drop any query or fragment that may follow the path.
    address = url.split("?", 1)[0].split("#", 1)[0]
    segments = address.split("/")
    if GITHUB_HOST not in segments:
        return None

    rest = [segment for segment in segments[segments.index(GITHUB_HOST) + 1 :] if segment]
    if len(rest) < 2:
        return None

    owner, repo = rest[0], rest[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        return None
    return owner, repo


def _stable_releases(payload: Any) -> List[ReleaseInfo]:
    """Decode the releases array, keeping non-prerelease entries in order.

    Raises:
        TypeError: *payload* is not a list of objects.
        KeyError: An entry has no ``tag_name``.
    """
    if not isinstance(payload, list):
        raise TypeError("expected a JSON array of releases")

    releases: List[ReleaseInfo] = []
    for entry in payload:
        if not isinstance(entry, dict):
            raise TypeError("release entry is not an object")
        release = ReleaseInfo.from_api(entry)
        if not release.is_prerelease:
            releases.append(release)
    return releases


class ReleaseFetcher:
    """Resolve the latest stable GitHub release of a dependency.

    Args:
        http_client: Shared client; its concurrency cap (if any) bounds the
            number of requests in flight.
        token: Optional GitHub token, sent as a bearer credential.
    """

    def __init__(self, http_client: HTTPClient, token: Optional[str] = None) -> None:
        self.http_client = http_client
        self.token = token

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Accept": GITHUB_ACCEPT_HEADER}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def fetch(self, record: DependencyRecord) -> AuditResult:
        """Audit one record against its repository's releases."""
        repository = parse_github_repository(record.source_url)
        if repository is None:
            logger.debug("Cannot derive owner/repo from %s", record.source_url)
            return AuditResult.error(record, UNPARSEABLE_URL_MESSAGE)

        owner, repo = repository
        try:
            releases = await self.fetch_releases(owner, repo)
        except GitHubError as exc:
            logger.debug("%s/%s: %s", owner, repo, exc)
            return AuditResult.error(record, exc.message)
        except NetworkError as exc:
            logger.debug("%s/%s: request failed: %s", owner, repo, exc)
            return AuditResult.error(record, exc.message)

        if releases is None:
            logger.debug("%s/%s: repository has no releases endpoint", owner, repo)
            return AuditResult.no_releases(record)

        if not releases:
            return AuditResult.no_releases(record)

        latest = normalize_version(releases[0].tag)
        if is_newer(latest, record.pinned_version):
            return AuditResult.update_available(record, record.pinned_version, latest)
        return AuditResult.up_to_date(record, latest)

    async def fetch_releases(
        self,
        owner: str,
        repo: str,
    ) -> Optional[List[ReleaseInfo]]:
        """Return the stable releases of ``owner/repo``, newest first.

        Returns:
            ``None`` when GitHub answers 404, otherwise the (possibly empty)
            list of non-prerelease releases in response order.

        Raises:
            GitHubError: Any other non-200 status, or a payload that is not
                a releases array.
            NetworkError: The request failed at the transport level.
        """
        url = GITHUB_RELEASES_API.format(owner=owner, repo=repo)
        slug = f"{owner}/{repo}"
        response = await self.http_client.get(url, headers=self.headers)

        if response.status_code == 404:
            return None

        if response.status_code != 200:
            raise GitHubError(
                f"API error (status {response.status_code})",
                repository=slug,
                url=url,
                status_code=response.status_code,
            )

        try:
            return _stable_releases(response.json())
        except ValueError as exc:
            raise GitHubError(
                f"Invalid JSON in response: {exc}",
                repository=slug,
                url=url,
            ) from exc
        except (KeyError, TypeError) as exc:
            raise GitHubError(
                f"Unexpected response format: {exc}",
                repository=slug,
                url=url,
            ) from exc
