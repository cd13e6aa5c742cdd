"""
HTTP client utilities for spm-audit.

This module provides an asynchronous HTTP client with an optional cap on
concurrent requests. Transport failures are normalized to
:class:`~spm_audit.exceptions.NetworkError`; HTTP status codes are returned
to the caller untouched so that each API wrapper can decide what a 404 or
403 means for it.
"""

from __future__ import annotations

import httpx
import asyncio
from typing import Any, Dict, Optional

from spm_audit.utils.logger import get_logger
from spm_audit.__version__ import __version__
from spm_audit.exceptions import NetworkError
from spm_audit.constants import DEFAULT_TIMEOUT, USER_AGENT_TEMPLATE

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with optional concurrency control.

    Requests are never retried: a failed request is reported once and the
    caller decides what to do with it.

    Args:
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of concurrent requests, or ``None``
            for no limit.
        headers: Extra headers sent with every request.

    Example:
        >>> async with HTTPClient(max_concurrency=8) as client:
        ...     response = await client.get("https://api.github.com/rate_limit")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency
        self.headers: Dict[str, str] = dict(headers or {})

        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(max_concurrency) if max_concurrency else None
        )

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent, **self.headers},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        assert self._client is not None

        if self._semaphore is None:
            return await self._client.request(method, url, **kwargs)

        async with self._semaphore:
            return await self._client.request(method, url, **kwargs)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Execute a single HTTP request.

        Raises:
            NetworkError: DNS failure, connection error, timeout or any
                other transport-level problem.
        """
        await self._ensure_client()

        try:
            response = await self._send(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.debug("Request timeout: %s", url)
            raise NetworkError(
                f"Request timed out after {self.timeout}s",
                url=url,
            ) from exc
        except httpx.HTTPError as exc:
            logger.debug("Network error for %s: %s", url, exc)
            raise NetworkError(str(exc) or exc.__class__.__name__, url=url) from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self.request("GET", url, **kwargs)
