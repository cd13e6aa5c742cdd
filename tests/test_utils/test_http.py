from __future__ import annotations

import httpx
import pytest
import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from spm_audit.utils.http import HTTPClient
from spm_audit.exceptions import NetworkError


def _response(status_code: int = 200) -> MagicMock:
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    return response


@pytest.mark.unit
class TestHTTPClientInit:
    """Tests for HTTPClient initialization and configuration."""

    def test_default_values(self) -> None:
        """Test HTTPClient initializes with correct default values."""
        client = HTTPClient()

        assert client.timeout == 30  # DEFAULT_TIMEOUT
        assert client.verify_ssl is True
        assert client.max_concurrency is None
        assert "spm-audit" in client.user_agent
        assert client.headers == {}

    def test_custom_values(self) -> None:
        """Test HTTPClient stores custom configuration values."""
        client = HTTPClient(
            timeout=10,
            verify_ssl=False,
            user_agent="CustomAgent/1.0",
            max_concurrency=4,
            headers={"X-Test": "1"},
        )

        assert client.timeout == 10
        assert client.verify_ssl is False
        assert client.user_agent == "CustomAgent/1.0"
        assert client.max_concurrency == 4
        assert client.headers == {"X-Test": "1"}

    def test_unbounded_has_no_semaphore(self) -> None:
        """Test no semaphore is created when concurrency is unlimited."""
        client = HTTPClient()

        assert client._client is None
        assert client._semaphore is None

    def test_bounded_creates_semaphore(self) -> None:
        """Test a concurrency cap creates a semaphore of that size."""
        client = HTTPClient(max_concurrency=3)

        assert client._semaphore is not None
        assert client._semaphore._value == 3

    @pytest.mark.parametrize("value", [0, -1])
    def test_invalid_concurrency_rejected(self, value: int) -> None:
        """Test a cap below one is rejected."""
        with pytest.raises(ValueError, match="max_concurrency"):
            HTTPClient(max_concurrency=value)


@pytest.mark.unit
class TestHTTPClientLifecycle:
    """Tests for client creation and cleanup."""

    @pytest.mark.asyncio
    async def test_context_manager_creates_and_closes(self) -> None:
        """Test the async context manager opens and closes the client."""
        client = HTTPClient()
        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    @pytest.mark.asyncio
    async def test_context_manager_closes_on_exception(self) -> None:
        """Test the client is closed when the body raises."""
        client = HTTPClient()

        with pytest.raises(ValueError):
            async with client:
                raise ValueError("boom")

        assert client._client is None

    @pytest.mark.asyncio
    async def test_ensure_client_is_idempotent(self) -> None:
        """Test repeated _ensure_client calls reuse one httpx client."""
        client = HTTPClient()

        await client._ensure_client()
        first = client._client
        await client._ensure_client()

        assert client._client is first
        await client.close()

    @pytest.mark.asyncio
    async def test_ensure_client_configuration(self) -> None:
        """Test timeout and headers are passed to httpx."""
        client = HTTPClient(timeout=15, user_agent="TestAgent", headers={"X-A": "b"})
        await client._ensure_client()

        assert client._client is not None
        assert client._client.timeout.read == 15
        assert client._client.headers["User-Agent"] == "TestAgent"
        assert client._client.headers["X-A"] == "b"
        await client.close()

    @pytest.mark.asyncio
    async def test_close_without_client(self) -> None:
        """Test close is a no-op before any request."""
        client = HTTPClient()
        await client.close()
        assert client._client is None


@pytest.mark.unit
class TestHTTPClientRequest:
    """Tests for request dispatch and error normalization."""

    @pytest.mark.asyncio
    async def test_get_returns_response(self) -> None:
        """Test GET returns the httpx response untouched."""
        client = HTTPClient()
        await client._ensure_client()
        response = _response(200)
        client._client.request = AsyncMock(return_value=response)  # type: ignore[union-attr]

        result = await client.get("https://example.com", headers={"A": "1"})

        assert result is response
        client._client.request.assert_awaited_once_with(  # type: ignore[union-attr]
            "GET", "https://example.com", headers={"A": "1"}
        )
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 403, 500])
    async def test_error_status_not_raised(self, status: int) -> None:
        """Test non-2xx statuses are returned to the caller, not raised."""
        client = HTTPClient()
        await client._ensure_client()
        client._client.request = AsyncMock(return_value=_response(status))  # type: ignore[union-attr]

        result = await client.get("https://example.com")

        assert result.status_code == status
        await client.close()

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_error(self) -> None:
        """Test httpx timeouts are reported as NetworkError."""
        client = HTTPClient(timeout=7)
        await client._ensure_client()
        client._client.request = AsyncMock(  # type: ignore[union-attr]
            side_effect=httpx.ReadTimeout("timed out")
        )

        with pytest.raises(NetworkError, match="timed out after 7s") as exc_info:
            await client.get("https://example.com")

        assert exc_info.value.url == "https://example.com"
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error_becomes_network_error(self) -> None:
        """Test connection failures are reported as NetworkError."""
        client = HTTPClient()
        await client._ensure_client()
        client._client.request = AsyncMock(  # type: ignore[union-attr]
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(NetworkError, match="connection refused"):
            await client.get("https://example.com")

        await client.close()

    @pytest.mark.asyncio
    async def test_request_is_not_retried(self) -> None:
        """Test a failed request is attempted exactly once."""
        client = HTTPClient()
        await client._ensure_client()
        mock_request = AsyncMock(side_effect=httpx.ConnectError("down"))
        client._client.request = mock_request  # type: ignore[union-attr]

        with pytest.raises(NetworkError):
            await client.get("https://example.com")

        assert mock_request.await_count == 1
        await client.close()


@pytest.mark.unit
class TestHTTPClientConcurrency:
    """Tests for the optional concurrency cap."""

    @pytest.mark.asyncio
    async def test_cap_bounds_in_flight_requests(self) -> None:
        """Test no more than max_concurrency requests run at once."""
        client = HTTPClient(max_concurrency=2)
        await client._ensure_client()

        in_flight = 0
        peak = 0

        async def fake_request(*args: Any, **kwargs: Any) -> MagicMock:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return _response(200)

        client._client.request = fake_request  # type: ignore[union-attr,assignment]

        await asyncio.gather(*(client.get(f"https://e.com/{i}") for i in range(6)))

        assert peak == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_unbounded_runs_all_at_once(self) -> None:
        """Test every request may be in flight when no cap is set."""
        client = HTTPClient()
        await client._ensure_client()

        in_flight = 0
        peak = 0

        async def fake_request(*args: Any, **kwargs: Any) -> MagicMock:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return _response(200)

        client._client.request = fake_request  # type: ignore[union-attr,assignment]

        await asyncio.gather(*(client.get(f"https://e.com/{i}") for i in range(6)))

        assert peak == 6
        await client.close()
