"""
Unit tests for the downstream service clients.
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from service_users.app.adapters.credit_score_client import CreditScoreClient
from service_users.app.adapters.user_directory_client import UserDirectoryClient
from shared.circuit_breaker import CircuitBreaker
from shared.errors import ExternalServiceError
from shared.retry import RetryConfig


def _response(status_code: int, payload=None, url: str = "http://directory.test/users") -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(payload if payload is not None else {}),
        request=httpx.Request("GET", url),
    )


def _fast_retry() -> RetryConfig:
    return RetryConfig(max_attempts=2, base_delay=0.0, jitter=False)


class TestUserDirectoryClient:
    """Test cases for UserDirectoryClient."""

    @pytest.fixture
    def directory_client(self):
        return UserDirectoryClient(
            "http://directory.test/",
            retry_config=_fast_retry(),
            circuit_breaker=CircuitBreaker(failure_threshold=5, name="test_directory"),
        )

    @pytest.mark.asyncio
    async def test_list_users_sends_pagination(self, directory_client):
        """Pagination is forwarded as query parameters."""
        users = [{"_id": "1", "name": "Ada"}]

        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=_response(200, users))
            mock_client.return_value.__aenter__.return_value.get = get

            result = await directory_client.list_users(include_deleted=True, page=2, limit=10)

        assert result == users
        get.assert_awaited_once_with(
            "http://directory.test/users",
            params={"include_deleted": "true", "page": 2, "limit": 10},
        )

    @pytest.mark.asyncio
    async def test_list_users_accepts_wrapped_page(self, directory_client):
        """A `{users: [...]}` body is unwrapped."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(200, {"users": [{"_id": "1"}], "total": 1})
            )

            result = await directory_client.list_users()

        assert result == [{"_id": "1"}]

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, directory_client):
        """404 maps to None."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=_response(404, {"error": "not found"})
            )

            assert await directory_client.get_user("99") is None

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self, directory_client):
        """A 5xx is retried and a later success is returned."""
        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(side_effect=[_response(502), _response(200, {"_id": "1"})])
            mock_client.return_value.__aenter__.return_value.get = get

            result = await directory_client.get_user("1")

        assert result == {"_id": "1"}
        assert get.await_count == 2

    @pytest.mark.asyncio
    async def test_connection_failure_raises_external_service_error(self, directory_client):
        """Exhausted retries surface as ExternalServiceError (503)."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectError("connection refused")
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await directory_client.get_user("1")

        assert exc_info.value.status_code == 503
        assert exc_info.value.service == "user_directory"

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self, directory_client):
        """Unexpected 4xx responses fail immediately."""
        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=_response(400, {"error": "bad request"}))
            mock_client.return_value.__aenter__.return_value.get = get

            with pytest.raises(ExternalServiceError):
                await directory_client.get_user("1")

        assert get.await_count == 1

    @pytest.mark.asyncio
    async def test_non_json_body_raises_external_service_error(self, directory_client):
        """A 200 with an HTML body from a proxy is an upstream failure, not a 500."""
        html = httpx.Response(
            status_code=200,
            content=b"<html>gateway</html>",
            request=httpx.Request("GET", "http://directory.test/users/1"),
        )
        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=html)
            mock_client.return_value.__aenter__.return_value.get = get

            with pytest.raises(ExternalServiceError) as exc_info:
                await directory_client.get_user("1")

        assert exc_info.value.status_code == 503
        assert "Invalid JSON response" in exc_info.value.message
        assert get.await_count == 1

    @pytest.mark.asyncio
    async def test_open_circuit_blocks_calls(self):
        """Once the breaker opens, calls fail without reaching the network."""
        client = UserDirectoryClient(
            "http://directory.test",
            retry_config=RetryConfig(max_attempts=1, base_delay=0.0, jitter=False),
            circuit_breaker=CircuitBreaker(failure_threshold=1, recovery_timeout=60.0, name="test_open"),
        )

        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
            mock_client.return_value.__aenter__.return_value.get = get

            with pytest.raises(ExternalServiceError):
                await client.get_user("1")
            with pytest.raises(ExternalServiceError):
                await client.get_user("1")

        assert get.await_count == 1
        assert client.circuit_breaker.is_open()


class TestCreditScoreClient:
    """Test cases for CreditScoreClient."""

    @pytest.mark.asyncio
    async def test_get_credit_score(self):
        """Scores are read from /credit-scores/{id}."""
        client = CreditScoreClient(
            "http://scores.test",
            retry_config=_fast_retry(),
            circuit_breaker=CircuitBreaker(name="test_scores"),
        )

        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=_response(200, {"score": 700}, "http://scores.test/credit-scores/42"))
            mock_client.return_value.__aenter__.return_value.get = get

            result = await client.get_credit_score("42")

        assert result == {"score": 700}
        get.assert_awaited_once_with("http://scores.test/credit-scores/42", params=None)
