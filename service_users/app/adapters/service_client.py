"""
Base HTTP client with retries and circuit breaking.
"""

from typing import Any, Dict, Optional

import httpx

from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException, get_circuit_breaker
from shared.errors import ExternalServiceError
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryError, retry_on_exception


class ServiceClient:
    """JSON-over-HTTP client for one downstream service.

    Transport failures and 5xx responses are retried; 404 maps to ``None``;
    anything else that is not a 200 raises ``ExternalServiceError``.
    """

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.logger = get_logger(f"users.{self.service_name}_client")
        self.retry_config = retry_config or RetryConfig(
            max_attempts=3,
            base_delay=0.5,
            max_delay=5.0,
            exponential_base=2.0,
            jitter=True
        )
        self.circuit_breaker = circuit_breaker or get_circuit_breaker(
            self.service_name,
            failure_threshold=3,
            recovery_timeout=30.0
        )

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """GET path and return decoded JSON, or None when the resource does not exist."""
        url = f"{self.base_url}{path}"

        async def _request():
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)

            if response.status_code == 200:
                try:
                    payload = response.json()
                except ValueError as exc:
                    self.logger.error("Downstream returned invalid JSON", url=url, error=str(exc))
                    raise ExternalServiceError(
                        service=self.service_name,
                        message="Invalid JSON response",
                        details={"status_code": response.status_code}
                    ) from exc
                self.logger.debug("Downstream request succeeded", url=url, params=params)
                return payload

            if response.status_code == 404:
                self.logger.info("Downstream resource not found", url=url, params=params)
                return None

            if response.status_code >= 500:
                response.raise_for_status()

            self.logger.error(
                "Downstream request failed",
                url=url,
                params=params,
                status_code=response.status_code,
                response=response.text
            )
            raise ExternalServiceError(
                service=self.service_name,
                message=f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code}
            )

        retrying = retry_on_exception((httpx.HTTPError,), config=self.retry_config)(_request)

        try:
            return await self.circuit_breaker.call(retrying)
        except ExternalServiceError:
            raise
        except (httpx.HTTPError, RetryError, CircuitBreakerOpenException) as exc:
            self.logger.error("Downstream service unavailable", url=url, error=str(exc))
            raise ExternalServiceError(
                service=self.service_name,
                message="Service unavailable",
                details={"error": str(exc)}
            ) from exc

    async def check_health(self) -> str:
        """Return 'ok' if the service answers its health endpoint, otherwise 'error'."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/health")
            return "ok" if response.status_code == 200 else "error"
        except httpx.HTTPError as exc:
            self.logger.warning("Health check failed", error=str(exc))
            return "error"
