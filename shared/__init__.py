"""
Shared utilities for the User Access API.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- retry: Retry decorators for outbound calls
- circuit_breaker: Resilient external call protection
- base_service: FastAPI service shell (health, metrics, error handlers)

Do not import from service packages into shared/.
"""
