"""
Shared utilities for the POS client.

This package aggregates common building blocks consumed by the client
service, its feature modules and the local mocks:

- config: Service configuration via pydantic-settings
- logging: Structured logging with session correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- retry: Retry decorator for idempotent backend reads
- circuit_breaker: Resilient backend call protection
- base_service: FastAPI service skeleton
- test_helpers: Payload factories and stub backends for tests

Do not import from service_* packages into shared/.
"""
