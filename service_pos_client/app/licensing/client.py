"""
License service client for the POS client.
"""

from typing import Any, Dict, Optional
import httpx
from pydantic import ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.errors import LicenseServiceUnavailableError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.retry import retry_on_exception, RetryConfig, RetryError

from .models import LicenseState, ActivationResponse, FirstRunState


class LicenseServiceClient:
    """Client for the five license service operations."""

    REJECTION_STATUSES = (400, 409, 422)

    def __init__(
        self,
        license_service_url: str,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = license_service_url.rstrip('/')
        self.logger = get_logger("pos_client.license.client")

        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=30.0,
            name="license_service"
        )

        self.retry_config = retry_config or RetryConfig(
            max_attempts=3,
            base_delay=0.5,
            max_delay=5.0,
            exponential_base=2.0,
            jitter=True
        )

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
        )

    async def close(self):
        """Release the connection pool."""
        await self._client.aclose()

    async def query_license_state(self) -> LicenseState:
        """Fetch the current license state."""
        data = await self._read("GET", "/license/state")
        try:
            return LicenseState.model_validate(data)
        except PydanticValidationError as exc:
            self.logger.error("Malformed license state", body=data, error=str(exc))
            raise LicenseServiceUnavailableError(
                "Malformed license state",
                details={"error": str(exc)}
            )

    async def reconcile_license_state(self) -> None:
        """Ask the service to recompute its own license bookkeeping."""
        await self._send("POST", "/license/reconcile")

    async def activate_license(self, code: str) -> ActivationResponse:
        """Submit an activation code, exactly once."""
        async def _activate():
            response = await self._client.post("/license/activate", json={"code": code})
            # Rejections may come back as 4xx with a structured body
            if response.status_code not in self.REJECTION_STATUSES:
                response.raise_for_status()
            return response.json()

        try:
            data = await self.circuit_breaker.call(_activate)
        except (httpx.HTTPError, CircuitBreakerOpenException, ValueError) as exc:
            raise self._unavailable("/license/activate", exc)

        try:
            return ActivationResponse.model_validate(data)
        except PydanticValidationError as exc:
            self.logger.error("Malformed activation response", body=data, error=str(exc))
            raise LicenseServiceUnavailableError(
                "Malformed activation response",
                details={"error": str(exc)}
            )

    async def query_first_run(self) -> FirstRunState:
        """Fetch the persisted first-run flag."""
        data = await self._read("GET", "/license/first-run")
        value = data.get("is_first_run") if isinstance(data, dict) else None
        if not isinstance(value, bool):
            raise LicenseServiceUnavailableError(
                "Malformed first-run response",
                details={"body": data}
            )
        return FirstRunState(is_first_run=value)

    async def mark_first_run_seen(self) -> None:
        """Persist the irreversible "do not show again" choice."""
        await self._send("POST", "/license/first-run/seen")

    async def health_check(self) -> bool:
        """Check if the license service is reachable."""
        try:
            response = await self._client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._client.request(method, path, json=json)
        response.raise_for_status()
        return response.json()

    async def _read(self, method: str, path: str) -> Any:
        """Idempotent call: retried on transport errors."""
        @retry_on_exception(
            (httpx.HTTPError,),
            config=self.retry_config,
            logger=self.logger.bind(method=method, path=path)
        )
        async def _attempt():
            return await self.circuit_breaker.call(self._request, method, path)

        try:
            return await _attempt()
        except RetryError as exc:
            raise self._unavailable(path, exc.last_exception)
        except (CircuitBreakerOpenException, ValueError) as exc:
            raise self._unavailable(path, exc)

    async def _send(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        """Side-effecting call: never retried."""
        try:
            return await self.circuit_breaker.call(self._request, method, path, json)
        except (httpx.HTTPError, CircuitBreakerOpenException, ValueError) as exc:
            raise self._unavailable(path, exc)

    def _unavailable(self, path: str, exc: BaseException) -> LicenseServiceUnavailableError:
        details: Dict[str, Any] = {"path": path, "error": str(exc)}
        if isinstance(exc, httpx.HTTPStatusError):
            details["status_code"] = exc.response.status_code
        self.logger.error("License service request failed", **details)
        return LicenseServiceUnavailableError(details=details)
