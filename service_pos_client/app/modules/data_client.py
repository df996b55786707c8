"""
Data service client for the POS client feature modules.
"""

from typing import Any, Dict, Optional
import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError, ValidationError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException


class DataServiceClient:
    """Thin request/response wrapper over the data service CRUD API."""

    def __init__(
        self,
        data_service_url: str,
        timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.data_service_url = data_service_url.rstrip('/')
        self.logger = get_logger("pos_client.data.client")
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=30.0,
            name="data_service"
        )
        self._client = httpx.AsyncClient(
            base_url=self.data_service_url,
            timeout=timeout,
            transport=transport
        )

    async def close(self):
        await self._client.aclose()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._call("GET", path, params=params)

    async def post(self, path: str, payload: Dict[str, Any]) -> Any:
        return await self._call("POST", path, json=payload)

    async def put(self, path: str, payload: Dict[str, Any]) -> Any:
        return await self._call("PUT", path, json=payload)

    async def health_check(self) -> bool:
        try:
            response = await self._client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        async def _request():
            response = await self._client.request(method, path, **kwargs)
            if response.status_code >= 500:
                response.raise_for_status()
            return response

        try:
            response = await self.circuit_breaker.call(_request)
        except (httpx.HTTPError, CircuitBreakerOpenException) as e:
            self.logger.error("Data service request failed", method=method, path=path, error=str(e))
            raise ExternalServiceError("data_service", "Data service unavailable", details={"path": path})

        try:
            data = response.json() if response.content else None
        except ValueError:
            raise ExternalServiceError("data_service", "Malformed response", details={"path": path})

        if response.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            self.logger.warning(
                "Data service rejected request",
                method=method,
                path=path,
                status_code=response.status_code
            )
            raise ValidationError(
                message or f"Request rejected ({response.status_code})",
                details={"path": path, "status_code": response.status_code}
            )

        return data
