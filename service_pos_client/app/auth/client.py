"""
Auth client for the POS client.
"""

import httpx
from typing import Optional
from pydantic import ValidationError as PydanticValidationError

from shared.logging import get_logger
from shared.errors import AuthenticationError, ExternalServiceError

from ..session.models import SessionUser


class AuthClient:
    """Client for the data service login endpoint."""

    def __init__(self, data_service_url: str, timeout: float = 5.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.data_service_url = data_service_url.rstrip('/')
        self.logger = get_logger("pos_client.auth.client")
        self._client = httpx.AsyncClient(
            base_url=self.data_service_url,
            timeout=timeout,
            transport=transport
        )

    async def close(self):
        await self._client.aclose()

    async def login(self, username: str, password: str) -> SessionUser:
        """Authenticate a user against the data service."""
        try:
            response = await self._client.post(
                "/auth/login",
                json={"username": username, "password": password}
            )
        except httpx.TimeoutException:
            self.logger.error("Data service timeout during login")
            raise ExternalServiceError("data_service", "Login timed out")
        except httpx.RequestError as e:
            self.logger.error("Data service request error", error=str(e))
            raise ExternalServiceError("data_service", "Data service unavailable")

        if response.status_code >= 500:
            self.logger.error("Login failed upstream", status_code=response.status_code)
            raise ExternalServiceError(
                "data_service",
                "Login failed",
                details={"status_code": response.status_code}
            )

        try:
            data = response.json()
        except ValueError:
            raise ExternalServiceError("data_service", "Malformed login response")

        if not isinstance(data, dict):
            self.logger.error("Login response is not an object", status_code=response.status_code)
            raise ExternalServiceError("data_service", "Malformed login response")

        if response.status_code != 200 or not data.get("success"):
            self.logger.info("Login rejected", username=username)
            raise AuthenticationError(data.get("message") or "Invalid username or password")

        try:
            user = SessionUser.model_validate(data.get("user"))
        except PydanticValidationError as e:
            self.logger.error("Malformed user in login response", error=str(e))
            raise ExternalServiceError("data_service", "Malformed login response")

        self.logger.info("Login succeeded", user_id=user.id, role_id=user.role_id)
        return user
