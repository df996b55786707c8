"""
Shared error handling for the POS client.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import session_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    session_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class PosClientException(Exception):
    """Base exception for POS client components."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            session_id=session_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(PosClientException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class AuthorizationError(PosClientException):
    """Authorization-related errors."""

    status_code = 403

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class ValidationError(PosClientException):
    """Validation-related errors."""

    status_code = 422

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ServiceError(PosClientException):
    """Service-related errors."""

    status_code = 500

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)


class ExternalServiceError(PosClientException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)
        self.service = service


class LicenseServiceUnavailableError(ExternalServiceError):
    """License service unreachable or answered with something unusable."""

    def __init__(self, message: str = "License service unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("license_service", message, details)
        self.code = "LICENSE_SERVICE_UNAVAILABLE"


class LicenseReconcileError(ExternalServiceError):
    """Reconcile call failed after the license state was already applied."""

    def __init__(self, state: Any, message: str = "License reconcile failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("license_service", message, details)
        self.code = "LICENSE_RECONCILE_FAILED"
        self.state = state


class LicenseReadOnlyError(PosClientException):
    """Mutating action refused because the license is in read-only mode."""

    status_code = 403

    def __init__(self, message: str = "Activate your license to make changes", details: Optional[Dict[str, Any]] = None):
        super().__init__("LICENSE_READ_ONLY", message, details)


class InvalidTransitionError(PosClientException):
    """Session view transition not allowed from the current view."""

    status_code = 409

    def __init__(self, source: str, target: str):
        super().__init__(
            "INVALID_TRANSITION",
            f"Cannot move from {source} to {target}",
            {"source": source, "target": target}
        )
