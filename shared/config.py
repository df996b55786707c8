"""
Shared configuration management for the POS client.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="POS_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Root log level")

    # Backend services
    license_service_url: str = Field(default="http://localhost:8020", description="License service base URL")
    data_service_url: str = Field(default="http://localhost:8021", description="Data service base URL")
    request_timeout_seconds: float = Field(default=10.0, description="Per-request timeout")

    # License service resilience
    license_retry_attempts: int = Field(default=3, description="Attempts for idempotent license reads")
    license_retry_base_delay: float = Field(default=0.5, description="Base backoff delay in seconds")
    circuit_breaker_failure_threshold: int = Field(default=3, description="Failures before the breaker opens")
    circuit_breaker_recovery_timeout: float = Field(default=30.0, description="Seconds before a half-open probe")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "127.0.0.1"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
