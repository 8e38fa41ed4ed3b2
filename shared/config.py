"""
Shared configuration management for the Random Data Service.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Log level name")

    # Observability
    enable_metrics: bool = Field(default=True, description="Expose /metrics")

    # Security
    jwks_url: str = Field(default="", description="JWKS endpoint fetched on every request")
    jwt_algorithms: List[str] = Field(
        default=["RS256", "RS384", "RS512", "ES256", "ES384", "ES512"],
        description="Accepted JWT signing algorithms"
    )
    jwt_audience: Optional[str] = Field(default=None, description="Expected aud claim")
    jwt_issuer: Optional[str] = Field(default=None, description="Expected iss claim")

    # HTTP server
    read_timeout: float = Field(default=10.0, gt=0, description="Seconds")
    write_timeout: float = Field(default=10.0, gt=0, description="Seconds")
    max_header_bytes: int = Field(default=1 << 20, gt=0, description="Request header size cap")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="Bind port")


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service.

    Keyword overrides take precedence over environment variables.
    """
    return ServiceConfig(service_name=service_name, **overrides)
