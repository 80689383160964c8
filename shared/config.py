"""
Shared configuration management for the User Access API.
"""

from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="USERS_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info")

    # Cache store
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_socket_timeout: float = Field(default=2.0)
    cache_enabled: bool = Field(default=True)
    cache_namespace: str = Field(default="users-api")

    # Route TTLs (seconds)
    users_list_cache_ttl: int = Field(default=120)
    user_by_id_cache_ttl: int = Field(default=300)
    credit_score_cache_ttl: int = Field(default=600)

    # Token verification
    jwt_secret: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: Optional[str] = Field(default=None)
    jwt_audience: Optional[str] = Field(default=None)

    # Downstream services
    user_directory_url: str = Field(default="http://localhost:8020")
    credit_score_service_url: str = Field(default="http://localhost:8030")

    # Role -> capability grants; empty means the built-in table
    role_capabilities: Dict[str, List[str]] = Field(default_factory=dict)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
