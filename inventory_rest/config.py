"""
Configuration module for the inventory REST client.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the inventory REST client.

    Attributes:
        OPENMRS_URL: Scheme and host of the OpenMRS server
        REST_ROOT_PATH: Path of the REST web service root on that server
        DEFAULT_REST_VERSION: API version used when none is given
        REQUEST_TIMEOUT: Timeout for HTTP requests in seconds
        ENABLE_HTTP2: Negotiate HTTP/2 on the pooled client
        OPENMRS_USERNAME: Basic auth user, auth is disabled when unset
        OPENMRS_PASSWORD: Basic auth password
        USER_AGENT: User-Agent header sent with every request
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Emit JSON structured logs instead of colored text
        ENABLE_REQUEST_TRACING: Forward the context request ID as X-Request-ID
    """

    OPENMRS_URL: str = Field(
        default="http://localhost:8080",
        description="Scheme and host of the OpenMRS server",
    )
    REST_ROOT_PATH: str = Field(
        default="/openmrs/ws/rest",
        description="Path of the REST web service root",
    )
    DEFAULT_REST_VERSION: str = Field(
        default="v2",
        min_length=1,
        description="REST API version used when none is given",
    )

    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=60.0,
        description="Timeout for HTTP requests in seconds",
    )
    ENABLE_HTTP2: bool = Field(
        default=True,
        description="Negotiate HTTP/2 on the pooled client",
    )

    OPENMRS_USERNAME: Optional[str] = Field(
        default=None,
        description="Basic auth user name",
    )
    OPENMRS_PASSWORD: Optional[str] = Field(
        default=None,
        description="Basic auth password",
    )
    USER_AGENT: str = Field(
        default="OpenHMIS-Inventory-Client/1.0",
        description="User-Agent header value",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON structured logging",
    )
    ENABLE_REQUEST_TRACING: bool = Field(
        default=True,
        description="Forward request IDs to the server",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("OPENMRS_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """
        Validate that the server URL is properly formatted.

        Args:
            value: The URL to validate

        Returns:
            The validated URL without trailing slash

        Raises:
            ValueError: If URL is invalid
        """
        if not value:
            raise ValueError("Server URL cannot be empty")

        value = value.rstrip("/")

        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError(
                f"Server URL must start with http:// or https://, got: {value}"
            )

        return value

    @field_validator("REST_ROOT_PATH")
    @classmethod
    def normalize_root_path(cls, value: str) -> str:
        """Force a leading slash and strip any trailing one."""
        return "/" + value.strip("/")

    def rest_base_url(self, resource: str, version: Optional[str] = None) -> str:
        """
        Build the relative base URL for a REST resource.

        Args:
            resource: Module resource name, e.g. ``inventory``
            version: API version, defaults to DEFAULT_REST_VERSION

        Returns:
            Path of the form ``/openmrs/ws/rest/v2/inventory/``
        """
        version = version or self.DEFAULT_REST_VERSION
        return f"{self.REST_ROOT_PATH}/{version}/{resource}/"


# Global settings instance
settings = Settings()
