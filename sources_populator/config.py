# -*- coding: utf-8 -*-
"""Location: ./sources_populator/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Sources populator configuration settings.

Settings are loaded from environment variables (or a ``.env`` file) with
sensible defaults, using Pydantic. Only the Sources API host and port are
mandatory.

Environment Variables:
- SOURCES_API_HOST: Back end host, scheme included (required)
- SOURCES_API_PORT: Back end port (required)
- LOG_LEVEL: debug, info, warn or error (default: "info")
- LOG_FORMAT: json or text (default: "json")
- CONCURRENT_REQUESTS: Maximum simultaneous creation requests (default: 10)
- NUMBER_OF_TENANTS: Tenants to create fixtures for (default: 3)
- SOURCES_PER_TENANT: Sources per tenant (default: 10)
- APPLICATIONS_PER_SOURCE: Applications per source (default: 10)
- ENDPOINTS_PER_SOURCE: Endpoints per source (default: 10)
- RHC_CONNECTIONS_PER_TENANT: RHC connections per source (default: 10)
- AUTHENTICATIONS_PER_RESOURCE: Authentications per source and application (default: 3)
- REQUEST_TIMEOUT, CATALOG_TIMEOUT, HEALTH_CHECK_TIMEOUT: Per call deadlines in seconds
- MAX_ATTEMPTS: Attempts per creation request (default: 1, no retries)
- RANDOM_SEED: Seed for reproducible random picks (default: unset)

Examples:
    >>> s = Settings(sources_api_host="http://localhost", sources_api_port=8000)
    >>> s.api_url
    'http://localhost:8000/api/sources/v3.1'
    >>> s.collection_url("rhc_connections")
    'http://localhost:8000/api/sources/v3.1/rhc_connections'
"""

# Standard
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Literal, Optional

# Third-Party
from pydantic import Field, field_validator, model_validator, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# First-Party
from sources_populator.models import ResourceKind

SOURCES_V31_PATH = "api/sources/v3.1"

DEFAULT_CONCURRENT_REQUESTS = 10

_LOG_LEVELS = {"debug": "debug", "info": "info", "warn": "warning", "warning": "warning", "error": "error"}


class ConfigurationError(Exception):
    """Raised when the configuration is missing or invalid."""


class Settings(BaseSettings):
    """Populator settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Back end
    sources_api_host: str = Field(..., description="Sources API host, including the scheme")
    sources_api_port: int = Field(..., description="Sources API port")

    # Logging
    log_level: str = Field("info", description="Log level")
    log_format: Literal["json", "text"] = Field("json", description="Log record format")

    # Generation parameters
    concurrent_requests: int = Field(DEFAULT_CONCURRENT_REQUESTS, description="Maximum simultaneous creation requests")
    number_of_tenants: int = Field(3, ge=0, description="Number of tenants to create")
    sources_per_tenant: int = Field(10, ge=0, description="Sources created per tenant")
    applications_per_source: int = Field(10, ge=0, description="Applications created per source")
    endpoints_per_source: int = Field(10, ge=0, description="Endpoints created per source")
    rhc_connections_per_tenant: int = Field(10, ge=0, description="RHC connections created per source")
    authentications_per_resource: int = Field(3, ge=0, description="Authentications created per source and per application")

    # Timeouts (seconds)
    request_timeout: float = Field(10.0, gt=0, description="Deadline of every creation request")
    catalog_timeout: float = Field(3.0, gt=0, description="Deadline of every catalog request")
    health_check_timeout: float = Field(3.0, gt=0, description="Deadline of the health check")

    # Failure policy
    max_attempts: int = Field(1, ge=1, description="Attempts per creation request; 1 drops a unit on its first failure")

    random_seed: Optional[int] = Field(None, description="Seed for the random sources")

    _requested_concurrency: Optional[int] = PrivateAttr(None)

    @field_validator("sources_api_host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        """Reject an empty host and drop trailing slashes.

        Args:
            value: Raw host

        Returns:
            str: Normalized host.

        Raises:
            ValueError: If the host is empty.
        """
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("configuration missing: Sources API host")
        return value

    @field_validator("sources_api_port")
    @classmethod
    def _validate_port(cls, value: int) -> int:
        """Reject a zero or negative port.

        Args:
            value: Raw port

        Returns:
            int: The port.

        Raises:
            ValueError: If the port is not positive.
        """
        if value <= 0:
            raise ValueError("configuration missing: Sources API port")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Optional[str]) -> str:
        """Map the log level onto a logging level name, defaulting to info.

        Args:
            value: Raw log level

        Returns:
            str: One of debug, info, warning or error.

        Examples:
            >>> Settings(sources_api_host="http://localhost", sources_api_port=8000, log_level="WARN").log_level
            'warning'
            >>> Settings(sources_api_host="http://localhost", sources_api_port=8000, log_level="verbose").log_level
            'info'
        """
        return _LOG_LEVELS.get(str(value or "").strip().lower(), "info")

    @model_validator(mode="after")
    def _fall_back_concurrency(self) -> "Settings":
        """Fall back to the default ceiling when fewer than one request is allowed.

        The requested value is kept so the caller can report the fallback once
        logging is configured.

        Returns:
            Settings: These settings, with a ceiling of at least one.
        """
        if self.concurrent_requests < 1:
            self._requested_concurrency = self.concurrent_requests
            self.concurrent_requests = DEFAULT_CONCURRENT_REQUESTS
        return self

    @property
    def concurrency_warning(self) -> Optional[str]:
        """Warning describing a concurrency fallback, if one happened.

        Returns:
            Optional[str]: The warning, or None when the requested ceiling was used.

        Examples:
            >>> Settings(sources_api_host="http://localhost", sources_api_port=8000, concurrent_requests=0).concurrency_warning
            'You specified less than 1 concurrent requests: 0. Defaulting to 10'
            >>> Settings(sources_api_host="http://localhost", sources_api_port=8000, concurrent_requests=2).concurrency_warning is None
            True
        """
        if self._requested_concurrency is None:
            return None
        return f"You specified less than 1 concurrent requests: {self._requested_concurrency}. Defaulting to {DEFAULT_CONCURRENT_REQUESTS}"

    @property
    def base_url(self) -> str:
        """Scheme, host and port of the back end.

        Returns:
            str: Base URL.
        """
        return f"{self.sources_api_host}:{self.sources_api_port}"

    @property
    def api_url(self) -> str:
        """Base URL of the versioned API.

        Returns:
            str: API URL.
        """
        return f"{self.base_url}/{SOURCES_V31_PATH}"

    @property
    def health_url(self) -> str:
        """URL of the health check endpoint.

        Returns:
            str: Health URL.
        """
        return f"{self.base_url}/health"

    def collection_url(self, collection: str) -> str:
        """URL of an API collection.

        Args:
            collection: Collection name, e.g. ``source_types``

        Returns:
            str: Collection URL.
        """
        return f"{self.api_url}/{collection}"

    def creation_urls(self) -> Dict[ResourceKind, str]:
        """Creation endpoint of every fixture kind.

        Returns:
            Dict[ResourceKind, str]: URLs keyed by kind.
        """
        return {kind: self.collection_url(kind.collection) for kind in ResourceKind}

    def generation_plan(self) -> "GenerationPlan":
        """Build the generation parameters out of these settings.

        Returns:
            GenerationPlan: Plan consumed by the populator.
        """
        return GenerationPlan(
            tenants=self.number_of_tenants,
            sources_per_tenant=self.sources_per_tenant,
            applications_per_source=self.applications_per_source,
            endpoints_per_source=self.endpoints_per_source,
            rhc_connections_per_source=self.rhc_connections_per_tenant,
            authentications_per_resource=self.authentications_per_resource,
            concurrency=self.concurrent_requests,
        )


@dataclass(frozen=True)
class GenerationPlan:
    """How many fixtures of every kind to create, and how many calls may overlap.

    Examples:
        >>> plan = GenerationPlan(tenants=1, sources_per_tenant=1, applications_per_source=1, endpoints_per_source=0, rhc_connections_per_source=0, authentications_per_resource=1)
        >>> plan.expected_totals()[ResourceKind.AUTHENTICATION]
        2
    """

    tenants: int
    sources_per_tenant: int
    applications_per_source: int
    endpoints_per_source: int
    rhc_connections_per_source: int
    authentications_per_resource: int
    concurrency: int = DEFAULT_CONCURRENT_REQUESTS

    def expected_totals(self) -> Dict[ResourceKind, int]:
        """Totals a run produces when every creation request succeeds.

        Returns:
            Dict[ResourceKind, int]: Planned totals keyed by kind.
        """
        sources = self.tenants * self.sources_per_tenant
        applications = sources * self.applications_per_source
        return {
            ResourceKind.SOURCE: sources,
            ResourceKind.APPLICATION: applications,
            ResourceKind.ENDPOINT: sources * self.endpoints_per_source,
            ResourceKind.AUTHENTICATION: (sources + applications) * self.authentications_per_resource,
            ResourceKind.RHC_CONNECTION: sources * self.rhc_connections_per_source,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: A cached instance of the Settings class.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    try:
        return Settings()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


def load_settings(**overrides: Any) -> Settings:
    """Load settings, letting explicit values win over the environment.

    Args:
        **overrides: Field values, ``None`` entries are ignored

    Returns:
        Settings: A fresh, uncached settings instance.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    try:
        return Settings(**{key: value for key, value in overrides.items() if value is not None})
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
