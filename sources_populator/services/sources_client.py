# -*- coding: utf-8 -*-
"""Location: ./sources_populator/services/sources_client.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Sources API client.

Thin asynchronous wrapper around ``httpx.AsyncClient`` exposing the handful of
calls the populator needs:

- ``health_check``: confirm the back end is up before anything else happens
- ``fetch_source_types`` / ``fetch_application_types``: catalog reads
- ``create_resource``: one fixture creation, reported as a tri-state
  :class:`CreationResult` instead of raising
"""

# Standard
from dataclasses import dataclass
from enum import Enum
import logging
from typing import List, Optional, Type, TypeVar

# Third-Party
import httpx
from pydantic import BaseModel, ValidationError

# First-Party
from sources_populator.config import Settings
from sources_populator.models import ApplicationTypeCollection, ApplicationTypeRecord, ResourceKind, SourceTypeCollection, SourceTypeRecord
from sources_populator.utils.identity import catalog_identity, IDENTITY_HEADER

logger = logging.getLogger(__name__)

CollectionT = TypeVar("CollectionT", bound=BaseModel)


class SourcesApiError(Exception):
    """Raised when the back end cannot be reached or answers a read unexpectedly."""


class CreationStatus(str, Enum):
    """Outcome of a single creation request."""

    TRANSPORT_ERROR = "transport_error"
    UNEXPECTED_STATUS = "unexpected_status"
    CREATED = "created"


@dataclass(frozen=True)
class CreationResult:
    """What came back from a creation request.

    Attributes:
        status: Tri-state outcome
        status_code: HTTP status, when a response was received
        body: Raw response body, when a response was received
        error: Transport error description, for ``TRANSPORT_ERROR``
    """

    status: CreationStatus
    status_code: Optional[int] = None
    body: bytes = b""
    error: Optional[str] = None

    @property
    def created(self) -> bool:
        """Whether the resource was created.

        Returns:
            bool: True for ``CREATED``.
        """
        return self.status is CreationStatus.CREATED

    @classmethod
    def transport_error(cls, error: str) -> "CreationResult":
        """Build a result for a request that never got a response.

        Args:
            error: Error description

        Returns:
            CreationResult: A ``TRANSPORT_ERROR`` result.

        Examples:
            >>> CreationResult.transport_error("timed out").created
            False
        """
        return cls(status=CreationStatus.TRANSPORT_ERROR, error=error)


class SourcesApiClient:
    """Client for the Sources API back end.

    Use it as an async context manager so the underlying connection pool is
    closed once the run is over.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the client.

        Args:
            settings: Populator settings
            transport: Optional transport, e.g. ``httpx.MockTransport`` in tests
        """
        self.settings = settings
        self._urls = settings.creation_urls()
        limits = httpx.Limits(max_connections=settings.concurrent_requests, max_keepalive_connections=settings.concurrent_requests)
        self._client = httpx.AsyncClient(
            transport=transport,
            limits=limits,
            timeout=httpx.Timeout(settings.request_timeout),
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "SourcesApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the connection pool."""
        await self._client.aclose()

    async def health_check(self) -> None:
        """Check that the back end is online.

        Raises:
            SourcesApiError: If the request fails or the status is not 200.
        """
        url = self.settings.health_url
        try:
            response = await self._client.get(url, headers={IDENTITY_HEADER: catalog_identity()}, timeout=self.settings.health_check_timeout)
        except httpx.HTTPError as e:
            raise SourcesApiError(f"Could not send the health check request to {url}: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise SourcesApiError(f"Unexpected status code received from the health check: want {httpx.codes.OK}, got {response.status_code}")

        logger.debug(f"Health check passed for {url}")

    async def fetch_source_types(self) -> List[SourceTypeRecord]:
        """Fetch every source type together with its authentication kinds.

        Returns:
            List[SourceTypeRecord]: Source types.

        Raises:
            SourcesApiError: If the request fails or the body is malformed.
        """
        return (await self._fetch_collection("source_types", SourceTypeCollection)).data

    async def fetch_application_types(self) -> List[ApplicationTypeRecord]:
        """Fetch every application type together with its compatibility data.

        Returns:
            List[ApplicationTypeRecord]: Application types.

        Raises:
            SourcesApiError: If the request fails or the body is malformed.
        """
        return (await self._fetch_collection("application_types", ApplicationTypeCollection)).data

    async def _fetch_collection(self, collection: str, model: Type[CollectionT]) -> CollectionT:
        """GET a collection and validate its envelope.

        Args:
            collection: Collection name
            model: Envelope model

        Returns:
            The validated envelope.

        Raises:
            SourcesApiError: If the request fails or the body is malformed.
        """
        url = self.settings.collection_url(collection)
        try:
            response = await self._client.get(url, headers={IDENTITY_HEADER: catalog_identity()}, timeout=self.settings.catalog_timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourcesApiError(f"Could not get the {collection.replace('_', ' ')} from {url}: {e}") from e

        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise SourcesApiError(f"Malformed {collection.replace('_', ' ')} response from {url}: {e}") from e

    async def create_resource(self, kind: ResourceKind, tenant: str, body: bytes) -> CreationResult:
        """Send one creation request.

        Args:
            kind: Kind of the fixture
            tenant: Encoded identity of the owning tenant
            body: JSON request body

        Returns:
            CreationResult: ``CREATED`` on a 201 response, ``UNEXPECTED_STATUS`` on
            any other response, ``TRANSPORT_ERROR`` when no response arrived.
        """
        url = self._urls[kind]
        logger.debug(f"Sending {kind.value} creation request", extra={"resource_type": kind.value, "url": url, "body": body.decode("utf-8", "replace")})

        try:
            response = await self._client.post(url, content=body, headers={IDENTITY_HEADER: tenant, "Content-Type": "application/json"})
        except httpx.HTTPError as e:
            return CreationResult.transport_error(f"{type(e).__name__}: {e}")

        status = CreationStatus.CREATED if response.status_code == httpx.codes.CREATED else CreationStatus.UNEXPECTED_STATUS
        return CreationResult(status=status, status_code=response.status_code, body=response.content)
