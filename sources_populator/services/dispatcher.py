# -*- coding: utf-8 -*-
"""Location: ./sources_populator/services/dispatcher.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Bounded creation dispatcher.

Every fixture is created by its own asyncio task, and any number of those
tasks may be pending at once. The expensive part is the outbound creation
call, so that is the one thing that is throttled: each call must first take a
unit from a single, shared admission gate (an ``asyncio.Semaphore`` of capacity
``C``) and gives it back as soon as the call returns, whatever the outcome.

Task lifecycle::

    created -> awaiting-gate -> in-flight -> succeeded | failed

A failed task logs the failure and ends. Nothing is cancelled, no sibling or
parent is told, and no counter moves. Scopes (tenant, source, application) own a
:class:`TaskScope` and join it before they report completion.

Examples:
    >>> counters = ResourceCounters()
    >>> counters.increment(ResourceKind.SOURCE)
    >>> counters.totals()["sources"]
    1
"""

# Standard
import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional

# Third-Party
import orjson
from pydantic import BaseModel

# First-Party
from sources_populator.models import decode_created, encode_payload, ResourceKind
from sources_populator.services.sources_client import CreationResult, CreationStatus, SourcesApiClient

logger = logging.getLogger(__name__)

# Keys of the final report, one per fixture kind.
TOTAL_KEYS = {
    ResourceKind.SOURCE: "sources",
    ResourceKind.APPLICATION: "applications",
    ResourceKind.AUTHENTICATION: "authentications",
    ResourceKind.ENDPOINT: "endpoints",
    ResourceKind.RHC_CONNECTION: "rhcConnections",
}


class ResourceCounters:
    """Per-kind totals of successfully created fixtures.

    Every task runs on the same event loop and an increment never spans an
    ``await``, so updates need no lock.
    """

    def __init__(self):
        """Start every kind at zero."""
        self._counts: Dict[ResourceKind, int] = {kind: 0 for kind in ResourceKind}

    def increment(self, kind: ResourceKind) -> None:
        """Count one more created fixture.

        Args:
            kind: Kind of the created fixture
        """
        self._counts[kind] += 1

    def __getitem__(self, kind: ResourceKind) -> int:
        return self._counts[kind]

    def total(self) -> int:
        """Total fixtures created, all kinds together.

        Returns:
            int: Sum of every counter.
        """
        return sum(self._counts.values())

    def totals(self) -> Dict[str, int]:
        """Totals keyed by their report name.

        Returns:
            Dict[str, int]: e.g. ``{"sources": 1, "applications": 1, ...}``.
        """
        return {TOTAL_KEYS[kind]: count for kind, count in self._counts.items()}


class TaskScope:
    """Join handle for the tasks a scope spawns.

    Use it as an async context manager: leaving the ``async with`` block waits
    for every spawned task. A task that raises is logged; its siblings keep
    running and the exception does not reach the scope owner.
    """

    def __init__(self, name: str = "scope"):
        """Initialize an empty scope.

        Args:
            name: Scope description used in log messages
        """
        self.name = name
        self._tasks: List[asyncio.Task] = []

    def spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        """Schedule a child task.

        Args:
            coro: Coroutine to run

        Returns:
            asyncio.Task: The scheduled task.
        """
        task = asyncio.ensure_future(coro)
        self._tasks.append(task)
        return task

    def __len__(self) -> int:
        return len(self._tasks)

    async def join(self) -> None:
        """Wait for every task spawned so far, including ones spawned while waiting."""
        while self._tasks:
            pending, self._tasks = self._tasks, []
            results = await asyncio.gather(*pending, return_exceptions=True)
            for result in results:
                if isinstance(result, asyncio.CancelledError):
                    logger.warning(f"A task of {self.name} was cancelled")
                elif isinstance(result, Exception):
                    logger.error(f"A task of {self.name} failed: {result}", exc_info=result)

    async def __aenter__(self) -> "TaskScope":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.join()
        return False


class BoundedDispatcher:
    """Run creation requests while capping how many are in flight at once."""

    def __init__(self, client: SourcesApiClient, concurrency: int, request_timeout: float = 10.0, max_attempts: int = 1):
        """Initialize the dispatcher.

        Args:
            client: Object exposing ``create_resource(kind, tenant, body)``
            concurrency: Capacity of the admission gate
            request_timeout: Deadline of every individual creation call, in seconds
            max_attempts: Attempts per unit; 1 drops a unit on its first failure

        Raises:
            ValueError: If ``concurrency`` or ``max_attempts`` is lower than one.
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self._client = client
        self._gate = asyncio.Semaphore(concurrency)
        self.concurrency = concurrency
        self.request_timeout = request_timeout
        self.max_attempts = max_attempts
        self.counters = ResourceCounters()
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def in_flight(self) -> int:
        """Creation calls currently holding a unit of the gate.

        Returns:
            int: In-flight calls.
        """
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of simultaneous creation calls seen so far.

        Returns:
            int: Peak in-flight calls, never above ``concurrency``.
        """
        return self._peak_in_flight

    async def create(self, kind: ResourceKind, tenant: str, payload: BaseModel) -> Optional[str]:
        """Create one fixture.

        Args:
            kind: Kind of the fixture
            tenant: Encoded identity of the owning tenant
            payload: Creation request

        Returns:
            Optional[str]: ID of the created fixture, or ``None`` when the unit was
            dropped.
        """
        try:
            body = encode_payload(payload)
        except (orjson.JSONEncodeError, TypeError, ValueError) as e:
            logger.error(f'Could not marshal "{type(payload).__name__}" into JSON. Skipping...', extra={"resource_type": kind.value, "error": str(e)})
            return None

        result: Optional[CreationResult] = None
        for attempt in range(1, self.max_attempts + 1):
            result = await self._send(kind, tenant, body)
            if result.created:
                break
            self._log_failure(kind, tenant, body, result, attempt)
        else:
            return None

        created = decode_created(result.body)
        if created is None:
            logger.error(
                f"Could not extract ID from {kind.label.lower()} creation response. Skipping...",
                extra={"resource_type": kind.value, "tenant": tenant, "request_body": body.decode("utf-8", "replace"), "response_body": result.body.decode("utf-8", "replace")},
            )
            return None

        self.counters.increment(kind)
        logger.debug(f"{kind.label} creation's response body", extra={"tenant": tenant, "response_body": result.body.decode("utf-8", "replace")})
        logger.info(f"{kind.label} created", extra={"id": created.id})
        return created.id

    async def _send(self, kind: ResourceKind, tenant: str, body: bytes) -> CreationResult:
        """Issue one creation call through the admission gate.

        Args:
            kind: Kind of the fixture
            tenant: Encoded identity of the owning tenant
            body: JSON request body

        Returns:
            CreationResult: Outcome; a missed deadline is a transport error.
        """
        async with self._gate:
            self._in_flight += 1
            self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
            try:
                return await asyncio.wait_for(self._client.create_resource(kind, tenant, body), timeout=self.request_timeout)
            except asyncio.TimeoutError:
                return CreationResult.transport_error(f"no response within {self.request_timeout}s")
            finally:
                self._in_flight -= 1

    def _log_failure(self, kind: ResourceKind, tenant: str, body: bytes, result: CreationResult, attempt: int) -> None:
        """Log a failed creation attempt.

        Args:
            kind: Kind of the fixture
            tenant: Encoded identity of the owning tenant
            body: JSON request body
            result: Failed outcome
            attempt: Attempt number, starting at 1
        """
        final = attempt >= self.max_attempts
        suffix = "Skipping..." if final else f"Retrying ({attempt}/{self.max_attempts})..."
        fields = {"resource_type": kind.value, "tenant": tenant, "body": body.decode("utf-8", "replace"), "attempt": attempt}

        if result.status is CreationStatus.TRANSPORT_ERROR:
            logger.error(f"Could not send the creation request. {suffix}", extra={**fields, "error": result.error})
        else:
            logger.error(
                f"Unexpected status code when creating a resource. {suffix}",
                extra={**fields, "want_status_code": 201, "got_status_code": result.status_code, "response_body": result.body.decode("utf-8", "replace")},
            )
