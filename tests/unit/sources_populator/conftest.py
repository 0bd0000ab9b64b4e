# -*- coding: utf-8 -*-
"""Location: ./tests/unit/sources_populator/conftest.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Shared fixtures for the Sources populator unit tests.

The back end is never contacted: ``FakeSourcesApi`` plays the Sources API
behind an ``httpx.MockTransport`` and ``FakeCreationClient`` stands in for the
client where only ``create_resource`` matters.
"""

# Standard
import asyncio
from collections import defaultdict
import itertools
import random
from typing import Any, Dict, List, Optional

# Third-Party
from faker import Faker
import httpx
import orjson
import pytest

# First-Party
from sources_populator.catalog import CompatibilityCatalog
from sources_populator.config import Settings
from sources_populator.services.sources_client import CreationResult, CreationStatus

OPENSHIFT_SOURCE_TYPES = [{"id": "1", "name": "openshift", "schema": {"authentication": [{"type": "token"}]}}]
CATALOG_APPLICATION_TYPES = [{"id": "5", "name": "catalog", "supported_source_types": ["openshift"], "supported_authentication_types": {"openshift": ["token"]}}]


class FakeSourcesApi:
    """Request handler emulating the Sources API for ``httpx.MockTransport``."""

    def __init__(self, source_types: Optional[List[Dict[str, Any]]] = None, application_types: Optional[List[Dict[str, Any]]] = None):
        self.source_types = OPENSHIFT_SOURCE_TYPES if source_types is None else source_types
        self.application_types = CATALOG_APPLICATION_TYPES if application_types is None else application_types
        self.health_status = 200
        self.failures: Dict[str, int] = {}
        self.requests: List[httpx.Request] = []
        self.created: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.issued: Dict[str, List[str]] = defaultdict(list)
        self._ids = itertools.count(1)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/health":
            return httpx.Response(self.health_status)
        if path.endswith("/source_types"):
            return httpx.Response(200, json={"data": self.source_types})
        if path.endswith("/application_types"):
            return httpx.Response(200, json={"data": self.application_types})

        collection = path.rsplit("/", 1)[-1]
        if collection in self.failures:
            return httpx.Response(self.failures[collection], json={"errors": [{"status": str(self.failures[collection])}]})

        payload = orjson.loads(request.content)
        self.created[collection].append(payload)
        created_id = str(next(self._ids))
        self.issued[collection].append(created_id)
        return httpx.Response(201, json={"id": created_id, **payload})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FakeCreationClient:
    """Creation-only client that counts how many calls overlap."""

    def __init__(self, delay: float = 0.0, outcomes: Optional[List[Any]] = None):
        self.delay = delay
        self.outcomes = list(outcomes or [])
        self.calls: List[tuple] = []
        self.active = 0
        self.peak = 0
        self._ids = itertools.count(1)

    async def create_resource(self, kind, tenant, body):
        self.calls.append((kind, tenant, orjson.loads(body)))
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active -= 1

        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        return CreationResult(status=CreationStatus.CREATED, status_code=201, body=orjson.dumps({"id": str(next(self._ids))}))


@pytest.fixture
def settings():
    """Settings pointing at a fake back end."""
    return Settings(sources_api_host="http://sources.test", sources_api_port=8000, concurrent_requests=4, log_format="text")


@pytest.fixture
def fake_api():
    """Fake Sources API with one openshift source type and one catalog application type."""
    return FakeSourcesApi()


@pytest.fixture
def openshift_catalog():
    """Catalog with openshift (token) and catalog compatible with it (token)."""
    catalog = CompatibilityCatalog(random.Random(7))
    catalog.register_source_type("1", "openshift")
    catalog.add_authentication_kind("1", "token")
    catalog.attach_application_type("5", ["openshift"], {"openshift": ["token"]})
    return catalog


@pytest.fixture
def seeded_faker():
    """Faker seeded for reproducible picks."""
    faker = Faker()
    faker.seed_instance(1234)
    return faker


@pytest.fixture
def make_api():
    """Factory for fake Sources APIs with a custom catalog."""
    return FakeSourcesApi


@pytest.fixture
def make_creation_client():
    """Factory for creation-only fake clients."""
    return FakeCreationClient
