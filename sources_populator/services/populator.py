# -*- coding: utf-8 -*-
"""Location: ./sources_populator/services/populator.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Fixture graph orchestration.

Realizes the fixed dependency graph for every tenant::

    tenant
    └── source                      (sources_per_tenant)
        ├── application             (applications_per_source)
        │   └── authentication      (authentications_per_resource)
        ├── endpoint                (endpoints_per_source)
        ├── authentication          (authentications_per_resource)
        └── rhc connection          (rhc_connections_per_source)

Tenants are populated one after another. Inside a tenant every source, and
every child of a source, is its own task; all of them share the dispatcher's
admission gate. A child is only spawned once its parent was created.
"""

# Standard
import logging
from typing import List

# First-Party
from sources_populator.catalog import CatalogError, CompatibilityCatalog
from sources_populator.config import GenerationPlan
from sources_populator.models import ResourceKind
from sources_populator.services.dispatcher import BoundedDispatcher, ResourceCounters, TaskScope
from sources_populator.services.fixture_factory import FixtureError, FixtureFactory

logger = logging.getLogger(__name__)


class Populator:
    """Create the fixture graph of every tenant through a bounded dispatcher."""

    def __init__(self, plan: GenerationPlan, catalog: CompatibilityCatalog, factory: FixtureFactory, dispatcher: BoundedDispatcher):
        """Initialize the populator.

        Args:
            plan: Per-scope fixture counts
            catalog: Populated compatibility catalog
            factory: Payload factory
            dispatcher: Bounded dispatcher shared by every task
        """
        self.plan = plan
        self.catalog = catalog
        self.factory = factory
        self.dispatcher = dispatcher

    @property
    def counters(self) -> ResourceCounters:
        """Per-kind totals created so far.

        Returns:
            ResourceCounters: The dispatcher's counters.
        """
        return self.dispatcher.counters

    async def run(self, tenants: List[str]) -> ResourceCounters:
        """Populate every tenant.

        Args:
            tenants: Encoded identities of the tenants

        Returns:
            ResourceCounters: Final totals, read once every scope has completed.
        """
        for index, tenant in enumerate(tenants, start=1):
            logger.info(f"Populating tenant {index}/{len(tenants)}")
            await self.populate_tenant(tenant)

        return self.counters

    async def populate_tenant(self, tenant: str) -> None:
        """Create the sources of one tenant and wait for all their fixtures.

        Args:
            tenant: Encoded tenant identity
        """
        async with TaskScope("tenant") as scope:
            for _ in range(self.plan.sources_per_tenant):
                scope.spawn(self.populate_source(tenant))

    async def populate_source(self, tenant: str) -> None:
        """Create one source and, once it exists, its children.

        Args:
            tenant: Encoded tenant identity
        """
        source_type = self.catalog.random_source_type()
        try:
            payload = self.factory.source(source_type.id)
        except FixtureError as e:
            logger.error(f"{e} when generating a source. Skipping...")
            return

        source_id = await self.dispatcher.create(ResourceKind.SOURCE, tenant, payload)
        if source_id is None:
            return

        applications = self.plan.applications_per_source
        if applications and not self.catalog.application_types_for(source_type.id):
            logger.warning(f"Source type {source_type.name!r} has no compatible application types, source {source_id} gets no applications")
            applications = 0

        async with TaskScope(f"source {source_id}") as scope:
            for _ in range(applications):
                scope.spawn(self.populate_application(tenant, source_type.id, source_id))
            for _ in range(self.plan.endpoints_per_source):
                scope.spawn(self.create_endpoint(tenant, source_id))
            for _ in range(self.plan.authentications_per_resource):
                scope.spawn(self.create_source_authentication(tenant, source_type.id, source_id))
            for _ in range(self.plan.rhc_connections_per_source):
                scope.spawn(self.create_rhc_connection(tenant, source_id))

    async def populate_application(self, tenant: str, source_type_id: str, source_id: str) -> None:
        """Create one application compatible with its source, then its authentications.

        Args:
            tenant: Encoded tenant identity
            source_type_id: Type of the owning source
            source_id: Owning source
        """
        try:
            application_type = self.factory.pick_application_type(source_type_id)
        except FixtureError as e:
            logger.warning(f"{e}. Skipping application...")
            return

        payload = self.factory.application(application_type.id, source_id)
        application_id = await self.dispatcher.create(ResourceKind.APPLICATION, tenant, payload)
        if application_id is None:
            return

        async with TaskScope(f"application {application_id}") as scope:
            for _ in range(self.plan.authentications_per_resource):
                scope.spawn(self.create_application_authentication(tenant, source_type_id, application_type.id, application_id))

    async def create_endpoint(self, tenant: str, source_id: str) -> None:
        """Create one endpoint.

        Args:
            tenant: Encoded tenant identity
            source_id: Owning source
        """
        try:
            payload = self.factory.endpoint(source_id)
        except FixtureError as e:
            logger.error(f"{e} when generating an endpoint. Skipping...")
            return

        await self.dispatcher.create(ResourceKind.ENDPOINT, tenant, payload)

    async def create_source_authentication(self, tenant: str, source_type_id: str, source_id: str) -> None:
        """Create one authentication compatible with a source.

        Args:
            tenant: Encoded tenant identity
            source_type_id: Type of the owning source
            source_id: Owning source
        """
        try:
            payload = self.factory.source_authentication(source_type_id, source_id)
        except (CatalogError, FixtureError) as e:
            logger.error(f"{e} when generating a source authentication. Skipping...")
            return

        await self.dispatcher.create(ResourceKind.AUTHENTICATION, tenant, payload)

    async def create_application_authentication(self, tenant: str, source_type_id: str, application_type_id: str, application_id: str) -> None:
        """Create one authentication compatible with an application on its source.

        Args:
            tenant: Encoded tenant identity
            source_type_id: Type of the source owning the application
            application_type_id: Type of the owning application
            application_id: Owning application
        """
        try:
            payload = self.factory.application_authentication(source_type_id, application_type_id, application_id)
        except (CatalogError, FixtureError) as e:
            logger.error(f"{e} when generating an application authentication. Skipping...")
            return

        await self.dispatcher.create(ResourceKind.AUTHENTICATION, tenant, payload)

    async def create_rhc_connection(self, tenant: str, source_id: str) -> None:
        """Create one RHC connection.

        Args:
            tenant: Encoded tenant identity
            source_id: Owning source
        """
        try:
            payload = self.factory.rhc_connection(source_id)
        except FixtureError as e:
            logger.error(f"{e} when generating an RHC connection. Skipping...")
            return

        await self.dispatcher.create(ResourceKind.RHC_CONNECTION, tenant, payload)
