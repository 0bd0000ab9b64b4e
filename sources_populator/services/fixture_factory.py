# -*- coding: utf-8 -*-
"""Location: ./sources_populator/services/fixture_factory.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Fixture payload factory.

Produces random but valid creation requests for every fixture kind. The
factory never talks to the network: compatibility decisions come from the
catalog, enumerated values from Faker and identifiers from a time-ordered UUID
generator, all three injectable so tests can make the output reproducible.
"""

# Standard
from typing import Callable, Literal, Optional
import uuid

# Third-Party
from faker import Faker

# First-Party
from sources_populator.catalog import ApplicationTypeEntry, CompatibilityCatalog
from sources_populator.models import (
    APP_CREATION_WORKFLOWS,
    ApplicationCreateRequest,
    AuthenticationCreateRequest,
    AVAILABILITY_STATUSES,
    ENDPOINT_AVAILABILITY_STATUSES,
    EndpointCreateRequest,
    RhcConnectionCreateRequest,
    SourceCreateRequest,
)

ResourceType = Literal["Source", "Application"]


class FixtureError(Exception):
    """Raised when a payload cannot be generated. Only the affected unit is skipped."""


class FixtureFactory:
    """Generate creation requests that respect the compatibility catalog."""

    def __init__(self, catalog: CompatibilityCatalog, faker: Optional[Faker] = None, id_factory: Callable[[], uuid.UUID] = uuid.uuid1):
        """Initialize the factory.

        Args:
            catalog: Populated compatibility catalog
            faker: Faker instance used for the enumerated fields
            id_factory: Generator of fresh unique identifiers
        """
        self.catalog = catalog
        self.faker = faker or Faker()
        self._id_factory = id_factory

    def new_identifier(self) -> str:
        """Generate a fresh unique identifier.

        Returns:
            str: Identifier.

        Raises:
            FixtureError: If the generator fails.
        """
        try:
            return str(self._id_factory())
        except Exception as e:
            raise FixtureError(f"Could not generate a UUID: {e}") from e

    def source(self, source_type_id: str) -> SourceCreateRequest:
        """Build a source creation request.

        Args:
            source_type_id: Type of the new source

        Returns:
            SourceCreateRequest: Payload.
        """
        uid = self.new_identifier()
        return SourceCreateRequest(
            name=f"{uid}-name",
            uid=uid,
            app_creation_workflow=self.faker.random_element(APP_CREATION_WORKFLOWS),
            availability_status=self.faker.random_element(AVAILABILITY_STATUSES),
            source_type_id=source_type_id,
        )

    def pick_application_type(self, source_type_id: str) -> ApplicationTypeEntry:
        """Pick an application type compatible with a source type.

        Args:
            source_type_id: Source type ID

        Returns:
            ApplicationTypeEntry: The picked application type.

        Raises:
            FixtureError: If the source type has no compatible application types.
        """
        application_types = self.catalog.application_types_for(source_type_id)
        if not application_types:
            raise FixtureError(f"Source type {source_type_id!r} has no compatible application types")

        return self.faker.random_element(application_types)

    def application(self, application_type_id: str, source_id: str) -> ApplicationCreateRequest:
        """Build an application creation request.

        Args:
            application_type_id: Type of the new application
            source_id: Owning source

        Returns:
            ApplicationCreateRequest: Payload.
        """
        return ApplicationCreateRequest(application_type_id=application_type_id, source_id=source_id)

    def endpoint(self, source_id: str) -> EndpointCreateRequest:
        """Build an endpoint creation request.

        Args:
            source_id: Owning source

        Returns:
            EndpointCreateRequest: Payload.
        """
        return EndpointCreateRequest(
            availability_status=self.faker.random_element(ENDPOINT_AVAILABILITY_STATUSES),
            host=f"source-{source_id}.com",
            path=f"/source-{source_id}",
            role=self.new_identifier(),
            source_id=source_id,
        )

    def authentication(self, resource_type: ResourceType, resource_id: str, kind: str) -> AuthenticationCreateRequest:
        """Build an authentication creation request.

        The name, username and password derive from a single fresh identifier.

        Args:
            resource_type: ``Source`` or ``Application``
            resource_id: Owning resource
            kind: Authentication kind

        Returns:
            AuthenticationCreateRequest: Payload.
        """
        uid = self.new_identifier()
        return AuthenticationCreateRequest(
            authtype=kind,
            name=f"{uid}-name",
            username=f"{uid}-username",
            password=f"{uid}-password",
            resource_type=resource_type,
            resource_id=resource_id,
        )

    def source_authentication(self, source_type_id: str, source_id: str) -> AuthenticationCreateRequest:
        """Build an authentication compatible with a source.

        Args:
            source_type_id: Type of the owning source
            source_id: Owning source

        Returns:
            AuthenticationCreateRequest: Payload.

        Raises:
            IncompatibleResourceError: If the source type has no authentication kinds.
        """
        kind = self.catalog.random_authentication_for_source(source_type_id)
        return self.authentication("Source", source_id, kind)

    def application_authentication(self, source_type_id: str, application_type_id: str, application_id: str) -> AuthenticationCreateRequest:
        """Build an authentication compatible with an application on its source.

        Args:
            source_type_id: Type of the source owning the application
            application_type_id: Type of the owning application
            application_id: Owning application

        Returns:
            AuthenticationCreateRequest: Payload.
        """
        kind = self.catalog.random_authentication_for_application(source_type_id, application_type_id)
        return self.authentication("Application", application_id, kind)

    def rhc_connection(self, source_id: str) -> RhcConnectionCreateRequest:
        """Build an RHC connection creation request.

        Args:
            source_id: Owning source

        Returns:
            RhcConnectionCreateRequest: Payload.
        """
        return RhcConnectionCreateRequest(rhc_id=self.new_identifier(), source_id=source_id)
