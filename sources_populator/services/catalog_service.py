# -*- coding: utf-8 -*-
"""Location: ./sources_populator/services/catalog_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Compatibility Catalog Service.

Builds the in-memory :class:`~sources_populator.catalog.CompatibilityCatalog`
out of two sequential reads against the back end. Source types go first: the
application types reference source types by name, and those names must already
resolve to IDs when the second pass runs.
"""

# Standard
import logging
import random
from typing import Iterable, Optional

# First-Party
from sources_populator.catalog import CatalogError, CompatibilityCatalog, EXCLUDED_SOURCE_TYPE_NAME
from sources_populator.models import ApplicationTypeRecord, SourceTypeRecord
from sources_populator.services.sources_client import SourcesApiClient, SourcesApiError

logger = logging.getLogger(__name__)


class CatalogService:
    """Service that loads the compatibility catalog from the Sources API."""

    def __init__(self, client: SourcesApiClient, rng: Optional[random.Random] = None):
        """Initialize the catalog service.

        Args:
            client: Sources API client
            rng: Random source handed to the catalog
        """
        self._client = client
        self._rng = rng

    async def build(self) -> CompatibilityCatalog:
        """Fetch source and application types and index them.

        Returns:
            CompatibilityCatalog: The populated, read-only-from-now-on catalog.

        Raises:
            CatalogError: If a read fails, a response is malformed, or no usable
                source type remains.
        """
        catalog = CompatibilityCatalog(self._rng)

        try:
            source_types = await self._client.fetch_source_types()
            load_source_types(catalog, source_types)

            application_types = await self._client.fetch_application_types()
            load_application_types(catalog, application_types)
        except SourcesApiError as e:
            raise CatalogError(f"Could not build the compatibility catalog: {e}") from e

        if not len(catalog):
            raise CatalogError("The back end returned no usable source types")

        logger.info(f"Loaded {len(catalog)} source types and {len(application_types)} application types into the catalog")
        return catalog


def load_source_types(catalog: CompatibilityCatalog, records: Iterable[SourceTypeRecord]) -> None:
    """Register source types and their authentication kinds.

    Args:
        catalog: Catalog being built
        records: Source type records
    """
    for record in records:
        if record.name == EXCLUDED_SOURCE_TYPE_NAME:
            continue

        catalog.register_source_type(record.id, record.name)
        for kind in record.authentication_kinds:
            catalog.add_authentication_kind(record.id, kind)

        if not record.authentication_kinds:
            logger.warning(f"Source type {record.name!r} declares no authentication types, its sources will get no authentications")


def load_application_types(catalog: CompatibilityCatalog, records: Iterable[ApplicationTypeRecord]) -> None:
    """Attach application types to the source types they support.

    Args:
        catalog: Catalog being built, with its source types already registered
        records: Application type records
    """
    for record in records:
        catalog.attach_application_type(record.id, record.supported_source_types, record.supported_authentication_types)
