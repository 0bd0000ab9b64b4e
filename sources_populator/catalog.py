# -*- coding: utf-8 -*-
"""Location: ./sources_populator/catalog.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

In-memory compatibility catalog.

The catalog answers two questions while fixtures are generated:

* which authentication kinds may be attached to a source of a given type, and
* which authentication kinds may be attached to an application of a given type
  when that application belongs to a source of a given type.

Application compatibility is a property of the *(source type, application type)*
pair, so every source type entry owns its own application type entries.

The catalog is filled once by a single writer (see
:mod:`sources_populator.services.catalog_service`) and only read afterwards, so the
concurrent generation phase reads it without locking.

Examples:
    >>> import random
    >>> catalog = CompatibilityCatalog(random.Random(1))
    >>> catalog.register_source_type("1", "openshift")
    >>> catalog.add_authentication_kind("1", "token")
    >>> catalog.attach_application_type("5", ["openshift"], {"openshift": ["token"]})
    >>> catalog.random_source_type().name
    'openshift'
    >>> catalog.random_authentication_for_application("1", "5")
    'token'
"""

# Standard
from dataclasses import dataclass, field
import logging
import random
from typing import Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

# Source type never stored: it has no compatible applications or authentications.
EXCLUDED_SOURCE_TYPE_NAME = "rh-marketplace"

# Authentication kind sent when an application type declares no authentication
# for a source type (e.g. cost management against "azure" or "google").
NO_APPLICABLE_AUTHENTICATION = "no-applicable-authentication-type"


class CatalogError(Exception):
    """Raised when the catalog cannot be built or cannot answer a lookup."""


class IncompatibleResourceError(CatalogError):
    """Raised when a source type has nothing compatible to pick from."""


@dataclass
class ApplicationTypeEntry:
    """An application type as seen from one specific source type.

    Attributes:
        id: Application type ID
        compatible_authentications: Authentication kinds valid for this pair
    """

    id: str
    compatible_authentications: List[str] = field(default_factory=list)


@dataclass
class SourceTypeEntry:
    """A source type with its compatible authentication and application types.

    Attributes:
        id: Source type ID issued by the back end
        name: Unique source type name
        compatible_authentications: Authentication kinds valid for sources of this type
        application_types: Compatible application types keyed by ID
    """

    id: str
    name: str
    compatible_authentications: List[str] = field(default_factory=list)
    application_types: Dict[str, ApplicationTypeEntry] = field(default_factory=dict)


class CompatibilityCatalog:
    """Index of source types, application types and their authentication kinds."""

    def __init__(self, rng: Optional[random.Random] = None):
        """Create an empty catalog.

        Args:
            rng: Random source used by the ``random_*`` lookups. Inject a seeded
                instance for reproducible picks.
        """
        self._rng = rng or random.Random()
        self._source_types: Dict[str, SourceTypeEntry] = {}
        self._source_ids_by_name: Dict[str, str] = {}
        self._source_type_keys: Optional[List[str]] = None

    def __len__(self) -> int:
        return len(self._source_types)

    def __contains__(self, source_type_id: object) -> bool:
        return source_type_id in self._source_types

    @property
    def source_types(self) -> List[SourceTypeEntry]:
        """Registered source types, in registration order.

        Returns:
            List[SourceTypeEntry]: Snapshot of the entries.
        """
        return list(self._source_types.values())

    def get_source_type(self, source_type_id: str) -> SourceTypeEntry:
        """Return a registered source type.

        Args:
            source_type_id: Source type ID

        Returns:
            SourceTypeEntry: The entry.

        Raises:
            CatalogError: If the ID was never registered.
        """
        try:
            return self._source_types[source_type_id]
        except KeyError:
            raise CatalogError(f"Unknown source type {source_type_id!r}") from None

    def source_type_id_for(self, name: str) -> Optional[str]:
        """Resolve a source type name to its ID.

        Args:
            name: Source type name

        Returns:
            Optional[str]: The ID, or ``None`` if the name is unknown.
        """
        return self._source_ids_by_name.get(name)

    # ------------------------------------------------------------------ #
    # Build phase
    # ------------------------------------------------------------------ #
    def register_source_type(self, source_type_id: str, name: str) -> None:
        """Insert a source type and record its name for later lookups.

        Registering the same ID twice replaces the previous entry.

        Args:
            source_type_id: Source type ID
            name: Source type name
        """
        if name == EXCLUDED_SOURCE_TYPE_NAME:
            logger.debug(f"Skipping excluded source type {name!r}")
            return

        self._source_ids_by_name[name] = source_type_id
        self._source_types[source_type_id] = SourceTypeEntry(id=source_type_id, name=name)
        self._source_type_keys = None

    def add_authentication_kind(self, source_type_id: str, kind: str) -> None:
        """Append a compatible authentication kind to a source type.

        Args:
            source_type_id: Source type ID
            kind: Authentication kind
        """
        self.get_source_type(source_type_id).compatible_authentications.append(kind)

    def attach_application_type(self, application_type_id: str, supported_source_names: Sequence[str], supported_auth_by_name: Mapping[str, Sequence[str]]) -> None:
        """Attach an application type to every source type it supports.

        Names that do not resolve to a registered source type are skipped. When
        the application type is already attached to a source type, the new
        authentication kinds are appended to the existing ones.

        Args:
            application_type_id: Application type ID
            supported_source_names: Names of the compatible source types
            supported_auth_by_name: Authentication kinds keyed by source type name
        """
        for name in supported_source_names:
            source_type_id = self._source_ids_by_name.get(name)
            if source_type_id is None:
                logger.debug(f"Application type {application_type_id} references unknown source type {name!r}, skipping")
                continue

            source_type = self._source_types[source_type_id]
            kinds = list(supported_auth_by_name.get(name) or [])

            existing = source_type.application_types.get(application_type_id)
            if existing is not None:
                existing.compatible_authentications.extend(kinds)
            else:
                source_type.application_types[application_type_id] = ApplicationTypeEntry(id=application_type_id, compatible_authentications=kinds)

    # ------------------------------------------------------------------ #
    # Read phase
    # ------------------------------------------------------------------ #
    def random_source_type(self) -> SourceTypeEntry:
        """Pick a registered source type uniformly at random.

        Returns:
            SourceTypeEntry: The picked entry.

        Raises:
            CatalogError: If the catalog is empty.
        """
        if self._source_type_keys is None:
            self._source_type_keys = list(self._source_types)

        if not self._source_type_keys:
            raise CatalogError("The catalog holds no source types")

        return self._source_types[self._rng.choice(self._source_type_keys)]

    def random_authentication_for_source(self, source_type_id: str) -> str:
        """Pick one of the authentication kinds compatible with a source type.

        Args:
            source_type_id: Source type ID

        Returns:
            str: An authentication kind.

        Raises:
            IncompatibleResourceError: If the source type declares no authentication kinds.
        """
        kinds = self.get_source_type(source_type_id).compatible_authentications
        if not kinds:
            raise IncompatibleResourceError(f"Source type {source_type_id!r} has no compatible authentication types")

        return self._rng.choice(kinds)

    def random_authentication_for_application(self, source_type_id: str, application_type_id: str) -> str:
        """Pick an authentication kind valid for an application on a source type.

        Args:
            source_type_id: Source type ID
            application_type_id: Application type ID

        Returns:
            str: An authentication kind, or :data:`NO_APPLICABLE_AUTHENTICATION`
            when the pair declares none.

        Examples:
            >>> catalog = CompatibilityCatalog()
            >>> catalog.register_source_type("2", "azure")
            >>> catalog.attach_application_type("3", ["azure"], {})
            >>> catalog.random_authentication_for_application("2", "3")
            'no-applicable-authentication-type'
        """
        application_type = self.get_source_type(source_type_id).application_types.get(application_type_id)
        if application_type is None or not application_type.compatible_authentications:
            return NO_APPLICABLE_AUTHENTICATION

        return self._rng.choice(application_type.compatible_authentications)

    def application_types_for(self, source_type_id: str) -> List[ApplicationTypeEntry]:
        """Return the application types compatible with a source type.

        Args:
            source_type_id: Source type ID

        Returns:
            List[ApplicationTypeEntry]: Compatible application types, possibly empty.
        """
        return list(self.get_source_type(source_type_id).application_types.values())
