# -*- coding: utf-8 -*-
"""Location: ./sources_populator/models.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Pydantic models for the Sources API wire format.

Two families of models live here:

* Catalog records, parsed from the ``source_types`` and ``application_types``
  collections. They are flattened into the shape the compatibility catalog
  needs.
* Creation requests, one per fixture kind, serialized as snake_case JSON
  bodies for the ``POST`` endpoints.

Examples:
    >>> record = SourceTypeRecord.model_validate({"id": "1", "name": "openshift", "schema": {"authentication": [{"type": "token"}]}})
    >>> record.authentication_kinds
    ['token']
    >>> encode_payload(RhcConnectionCreateRequest(rhc_id="abc", source_id="10"))
    b'{"rhc_id":"abc","source_id":"10"}'
"""

# Standard
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

# Third-Party
import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ResourceKind(str, Enum):
    """Kinds of fixtures the populator creates."""

    SOURCE = "source"
    APPLICATION = "application"
    ENDPOINT = "endpoint"
    AUTHENTICATION = "authentication"
    RHC_CONNECTION = "rhcConnection"

    @property
    def collection(self) -> str:
        """Name of the API collection the kind is created in.

        Returns:
            str: URL path segment under the API base URL.

        Examples:
            >>> ResourceKind.RHC_CONNECTION.collection
            'rhc_connections'
            >>> ResourceKind.SOURCE.collection
            'sources'
        """
        return _COLLECTIONS[self]

    @property
    def label(self) -> str:
        """Human readable label used in log messages.

        Returns:
            str: Capitalized label.

        Examples:
            >>> ResourceKind.RHC_CONNECTION.label
            'RHC connection'
        """
        return _LABELS[self]


_COLLECTIONS = {
    ResourceKind.SOURCE: "sources",
    ResourceKind.APPLICATION: "applications",
    ResourceKind.ENDPOINT: "endpoints",
    ResourceKind.AUTHENTICATION: "authentications",
    ResourceKind.RHC_CONNECTION: "rhc_connections",
}

_LABELS = {
    ResourceKind.SOURCE: "Source",
    ResourceKind.APPLICATION: "Application",
    ResourceKind.ENDPOINT: "Endpoint",
    ResourceKind.AUTHENTICATION: "Authentication",
    ResourceKind.RHC_CONNECTION: "RHC connection",
}

# Values the back end accepts for the enumerated creation fields.
AVAILABILITY_STATUSES = ("available", "in_progress", "partially_available", "unavailable")
ENDPOINT_AVAILABILITY_STATUSES = ("available", "unavailable")
APP_CREATION_WORKFLOWS = ("account_authorization", "manual_configuration")


# --------------------------------------------------------------------------- #
#                               Catalog records                               #
# --------------------------------------------------------------------------- #
class SourceTypeRecord(BaseModel):
    """One entry of the ``source_types`` collection.

    The back end nests the compatible authentication kinds under
    ``schema.authentication[].type``; they are flattened on validation.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Source type ID")
    name: str = Field(..., description="Unique source type name")
    authentication_kinds: List[str] = Field(default_factory=list, description="Compatible authentication kinds")

    @model_validator(mode="before")
    @classmethod
    def _flatten_schema(cls, data: Any) -> Any:
        """Lift ``schema.authentication[].type`` into ``authentication_kinds``.

        Args:
            data: Raw input

        Returns:
            The input with ``authentication_kinds`` filled in.
        """
        if isinstance(data, dict) and "authentication_kinds" not in data:
            schema = data.get("schema") or {}
            auths = schema.get("authentication") or [] if isinstance(schema, dict) else []
            data = {**data, "authentication_kinds": [auth["type"] for auth in auths if isinstance(auth, dict) and auth.get("type")]}
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        """Accept numeric IDs.

        Args:
            value: Raw ID

        Returns:
            The ID as a string when it was an integer.
        """
        return str(value) if isinstance(value, int) else value


class ApplicationTypeRecord(BaseModel):
    """One entry of the ``application_types`` collection.

    Source types are referenced by *name*, and the authentication kinds are
    keyed by source type name as well.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Application type ID")
    name: str = Field("", description="Application type name")
    supported_source_types: List[str] = Field(default_factory=list, description="Names of the compatible source types")
    supported_authentication_types: Dict[str, List[str]] = Field(default_factory=dict, description="Authentication kinds by source type name")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        """Accept numeric IDs.

        Args:
            value: Raw ID

        Returns:
            The ID as a string when it was an integer.
        """
        return str(value) if isinstance(value, int) else value

    @field_validator("supported_source_types", "supported_authentication_types", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info) -> Any:
        """Treat an explicit ``null`` as an empty collection.

        A ``null`` kind list for one source type name becomes an empty list
        too, so that pair falls back to "no authentication" instead of
        failing the whole response.

        Args:
            value: Raw value
            info: Validation info

        Returns:
            An empty list or dict when ``value`` is ``None``, the kinds by name
            with ``None`` entries emptied otherwise.
        """
        if info.field_name == "supported_authentication_types":
            if value is None:
                return {}
            if isinstance(value, dict):
                return {name: [] if kinds is None else kinds for name, kinds in value.items()}
            return value
        return [] if value is None else value


class SourceTypeCollection(BaseModel):
    """The ``{"data": [...]}`` envelope of ``GET /source_types``."""

    data: List[SourceTypeRecord]


class ApplicationTypeCollection(BaseModel):
    """The ``{"data": [...]}`` envelope of ``GET /application_types``."""

    data: List[ApplicationTypeRecord]


# --------------------------------------------------------------------------- #
#                              Creation requests                              #
# --------------------------------------------------------------------------- #
class SourceCreateRequest(BaseModel):
    """Body of ``POST /sources``."""

    name: str
    uid: str
    app_creation_workflow: str
    availability_status: str
    source_type_id: str


class ApplicationCreateRequest(BaseModel):
    """Body of ``POST /applications``."""

    application_type_id: str
    source_id: str


class EndpointCreateRequest(BaseModel):
    """Body of ``POST /endpoints``."""

    availability_status: str
    host: str
    path: str
    role: str
    source_id: str


class AuthenticationCreateRequest(BaseModel):
    """Body of ``POST /authentications``."""

    authtype: str
    name: str
    username: str
    password: str
    resource_type: Literal["Source", "Application"]
    resource_id: str


class RhcConnectionCreateRequest(BaseModel):
    """Body of ``POST /rhc_connections``."""

    rhc_id: str
    source_id: str


class CreatedResource(BaseModel):
    """The part of a creation response the populator needs."""

    model_config = ConfigDict(extra="ignore")

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        """Accept numeric IDs.

        Args:
            value: Raw ID

        Returns:
            The ID as a string when it was an integer.

        Examples:
            >>> CreatedResource.model_validate({"id": 12}).id
            '12'
        """
        return str(value) if isinstance(value, int) else value


def encode_payload(payload: BaseModel) -> bytes:
    """Serialize a creation request into a JSON body.

    Args:
        payload: Creation request model

    Returns:
        bytes: Compact JSON document.

    Raises:
        orjson.JSONEncodeError: If the payload holds a value orjson cannot encode.
    """
    return orjson.dumps(payload.model_dump(mode="json"))


def decode_created(body: bytes) -> Optional[CreatedResource]:
    """Extract the created resource ID from a response body.

    Args:
        body: Raw response body

    Returns:
        Optional[CreatedResource]: ``None`` when the body is not JSON or has no usable ``id``.

    Examples:
        >>> decode_created(b'{"id": "7", "name": "x"}').id
        '7'
        >>> decode_created(b'not json') is None
        True
        >>> decode_created(b'{"name": "x"}') is None
        True
    """
    try:
        return CreatedResource.model_validate(orjson.loads(body))
    except (orjson.JSONDecodeError, ValueError):
        return None
