# -*- coding: utf-8 -*-
"""Location: ./sources_populator/utils/identity.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Identity header utilities.

The Sources API scopes every resource to the tenant found in the
``x-rh-identity`` header: a base64-encoded JSON identity document.
"""

# Standard
import base64
from typing import Callable, List
import uuid

# Third-Party
import orjson

IDENTITY_HEADER = "x-rh-identity"

# Account used for the health check and the catalog reads.
CATALOG_ACCOUNT_NUMBER = "12345"


def encode_identity(account_number: str) -> str:
    """Build the ``x-rh-identity`` value for an account.

    Args:
        account_number: Tenant account number

    Returns:
        str: Base64-encoded identity document.

    Examples:
        >>> encode_identity("12345")
        'eyJpZGVudGl0eSI6eyJhY2NvdW50X251bWJlciI6IjEyMzQ1In19'
        >>> decode_identity(encode_identity("abc"))
        {'identity': {'account_number': 'abc'}}
    """
    document = {"identity": {"account_number": account_number}}
    return base64.b64encode(orjson.dumps(document)).decode("ascii")


def decode_identity(header: str) -> dict:
    """Decode an ``x-rh-identity`` value.

    Args:
        header: Base64-encoded identity document

    Returns:
        dict: The identity document.
    """
    return orjson.loads(base64.b64decode(header))


def catalog_identity() -> str:
    """Identity used for requests that are not tied to a generated tenant.

    Returns:
        str: Encoded identity of the catalog account.
    """
    return encode_identity(CATALOG_ACCOUNT_NUMBER)


def generate_tenants(count: int, id_factory: Callable[[], uuid.UUID] = uuid.uuid1) -> List[str]:
    """Generate identities for fresh tenants, one random account number each.

    Args:
        count: Number of tenants
        id_factory: Account number generator

    Returns:
        List[str]: Encoded identities, ready to be sent as headers.

    Examples:
        >>> tenants = generate_tenants(2)
        >>> len(set(tenants))
        2
    """
    return [encode_identity(str(id_factory())) for _ in range(count)]
