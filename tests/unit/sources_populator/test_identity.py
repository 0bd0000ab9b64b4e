# -*- coding: utf-8 -*-
"""Location: ./tests/unit/sources_populator/test_identity.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Unit tests for the identity header utilities.
"""

# Standard
import base64
import itertools
import uuid

# Third-Party
import orjson

# First-Party
from sources_populator.utils.identity import CATALOG_ACCOUNT_NUMBER, catalog_identity, decode_identity, encode_identity, generate_tenants


def test_encode_identity_is_base64_json():
    header = encode_identity("acct-1")

    assert orjson.loads(base64.b64decode(header)) == {"identity": {"account_number": "acct-1"}}


def test_catalog_identity_uses_fixed_account():
    assert decode_identity(catalog_identity())["identity"]["account_number"] == CATALOG_ACCOUNT_NUMBER


def test_generate_tenants_uses_fresh_accounts():
    counter = itertools.count(1)
    tenants = generate_tenants(3, id_factory=lambda: uuid.UUID(int=next(counter)))

    accounts = [decode_identity(tenant)["identity"]["account_number"] for tenant in tenants]

    assert accounts == [str(uuid.UUID(int=i)) for i in (1, 2, 3)]


def test_generate_no_tenants():
    assert generate_tenants(0) == []
