# -*- coding: utf-8 -*-
"""Location: ./tests/unit/sources_populator/test_catalog.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Unit tests for the compatibility catalog.
"""

# Standard
import random

# Third-Party
import pytest

# First-Party
from sources_populator.catalog import (
    CatalogError,
    CompatibilityCatalog,
    EXCLUDED_SOURCE_TYPE_NAME,
    IncompatibleResourceError,
    NO_APPLICABLE_AUTHENTICATION,
)


@pytest.fixture
def catalog():
    return CompatibilityCatalog(random.Random(42))


class TestBuildPhase:
    """Registration and application type attachment."""

    def test_register_source_type(self, catalog):
        catalog.register_source_type("1", "openshift")

        assert "1" in catalog
        assert len(catalog) == 1
        assert catalog.source_type_id_for("openshift") == "1"
        assert catalog.get_source_type("1").name == "openshift"

    def test_excluded_source_type_is_never_stored(self, catalog):
        catalog.register_source_type("9", EXCLUDED_SOURCE_TYPE_NAME)

        assert len(catalog) == 0
        assert catalog.source_type_id_for(EXCLUDED_SOURCE_TYPE_NAME) is None

    def test_reregistering_replaces_entry(self, catalog):
        catalog.register_source_type("1", "openshift")
        catalog.add_authentication_kind("1", "token")
        catalog.register_source_type("1", "openshift")

        assert catalog.get_source_type("1").compatible_authentications == []

    def test_get_unknown_source_type(self, catalog):
        with pytest.raises(CatalogError, match="Unknown source type"):
            catalog.get_source_type("404")

    def test_add_authentication_kind_to_unknown_source_type(self, catalog):
        with pytest.raises(CatalogError):
            catalog.add_authentication_kind("404", "token")

    def test_attach_skips_unknown_source_names(self, catalog):
        catalog.register_source_type("1", "openshift")
        catalog.attach_application_type("5", ["openshift", "vsphere"], {"openshift": ["token"], "vsphere": ["basic"]})

        assert [entry.id for entry in catalog.application_types_for("1")] == ["5"]

    def test_attach_same_pair_twice_merges_kinds(self, catalog):
        catalog.register_source_type("1", "amazon")
        catalog.attach_application_type("2", ["amazon"], {"amazon": ["arn", "access_key"]})
        catalog.attach_application_type("2", ["amazon"], {"amazon": ["arn"]})

        entry = catalog.get_source_type("1").application_types["2"]
        assert entry.compatible_authentications == ["arn", "access_key", "arn"]

    def test_attach_with_no_declared_kinds(self, catalog):
        catalog.register_source_type("1", "azure")
        catalog.attach_application_type("3", ["azure"], {})

        assert catalog.get_source_type("1").application_types["3"].compatible_authentications == []


class TestRandomSourceType:
    """Uniform source type picks."""

    def test_empty_catalog(self, catalog):
        with pytest.raises(CatalogError):
            catalog.random_source_type()

    def test_only_returns_loaded_source_types(self, catalog):
        loaded = {"1": "openshift", "2": "amazon", "3": "azure"}
        catalog.register_source_type("99", EXCLUDED_SOURCE_TYPE_NAME)
        for source_type_id, name in loaded.items():
            catalog.register_source_type(source_type_id, name)

        picked = {catalog.random_source_type().id for _ in range(300)}

        assert picked == set(loaded)

    def test_picks_registered_after_first_read(self, catalog):
        catalog.register_source_type("1", "openshift")
        catalog.random_source_type()
        catalog.register_source_type("2", "amazon")

        picked = {catalog.random_source_type().id for _ in range(200)}

        assert picked == {"1", "2"}

    def test_seeded_picks_are_reproducible(self):
        def picks(seed):
            catalog = CompatibilityCatalog(random.Random(seed))
            for source_type_id in "12345":
                catalog.register_source_type(source_type_id, f"type-{source_type_id}")
            return [catalog.random_source_type().id for _ in range(20)]

        assert picks(3) == picks(3)


class TestRandomAuthentications:
    """Authentication kind picks for sources and applications."""

    def test_source_picks_stay_within_declared_kinds(self, catalog):
        catalog.register_source_type("1", "openshift")
        catalog.add_authentication_kind("1", "token")
        catalog.add_authentication_kind("1", "basic")

        picked = {catalog.random_authentication_for_source("1") for _ in range(200)}

        assert picked == {"token", "basic"}

    def test_source_without_kinds(self, catalog):
        catalog.register_source_type("1", "openshift")

        with pytest.raises(IncompatibleResourceError):
            catalog.random_authentication_for_source("1")

    def test_application_kinds_do_not_leak_across_source_types(self, catalog):
        catalog.register_source_type("1", "amazon")
        catalog.register_source_type("2", "azure")
        catalog.attach_application_type("7", ["amazon", "azure"], {"amazon": ["arn"], "azure": ["tenant_id_client_id_client_secret"]})

        amazon_picks = {catalog.random_authentication_for_application("1", "7") for _ in range(100)}
        azure_picks = {catalog.random_authentication_for_application("2", "7") for _ in range(100)}

        assert amazon_picks == {"arn"}
        assert azure_picks == {"tenant_id_client_id_client_secret"}

    def test_empty_application_kinds_return_sentinel(self, catalog):
        catalog.register_source_type("1", "google")
        catalog.attach_application_type("3", ["google"], {"google": []})

        assert catalog.random_authentication_for_application("1", "3") == NO_APPLICABLE_AUTHENTICATION

    def test_unattached_application_returns_sentinel(self, catalog):
        catalog.register_source_type("1", "google")

        assert catalog.random_authentication_for_application("1", "3") == NO_APPLICABLE_AUTHENTICATION

    def test_application_types_for_source_without_any(self, catalog):
        catalog.register_source_type("1", "satellite")

        assert catalog.application_types_for("1") == []
