# -*- coding: utf-8 -*-
"""Location: ./tests/unit/sources_populator/test_cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Unit tests for the populator CLI commands.
"""

# Standard
from functools import partial
from unittest.mock import patch

# Third-Party
import orjson
import pytest
from typer.testing import CliRunner

# First-Party
from sources_populator.cli import app, main
from sources_populator.services.sources_client import SourcesApiClient

ENV = {"SOURCES_API_HOST": "http://sources.test", "SOURCES_API_PORT": "8000", "LOG_LEVEL": "error", "LOG_FORMAT": "text"}

SMALL_RUN = [
    "run",
    "--tenants",
    "1",
    "--sources-per-tenant",
    "1",
    "--applications-per-source",
    "1",
    "--endpoints-per-source",
    "0",
    "--rhc-connections-per-tenant",
    "0",
    "--authentications-per-resource",
    "1",
    "--seed",
    "3",
]


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the developer's .env file and variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("SOURCES_API_HOST", "SOURCES_API_PORT", "NUMBER_OF_TENANTS", "CONCURRENT_REQUESTS", "RANDOM_SEED"):
        monkeypatch.delenv(name, raising=False)


def patched_client(api):
    return patch("sources_populator.cli.SourcesApiClient", partial(SourcesApiClient, transport=api.transport))


class TestRunCommand:
    def test_small_run_writes_report(self, runner, fake_api, tmp_path):
        report = tmp_path / "out" / "report.json"

        with patched_client(fake_api):
            result = runner.invoke(app, SMALL_RUN + ["--output", str(report)], env=ENV)

        assert result.exit_code == 0, result.output
        assert "Population Complete" in result.output
        assert "Report saved to" in result.output

        document = orjson.loads(report.read_bytes())
        assert document["totals"] == {"sources": 1, "applications": 1, "authentications": 2, "endpoints": 0, "rhcConnections": 0}
        assert document["planned"] == document["totals"]
        assert document["settings"]["random_seed"] == 3

    def test_failed_creations_still_complete(self, runner, fake_api):
        fake_api.failures["applications"] = 500

        with patched_client(fake_api):
            result = runner.invoke(app, SMALL_RUN, env=ENV)

        assert result.exit_code == 0, result.output
        assert "Population Complete" in result.output
        assert fake_api.issued["authentications"] and not fake_api.issued["applications"]

    def test_concurrency_option(self, runner, fake_api, tmp_path):
        report = tmp_path / "report.json"

        with patched_client(fake_api):
            result = runner.invoke(app, SMALL_RUN + ["--concurrency", "1", "--output", str(report)], env=ENV)

        assert result.exit_code == 0, result.output
        assert orjson.loads(report.read_bytes())["peak_in_flight"] == 1

    def test_concurrency_fallback_is_reported_after_logging_is_configured(self, runner, fake_api, tmp_path):
        report = tmp_path / "report.json"
        env = {**ENV, "LOG_LEVEL": "warn"}

        with patched_client(fake_api):
            result = runner.invoke(app, SMALL_RUN + ["--concurrency", "0", "--output", str(report)], env=env)

        assert result.exit_code == 0, result.output
        assert "⚠ You specified less than 1 concurrent requests: 0. Defaulting to 10" in result.output
        assert "sources_populator.cli - WARNING - You specified less than 1 concurrent requests: 0" in result.output
        assert orjson.loads(report.read_bytes())["settings"]["concurrent_requests"] == 10

    def test_catalog_line_lists_source_types(self, runner, fake_api):
        with patched_client(fake_api):
            result = runner.invoke(app, SMALL_RUN, env=ENV)

        assert result.exit_code == 0, result.output
        assert "Catalog loaded with 1 source types: openshift" in result.output

    def test_missing_configuration(self, runner):
        result = runner.invoke(app, ["run"], env={"LOG_LEVEL": "error"})

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unhealthy_backend_aborts(self, runner, fake_api):
        fake_api.health_status = 500

        with patched_client(fake_api):
            result = runner.invoke(app, SMALL_RUN, env=ENV)

        assert result.exit_code == 1
        assert "Population aborted" in result.output
        assert [request.url.path for request in fake_api.requests] == ["/health"]

    def test_empty_catalog_aborts(self, runner, make_api):
        api = make_api(source_types=[], application_types=[])

        with patched_client(api):
            result = runner.invoke(app, SMALL_RUN, env=ENV)

        assert result.exit_code == 1
        assert "no usable source types" in result.output
        assert not any(request.method == "POST" for request in api.requests)


class TestPlanCommand:
    def test_plan_prints_totals(self, runner):
        result = runner.invoke(app, ["plan", "--tenants", "2", "--sources-per-tenant", "3", "--applications-per-source", "1"], env=ENV)

        assert result.exit_code == 0, result.output
        # 6 sources, 6 applications, 60 endpoints, 36 authentications, 60 connections
        assert "Total: 168" in result.output

    def test_plan_requires_configuration(self, runner):
        result = runner.invoke(app, ["plan"], env={})

        assert result.exit_code == 1


def test_help(runner):
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "run" in result.output
    assert "plan" in result.output


def test_main_entry_point():
    with patch("sys.argv", ["sources-populator", "--help"]):
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 0
