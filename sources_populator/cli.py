# -*- coding: utf-8 -*-
"""Location: ./sources_populator/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Sources populator command line.

Usage:
    # Populate with the settings found in the environment or .env
    sources-populator run

    # Override the shape of the run
    sources-populator run --tenants 1 --sources-per-tenant 5 --concurrency 4 --output reports/run.json

    # Show how many fixtures a run would create, without contacting the back end
    sources-populator plan
"""

# Standard
import asyncio
from pathlib import Path
import random
import time
from typing import Any, Dict, Optional

# Third-Party
from faker import Faker
from rich.console import Console
from rich.markup import escape
import typer
from typing_extensions import Annotated

# First-Party
from sources_populator.catalog import CatalogError
from sources_populator.config import ConfigurationError, load_settings, Settings
from sources_populator.services.catalog_service import CatalogService
from sources_populator.services.dispatcher import BoundedDispatcher
from sources_populator.services.fixture_factory import FixtureFactory
from sources_populator.services.logging_service import LoggingService
from sources_populator.services.populator import Populator
from sources_populator.services.sources_client import SourcesApiClient, SourcesApiError
from sources_populator.utils.identity import generate_tenants
from sources_populator.utils.reporting import build_summary, RunReporter, write_report

app = typer.Typer(
    help="Populate a Sources API back end with synthetic fixtures for load testing.",
    no_args_is_help=True,
)

console = Console()

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


async def populate(settings: Settings, reporter: RunReporter) -> Dict[str, Any]:
    """Check the back end, build the catalog and create every fixture.

    Args:
        settings: Populator settings
        reporter: Console reporter

    Returns:
        Dict[str, Any]: Run summary.

    Raises:
        SourcesApiError: If the back end is not healthy.
        CatalogError: If the compatibility catalog cannot be built.
    """
    rng = random.Random(settings.random_seed)
    faker = Faker()
    if settings.random_seed is not None:
        faker.seed_instance(settings.random_seed)

    plan = settings.generation_plan()
    planned = plan.expected_totals()

    async with SourcesApiClient(settings) as client:
        reporter.print_step(f"Checking the Sources API at {settings.base_url}...")
        await client.health_check()
        reporter.print_success("Sources API is online")

        reporter.print_step("Loading the compatibility catalog...")
        catalog = await CatalogService(client, rng).build()
        names = ", ".join(entry.name for entry in catalog.source_types)
        reporter.print_success(f"Catalog loaded with {len(catalog)} source types: {escape(names)}")

        dispatcher = BoundedDispatcher(client, plan.concurrency, request_timeout=settings.request_timeout, max_attempts=settings.max_attempts)
        populator = Populator(plan, catalog, FixtureFactory(catalog, faker), dispatcher)

        reporter.print_step(f"Planning to create {sum(planned.values()):,} resources for {plan.tenants} tenants, {plan.concurrency} requests at a time")
        start_time = time.time()
        counters = await populator.run(generate_tenants(plan.tenants))
        elapsed_time = time.time() - start_time

    totals = counters.totals()
    logger.info("Statistics - created resources", extra={"elapsed_time": f"{elapsed_time:.3f}s", **{f"created_{name}": count for name, count in totals.items()}})

    reporter.print_totals(totals, planned)
    reporter.print_summary(counters.total(), elapsed_time, dispatcher.peak_in_flight, plan.concurrency)
    return build_summary(settings, totals, planned, elapsed_time, dispatcher.peak_in_flight)


@app.command()
def run(
    tenants: Annotated[Optional[int], typer.Option("--tenants", help="Number of tenants to create")] = None,
    sources_per_tenant: Annotated[Optional[int], typer.Option("--sources-per-tenant", help="Sources created per tenant")] = None,
    applications_per_source: Annotated[Optional[int], typer.Option("--applications-per-source", help="Applications created per source")] = None,
    endpoints_per_source: Annotated[Optional[int], typer.Option("--endpoints-per-source", help="Endpoints created per source")] = None,
    rhc_connections_per_tenant: Annotated[Optional[int], typer.Option("--rhc-connections-per-tenant", help="RHC connections created per source")] = None,
    authentications_per_resource: Annotated[Optional[int], typer.Option("--authentications-per-resource", help="Authentications per source and application")] = None,
    concurrency: Annotated[Optional[int], typer.Option("--concurrency", "-c", help="Maximum simultaneous creation requests")] = None,
    max_attempts: Annotated[Optional[int], typer.Option("--max-attempts", help="Attempts per creation request")] = None,
    seed: Annotated[Optional[int], typer.Option("--seed", help="Random seed for reproducible picks")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="debug, info, warn or error")] = None,
    log_format: Annotated[Optional[str], typer.Option("--log-format", help="json or text")] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output report path (JSON)")] = None,
):
    """Populate the back end with fixtures

    Args:
        tenants: Number of tenants to create
        sources_per_tenant: Sources created per tenant
        applications_per_source: Applications created per source
        endpoints_per_source: Endpoints created per source
        rhc_connections_per_tenant: RHC connections created per source
        authentications_per_resource: Authentications per source and application
        concurrency: Maximum simultaneous creation requests
        max_attempts: Attempts per creation request
        seed: Random seed
        log_level: Log level
        log_format: Log record format
        output: Where to write the JSON report

    Raises:
        Exit: With code 1 when the configuration, the health check or the catalog fails.
    """
    try:
        settings = load_settings(
            number_of_tenants=tenants,
            sources_per_tenant=sources_per_tenant,
            applications_per_source=applications_per_source,
            endpoints_per_source=endpoints_per_source,
            rhc_connections_per_tenant=rhc_connections_per_tenant,
            authentications_per_resource=authentications_per_resource,
            concurrent_requests=concurrency,
            max_attempts=max_attempts,
            random_seed=seed,
            log_level=log_level,
            log_format=log_format,
        )
    except ConfigurationError as e:
        console.print(f"[red]✗ Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    logging_service.configure(settings.log_level, settings.log_format)
    reporter = RunReporter(console)
    if settings.concurrency_warning:
        logger.warning(settings.concurrency_warning)
        reporter.print_warning(settings.concurrency_warning)

    try:
        summary = asyncio.run(populate(settings, reporter))
    except (SourcesApiError, CatalogError) as e:
        logger.error(f"Population aborted: {e}")
        reporter.print_error(f"Population aborted: {escape(str(e))}")
        raise typer.Exit(code=1)
    finally:
        logging_service.shutdown()

    if output:
        report_path = write_report(output, summary)
        reporter.print_success(f"Report saved to {report_path}")


@app.command("plan")
def show_plan(
    tenants: Annotated[Optional[int], typer.Option("--tenants", help="Number of tenants to create")] = None,
    sources_per_tenant: Annotated[Optional[int], typer.Option("--sources-per-tenant", help="Sources created per tenant")] = None,
    applications_per_source: Annotated[Optional[int], typer.Option("--applications-per-source", help="Applications created per source")] = None,
    endpoints_per_source: Annotated[Optional[int], typer.Option("--endpoints-per-source", help="Endpoints created per source")] = None,
    rhc_connections_per_tenant: Annotated[Optional[int], typer.Option("--rhc-connections-per-tenant", help="RHC connections created per source")] = None,
    authentications_per_resource: Annotated[Optional[int], typer.Option("--authentications-per-resource", help="Authentications per source and application")] = None,
):
    """Show the totals a fully successful run would create

    Args:
        tenants: Number of tenants to create
        sources_per_tenant: Sources created per tenant
        applications_per_source: Applications created per source
        endpoints_per_source: Endpoints created per source
        rhc_connections_per_tenant: RHC connections created per source
        authentications_per_resource: Authentications per source and application

    Raises:
        Exit: With code 1 when the configuration is invalid.
    """
    try:
        settings = load_settings(
            number_of_tenants=tenants,
            sources_per_tenant=sources_per_tenant,
            applications_per_source=applications_per_source,
            endpoints_per_source=endpoints_per_source,
            rhc_connections_per_tenant=rhc_connections_per_tenant,
            authentications_per_resource=authentications_per_resource,
        )
    except ConfigurationError as e:
        console.print(f"[red]✗ Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    planned = settings.generation_plan().expected_totals()
    RunReporter(console).print_plan(planned)
    console.print(f"[bold]Total:[/bold] {sum(planned.values()):,}")


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
