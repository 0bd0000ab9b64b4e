# -*- coding: utf-8 -*-
"""Location: ./sources_populator/utils/reporting.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Run reporting utilities with rich display.
"""

# Standard
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

# Third-Party
import orjson
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# First-Party
from sources_populator.config import Settings
from sources_populator.models import ResourceKind
from sources_populator.services.dispatcher import TOTAL_KEYS

# Settings echoed in the JSON report.
SUMMARY_SETTINGS = {
    "number_of_tenants",
    "sources_per_tenant",
    "applications_per_source",
    "endpoints_per_source",
    "rhc_connections_per_tenant",
    "authentications_per_resource",
    "concurrent_requests",
    "max_attempts",
    "random_seed",
}


class RunReporter:
    """Console reporter for a populator run."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the reporter.

        Args:
            console: Rich console instance
        """
        self.console = console or Console()

    def print_step(self, message: str, style: str = "bold blue"):
        """Print a step message.

        Args:
            message: Message to print
            style: Rich style string
        """
        self.console.print(f"[{style}]→[/{style}] {message}")

    def print_success(self, message: str):
        """Print success message.

        Args:
            message: Message to print
        """
        self.console.print(f"[bold green]✓[/bold green] {message}")

    def print_error(self, message: str):
        """Print error message.

        Args:
            message: Message to print
        """
        self.console.print(f"[bold red]✗[/bold red] {message}")

    def print_warning(self, message: str):
        """Print warning message.

        Args:
            message: Message to print
        """
        self.console.print(f"[bold yellow]⚠[/bold yellow] {message}")

    def print_plan(self, planned: Mapping[ResourceKind, int]):
        """Print the planned totals.

        Args:
            planned: Planned totals keyed by kind
        """
        table = Table(show_header=True, box=None)
        table.add_column("Resource", style="cyan", no_wrap=True)
        table.add_column("Planned", justify="right", style="yellow")

        for kind, count in planned.items():
            table.add_row(TOTAL_KEYS[kind], f"{count:,}")

        self.console.print(table)

    def print_totals(self, created: Mapping[str, int], planned: Mapping[ResourceKind, int]):
        """Print created versus planned totals per kind.

        Args:
            created: Created totals keyed by report name
            planned: Planned totals keyed by kind
        """
        table = Table(show_header=True, box=None)
        table.add_column("Resource", style="cyan", no_wrap=True)
        table.add_column("Created", justify="right", style="green")
        table.add_column("Planned", justify="right", style="yellow")
        table.add_column("Dropped", justify="right", style="red")

        for kind, expected in planned.items():
            name = TOTAL_KEYS[kind]
            count = created.get(name, 0)
            table.add_row(name, f"{count:,}", f"{expected:,}", f"{max(expected - count, 0):,}")

        self.console.print(table)

    def print_summary(self, total_created: int, duration: float, peak_in_flight: int, concurrency: int):
        """Print final summary.

        Args:
            total_created: Fixtures created, all kinds together
            duration: Total duration in seconds
            peak_in_flight: Highest number of simultaneous creation calls
            concurrency: Configured ceiling
        """
        rate = total_created / duration if duration > 0 else 0

        panel = Panel(
            f"[bold]Total Created:[/bold] {total_created:,}\n"
            f"[bold]Duration:[/bold] {duration:.2f}s\n"
            f"[bold]Rate:[/bold] {rate:,.2f} resources/second\n"
            f"[bold]Peak In-Flight:[/bold] {peak_in_flight}/{concurrency}",
            title="[bold green]Population Complete[/bold green]",
            border_style="green",
        )
        self.console.print(panel)


def write_report(path: Path, summary: Dict[str, Any]) -> Path:
    """Save a run summary as indented JSON.

    Args:
        path: Output file, parent directories are created
        summary: Run summary

    Returns:
        Path: The written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(summary, option=orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS))
    return path


def build_summary(
    settings: Settings, totals: Mapping[str, int], planned: Mapping[ResourceKind, int], duration: float, peak_in_flight: int
) -> Dict[str, Any]:
    """Assemble the machine-readable summary of a run.

    Args:
        settings: Settings the run used
        totals: Created totals keyed by report name
        planned: Planned totals keyed by kind
        duration: Elapsed seconds
        peak_in_flight: Highest number of simultaneous creation calls

    Returns:
        Dict[str, Any]: Summary, ready for :func:`write_report`.
    """
    created = sum(totals.values())
    return {
        "timestamp": datetime.now().isoformat(),
        "duration_seconds": round(duration, 3),
        "total_created": created,
        "resources_per_second": round(created / duration, 2) if duration > 0 else 0,
        "totals": dict(totals),
        "planned": {TOTAL_KEYS[kind]: count for kind, count in planned.items()},
        "peak_in_flight": peak_in_flight,
        "settings": settings.model_dump(include=SUMMARY_SETTINGS),
    }
