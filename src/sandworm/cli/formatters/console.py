# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console output formatter for scan results."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sandworm import __version__
from sandworm.core.constants import Severity
from sandworm.models.scan import FeedStatus, ScanResult

console = Console()

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}

ORIGIN_COLORS = {
    "network": "green",
    "cache": "cyan",
    "offline": "yellow",
}


def format_intel_status(statuses: list[FeedStatus], ioc_count: int | None = None) -> None:
    """Print where each feed's data came from."""
    table = Table(title="Threat Intelligence")
    table.add_column("Feed", style="bold")
    table.add_column("Origin")
    table.add_column("Entries", justify="right")
    table.add_column("Error", style="dim")
    for status in statuses:
        color = ORIGIN_COLORS.get(status.origin, "white")
        table.add_row(
            status.feed,
            f"[{color}]{status.origin}[/{color}]",
            str(status.entry_count),
            status.error or "",
        )
    console.print(table)
    if ioc_count is not None:
        console.print(f"  {ioc_count} distinct package names tracked")


def format_scan_result(result: ScanResult) -> None:
    """Print a scan result to the console with Rich formatting."""
    console.print()
    console.print(f"[bold]sandworm v{__version__}[/bold] - npm supply-chain compromise detector")
    console.print()

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_column("key", style="dim")
    info_table.add_column("value")
    info_table.add_row("Target:", result.target)
    info_table.add_row("Roots:", ", ".join(r.label for r in result.roots) or "N/A")
    info_table.add_row(
        "Intel:",
        ", ".join(f"{s.feed}={s.origin} ({s.entry_count})" for s in result.intel) or "N/A",
    )
    console.print(info_table)
    console.print()

    if result.findings:
        highest = result.highest_severity
        color = SEVERITY_COLORS.get(highest, "white") if highest else "white"
        console.print(
            Panel(
                f"[{color}]COMPROMISE INDICATORS FOUND[/{color}]"
                f"  (highest severity: {highest})",
                style=color,
            )
        )

        table = Table(show_lines=False)
        table.add_column("Severity", no_wrap=True)
        table.add_column("Type", style="bold", no_wrap=True)
        table.add_column("Package")
        table.add_column("Version")
        table.add_column("Root", style="cyan")
        table.add_column("Path", style="dim", overflow="fold")
        for finding in result.findings:
            sev_color = SEVERITY_COLORS.get(finding.severity, "white")
            table.add_row(
                Text(finding.severity.upper(), style=sev_color),
                finding.finding_type,
                finding.package_name,
                finding.version or "-",
                finding.root_label,
                finding.path,
            )
        console.print(table)
    else:
        console.print(Panel("[bold green]No compromise indicators detected[/bold green]"))
    console.print()

    counts = result.finding_count_by_severity
    parts = [f"{counts[sev]} {sev}" for sev in Severity if sev in counts]
    summary = ", ".join(parts) if parts else "0 findings"
    console.print(f"  Summary: {len(result.findings)} findings ({summary})")
    console.print(f"  IOCs:    {result.ioc_count}")
    if result.duration_ms is not None:
        console.print(f"  Duration: {result.duration_ms / 1000:.1f}s")
    if result.errors:
        console.print(f"  Errors: {len(result.errors)}", style="red")
        for error in result.errors:
            console.print(f"    {error}", style="dim")
    console.print()
