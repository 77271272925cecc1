# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import sys
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from sandworm.cli.commands import cache as cache_cmd
from sandworm.cli.commands import intel as intel_cmd
from sandworm.cli.exit_codes import ExitCode
from sandworm.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from sandworm.models.scan import ScanResult

app = typer.Typer(
    name="sandworm",
    help="Forensic detector for Shai-Hulud npm supply-chain compromise",
    no_args_is_help=True,
)

app.add_typer(intel_cmd.app, name="intel", help="Inspect and refresh threat intelligence")
app.add_typer(cache_cmd.app, name="cache", help="Manage the threat-intel cache")


class OutputFormat(StrEnum):
    CONSOLE = "console"
    CSV = "csv"
    JSON = "json"


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (overrides SANDWORM_LOG_LEVEL)"),
    ] = None,
) -> None:
    """Configure logging before any command runs."""
    from sandworm.core.config import get_settings
    from sandworm.core.logging import setup_logging

    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format)


@app.command()
def scan(
    target: Annotated[
        Path, typer.Argument(help="Project directory to scan")
    ] = Path("."),
    full_scan: Annotated[
        bool,
        typer.Option(
            "--full-scan",
            help="Also scan npm/yarn/pnpm caches and every nvm-installed Node version",
        ),
    ] = False,
    no_cache: Annotated[
        bool, typer.Option("--no-cache", help="Ignore cached threat intel and refetch")
    ] = False,
    no_upload: Annotated[
        bool, typer.Option("--no-upload", help="Do not upload the report")
    ] = False,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Report format"),
    ] = OutputFormat.CONSOLE,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the report to this file"),
    ] = None,
) -> None:
    """Scan a project (and optionally the whole machine) for compromised packages."""
    try:
        exit_code = asyncio.run(
            _async_scan(target, full_scan, no_cache, no_upload, fmt, output)
        )
    except KeyboardInterrupt:
        typer.echo("Scan interrupted.", err=True)
        raise typer.Exit(ExitCode.INTERRUPTED) from None
    raise typer.Exit(exit_code)


async def _async_scan(
    target: Path,
    full_scan: bool,
    no_cache: bool,
    no_upload: bool,
    fmt: OutputFormat,
    output: Path | None,
) -> int:
    from sandworm.core.config import get_settings
    from sandworm.reporting.upload import ReportUploader
    from sandworm.scanner.pipeline import ScanPipeline

    settings = get_settings()
    pipeline = ScanPipeline(settings=settings)

    try:
        result = await pipeline.run(target, full_scan=full_scan, no_cache=no_cache)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        return int(ExitCode.CONFIGURATION_ERROR)
    finally:
        await pipeline.loader.cache.close()

    _output_result(result, fmt, output)

    if not no_upload:
        uploader = ReportUploader.from_settings(settings)
        if uploader is not None:
            await uploader.upload(result)

    return int(ExitCode.OK)


def _output_result(result: ScanResult, fmt: OutputFormat, output: Path | None) -> None:
    from sandworm.cli.formatters.console import format_scan_result
    from sandworm.cli.formatters.csv_fmt import format_csv
    from sandworm.cli.formatters.json_fmt import format_json

    if fmt == OutputFormat.CONSOLE or output:
        format_scan_result(result)
    if fmt == OutputFormat.CONSOLE and not output:
        return

    # The console format saves a CSV report when --output is given
    report = format_json(result) if fmt == OutputFormat.JSON else format_csv(result)
    _write_output(report, output)


def _write_output(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Report written to {output}")
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


@app.command()
def version() -> None:
    """Show version information."""
    from sandworm import __version__

    typer.echo(f"sandworm v{__version__}")
