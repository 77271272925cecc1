# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Threat-intelligence CLI commands."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from sandworm.cli.exit_codes import ExitCode

app = typer.Typer()


@app.command()
def show(
    no_cache: Annotated[
        bool, typer.Option("--no-cache", help="Ignore cached feeds and refetch")
    ] = False,
) -> None:
    """Load both feeds and show where each one came from."""
    asyncio.run(_async_show(no_cache))


async def _async_show(no_cache: bool) -> None:
    from sandworm.cache.manager import create_intel_cache
    from sandworm.cli.formatters.console import format_intel_status
    from sandworm.core.config import get_settings
    from sandworm.intel.loader import IntelLoader

    settings = get_settings()
    cache = create_intel_cache(settings)
    try:
        loader = IntelLoader(cache=cache, settings=settings)
        index, statuses = await loader.build_index(no_cache=no_cache or settings.no_cache)
    finally:
        await cache.close()
    format_intel_status(statuses, ioc_count=len(index))


@app.command()
def update() -> None:
    """Refresh the offline snapshots from the live feeds."""
    failed = asyncio.run(_async_update())
    if failed:
        raise typer.Exit(ExitCode.FAILURE)


async def _async_update() -> int:
    from sandworm.cache.manager import create_intel_cache
    from sandworm.core.config import get_settings
    from sandworm.intel.loader import IntelLoader

    settings = get_settings()
    cache = create_intel_cache(settings)
    try:
        loader = IntelLoader(cache=cache, settings=settings)
        results = await loader.update_fallbacks()
    finally:
        await cache.close()

    typer.echo(f"Snapshot directory: {loader.fallback_dir}")
    failed = 0
    for feed, error in results.items():
        if error is None:
            typer.echo(f"  {feed}: updated")
        else:
            failed += 1
            typer.echo(f"  {feed}: FAILED ({error})", err=True)
    return failed
