# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache management CLI commands."""

from __future__ import annotations

import asyncio

import typer

app = typer.Typer()


@app.command()
def clear() -> None:
    """Flush the threat-intel cache."""
    asyncio.run(_async_clear())


async def _async_clear() -> None:
    from sandworm.cache.manager import create_intel_cache
    from sandworm.core.config import get_settings

    cache = create_intel_cache(get_settings())
    try:
        count = await cache.clear()
    finally:
        await cache.close()
    typer.echo(f"Cache cleared: {count} entries removed.")
