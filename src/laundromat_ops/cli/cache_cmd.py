"""Geocode cache maintenance commands: statistics and pruning."""

import asyncio
from typing import TYPE_CHECKING

import typer

from laundromat_ops.core.result import StorageError
from laundromat_ops.schemas.geocode_cache import CacheStatistics

if TYPE_CHECKING:
    from laundromat_ops.lib.geocode_cache import GeocodeCache

cache_app = typer.Typer()


@cache_app.command("stats")
def cache_stats(
    prune: bool = typer.Option(False, "--prune", help="Prune stale entries after reporting"),  # noqa: FBT001
    max_age_days: int | None = typer.Option(
        None, "--max-age-days", min=0, help="Prune entries unused for this many days (default from settings)"
    ),
) -> None:
    """Ensure the cache table exists, print statistics, and optionally prune."""
    asyncio.run(_cache_stats(prune, max_age_days))


@cache_app.command("prune")
def cache_prune(
    max_age_days: int | None = typer.Option(
        None, "--max-age-days", min=0, help="Prune entries unused for this many days (default from settings)"
    ),
) -> None:
    """Delete cache entries not used within the age threshold."""
    asyncio.run(_cache_prune(max_age_days))


def _print_statistics(stats: CacheStatistics, window_days: int) -> None:
    oldest = stats.oldest_entry.isoformat() if stats.oldest_entry else "n/a"
    typer.echo("===== Geocoding Cache Statistics =====")
    typer.echo(f"  Total cache entries:     {stats.total}")
    typer.echo(f"  Recently used ({window_days} days):  {stats.recently_used} ({stats.recent_usage_ratio}%)")
    typer.echo(f"  Oldest entry:            {oldest}")


def _fail(error: StorageError) -> None:
    typer.echo(f"Geocode cache error: {error}", err=True)
    raise typer.Exit(code=1)


async def _run_prune(cache: "GeocodeCache", max_age_days: int) -> None:
    pruned = await cache.prune(max_age_days)
    if isinstance(pruned, StorageError):
        _fail(pruned)
    typer.echo(f"Pruned {pruned.value} entries unused for more than {max_age_days} days")


async def _cache_stats(prune: bool, max_age_days: int | None) -> None:
    """Async implementation of cache statistics."""
    from laundromat_ops.core.config import get_settings
    from laundromat_ops.core.database import engine_scope
    from laundromat_ops.lib.geocode_cache import GeocodeCache

    settings = get_settings()
    async with engine_scope(settings.database_url, schema=settings.database_schema) as engine:
        cache = GeocodeCache(engine, recent_window_days=settings.geocode_cache_recent_days)
        await cache.ensure_storage_ready()

        stats = await cache.statistics()
        if isinstance(stats, StorageError):
            _fail(stats)
        _print_statistics(stats.value, settings.geocode_cache_recent_days)

        if prune:
            await _run_prune(cache, max_age_days if max_age_days is not None else settings.geocode_cache_prune_days)


async def _cache_prune(max_age_days: int | None) -> None:
    """Async implementation of cache pruning."""
    from laundromat_ops.core.config import get_settings
    from laundromat_ops.core.database import engine_scope
    from laundromat_ops.lib.geocode_cache import GeocodeCache

    settings = get_settings()
    async with engine_scope(settings.database_url, schema=settings.database_schema) as engine:
        cache = GeocodeCache(engine)
        await cache.ensure_storage_ready()
        await _run_prune(cache, max_age_days if max_age_days is not None else settings.geocode_cache_prune_days)
