"""Geocoding CLI commands for repairing missing laundromat addresses."""

import asyncio
from pathlib import Path

import typer

geocode_app = typer.Typer()


@geocode_app.command("fix-addresses")
def fix_addresses(
    batch_size: int | None = typer.Option(None, "--batch-size", min=1, help="Laundromats per batch"),
    progress_file: Path | None = typer.Option(None, "--progress-file", help="Checkpoint file for resuming"),  # noqa: B008
    reset: bool = typer.Option(False, "--reset", help="Discard the checkpoint and start over"),  # noqa: FBT001
) -> None:
    """Reverse geocode laundromats with missing or placeholder addresses."""
    asyncio.run(_fix_addresses(batch_size, progress_file, reset))


async def _fix_addresses(batch_size: int | None, progress_file: Path | None, reset: bool) -> None:
    """Async implementation of the address-fix workflow."""
    from laundromat_ops.core.config import get_settings
    from laundromat_ops.core.database import build_session_factory, engine_scope
    from laundromat_ops.lib.geocode_cache import GeocodeCache
    from laundromat_ops.lib.geocoder import GoogleMapsGeocoder
    from laundromat_ops.services.address_fix_service import run_address_fix

    settings = get_settings()
    if not settings.google_maps_api_key:
        typer.echo("Missing required environment variable: GOOGLE_MAPS_API_KEY", err=True)
        raise typer.Exit(code=1)

    progress_path = progress_file or Path(settings.address_fix_progress_file)
    if reset:
        progress_path.unlink(missing_ok=True)

    geocoder = GoogleMapsGeocoder(api_key=settings.google_maps_api_key, timeout=settings.geocoder_google_timeout)

    async with engine_scope(settings.database_url, schema=settings.database_schema) as engine:
        cache = GeocodeCache(engine, recent_window_days=settings.geocode_cache_recent_days)
        await cache.ensure_storage_ready()

        progress = await run_address_fix(
            build_session_factory(engine),
            cache,
            geocoder,
            progress_path=progress_path,
            batch_size=batch_size or settings.address_fix_batch_size,
            request_delay=settings.address_fix_request_delay,
            batch_delay=settings.address_fix_batch_delay,
            retry_delay=settings.address_fix_retry_delay,
            max_retries=settings.address_fix_max_retries,
        )

    typer.echo("\nAddress repair complete:")
    typer.echo(f"  Processed:  {progress.total_processed}")
    typer.echo(f"  Updated:    {progress.success_count}")
    typer.echo(f"  Errors:     {progress.error_count}")
