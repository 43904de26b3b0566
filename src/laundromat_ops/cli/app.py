"""Typer CLI root application."""

import typer

from laundromat_ops.core.config import get_settings
from laundromat_ops.core.logging import setup_logging

app = typer.Typer(name="laundromat-ops", help="Laundromat directory operational tooling")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from laundromat_ops.cli.cache_cmd import cache_app
    from laundromat_ops.cli.geocode_cmd import geocode_app

    app.add_typer(cache_app, name="cache", help="Geocode cache maintenance commands")
    app.add_typer(geocode_app, name="geocode", help="Geocoding commands")


_register_subcommands()
