"""Integration tests for the `laundromat-ops cache` and `geocode` CLI commands.

Commands run against a file-backed SQLite database configured through
DATABASE_URL; no external services are contacted.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from typer.testing import CliRunner

from laundromat_ops.cli.app import app
from laundromat_ops.lib.geocode_cache import GeocodeCache

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


@pytest.fixture
def database_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Point the CLI at a fresh SQLite file and silence logging setup."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'ops.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    monkeypatch.setattr("laundromat_ops.cli.app.setup_logging", lambda *args, **kwargs: None)
    return url


def _seed(url: str, entries: dict[str, int]) -> None:
    """Store one entry per query, each last used the given number of days ago."""

    async def _run() -> None:
        engine = create_async_engine(url)
        try:
            now = datetime.now(UTC)
            for query, days_ago in entries.items():
                cache = GeocodeCache(engine, clock=lambda d=days_ago: now - timedelta(days=d))
                await cache.ensure_storage_ready()
                await cache.store(query, {"query": query})
        finally:
            await engine.dispose()

    asyncio.run(_run())


class TestCacheStats:
    """Tests for `cache stats`."""

    def test_empty_cache(self, database_url: str) -> None:
        result = runner.invoke(app, ["cache", "stats"])

        assert result.exit_code == 0, result.output
        assert "Total cache entries:     0" in result.output
        assert "(0%)" in result.output
        assert "Oldest entry:            n/a" in result.output

    def test_reports_recent_usage(self, database_url: str) -> None:
        _seed(database_url, {"A": 1, "B": 2, "C": 30, "D": 40})

        result = runner.invoke(app, ["cache", "stats"])

        assert result.exit_code == 0, result.output
        assert "Total cache entries:     4" in result.output
        assert "Recently used (7 days):  2 (50%)" in result.output

    def test_prune_flag_uses_default_age(self, database_url: str) -> None:
        _seed(database_url, {"STALE": 100, "FRESH": 10})

        result = runner.invoke(app, ["cache", "stats", "--prune"])

        assert result.exit_code == 0, result.output
        assert "Total cache entries:     2" in result.output
        assert "Pruned 1 entries unused for more than 90 days" in result.output

    def test_prune_flag_with_custom_age(self, database_url: str) -> None:
        _seed(database_url, {"STALE": 100, "FRESH": 10})

        result = runner.invoke(app, ["cache", "stats", "--prune", "--max-age-days", "5"])

        assert result.exit_code == 0, result.output
        assert "Pruned 2 entries unused for more than 5 days" in result.output

    def test_prune_flag_with_age_beyond_calendar(self, database_url: str) -> None:
        _seed(database_url, {"STALE": 100, "FRESH": 10})

        result = runner.invoke(app, ["cache", "stats", "--prune", "--max-age-days", "1000000"])

        assert result.exit_code == 0, result.output
        assert "Pruned 0 entries unused for more than 1000000 days" in result.output


class TestCachePrune:
    """Tests for `cache prune`."""

    def test_prune_keeps_recent_entries(self, database_url: str) -> None:
        _seed(database_url, {"STALE": 100, "FRESH": 10})

        result = runner.invoke(app, ["cache", "prune", "--max-age-days", "200"])

        assert result.exit_code == 0, result.output
        assert "Pruned 0 entries" in result.output

    def test_prune_on_fresh_database_creates_table(self, database_url: str) -> None:
        result = runner.invoke(app, ["cache", "prune"])

        assert result.exit_code == 0, result.output
        assert "Pruned 0 entries unused for more than 90 days" in result.output

    def test_age_beyond_calendar_removes_nothing(self, database_url: str) -> None:
        _seed(database_url, {"STALE": 100, "FRESH": 10})

        result = runner.invoke(app, ["cache", "prune", "--max-age-days", "1000000"])

        assert result.exit_code == 0, result.output
        assert "Pruned 0 entries" in result.output

    def test_rejects_negative_age(self, database_url: str) -> None:
        result = runner.invoke(app, ["cache", "prune", "--max-age-days", "-3"])
        assert result.exit_code != 0


class TestGeocodeFixAddresses:
    """Tests for `geocode fix-addresses` preconditions."""

    def test_requires_api_key(self, database_url: str) -> None:
        result = runner.invoke(app, ["geocode", "fix-addresses"])

        assert result.exit_code == 1
        assert "GOOGLE_MAPS_API_KEY" in result.output
