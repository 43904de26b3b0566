"""Shared test fixtures for async database engines, the geocode cache, and a controllable clock."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from laundromat_ops.core.config import Settings
from laundromat_ops.lib.geocode_cache import GeocodeCache
from laundromat_ops.models.base import Base


class FakeClock:
    """Deterministic UTC clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
def clock() -> FakeClock:
    """Clock pinned to a fixed instant."""
    return FakeClock(datetime(2026, 1, 15, 12, 0, tzinfo=UTC))


@pytest.fixture
async def bare_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory async SQLite engine with no tables."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool, echo=False)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_engine(bare_engine: AsyncEngine) -> AsyncEngine:
    """In-memory async SQLite engine with every model table created."""
    async with bare_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return bare_engine


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def cache(async_engine: AsyncEngine, clock: FakeClock) -> GeocodeCache:
    """Geocode cache over the test engine, driven by the fake clock."""
    return GeocodeCache(async_engine, clock=clock)


@pytest.fixture
def google_payload() -> dict:
    """A Google reverse geocoding response for a street address in Austin, TX."""
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": "123 Main St, Austin, TX 78701, USA",
                "place_id": "ChIJ-test-place",
                "types": ["street_address"],
                "geometry": {"location": {"lat": 30.2672, "lng": -97.7431}, "location_type": "ROOFTOP"},
                "address_components": [
                    {"long_name": "123", "short_name": "123", "types": ["street_number"]},
                    {"long_name": "Main Street", "short_name": "Main St", "types": ["route"]},
                    {"long_name": "Austin", "short_name": "Austin", "types": ["locality", "political"]},
                    {
                        "long_name": "Texas",
                        "short_name": "TX",
                        "types": ["administrative_area_level_1", "political"],
                    },
                    {"long_name": "United States", "short_name": "US", "types": ["country", "political"]},
                    {"long_name": "78701", "short_name": "78701", "types": ["postal_code"]},
                ],
            }
        ],
    }
