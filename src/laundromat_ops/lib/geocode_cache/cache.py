"""Geocode result cache backed by the ``geocoding_cache`` table.

Maps a normalized query string to the raw provider payload fetched for it so
that paid geocoding requests are issued at most once per query. Entries are
refreshed on every hit and pruned by last use, not by creation time.

The cache is best-effort: storage faults never raise out of an operation.
Each operation returns ``Ok(value)`` or ``StorageError`` and the caller picks
the fallback.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from loguru import logger
from sqlalchemy import case, delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from laundromat_ops.core.database import build_session_factory
from laundromat_ops.core.result import Ok, StorageError
from laundromat_ops.models.base import Base
from laundromat_ops.models.geocoding_cache import GeocodingCacheEntry
from laundromat_ops.schemas.geocode_cache import CacheStatistics

DEFAULT_MAX_AGE_DAYS = 90
RECENT_WINDOW_DAYS = 7

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

_STORAGE_ERRORS = (SQLAlchemyError, OSError)


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from backends that drop the offset."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def usage_percentage(part: int, total: int) -> int:
    """Return ``part / total`` as a whole percentage rounded half-up, 0 when total is 0."""
    if total == 0:
        return 0
    ratio = Decimal(part) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _is_blank(query: str | None) -> bool:
    return query is None or not query.strip()


class GeocodeCache:
    """Durable query → payload cache for geocoding results.

    Args:
        engine: Async engine the cache reads and writes through. The caller
            owns its lifecycle.
        clock: Returns the current UTC time; injectable for tests.
        recent_window_days: Trailing window used by :meth:`statistics`.

    Raises:
        ValueError: If the engine's dialect has no native upsert.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        clock: Callable[[], datetime] = utcnow,
        recent_window_days: int = RECENT_WINDOW_DAYS,
    ) -> None:
        dialect = engine.dialect.name
        if dialect not in _UPSERT_INSERTS:
            msg = f"Unsupported database dialect for geocode cache: {dialect}"
            raise ValueError(msg)
        self._engine = engine
        self._insert = _UPSERT_INSERTS[dialect]
        self._session_factory = build_session_factory(engine)
        self._clock = clock
        self._recent_window = timedelta(days=recent_window_days)

    @staticmethod
    def _failed(operation: str, error: BaseException) -> StorageError:
        logger.error(f"Geocode cache {operation} failed: {error}")
        return StorageError(operation=operation, cause=error)

    async def ensure_storage_ready(self) -> Ok[bool] | StorageError:
        """Create the cache table and its query index if they do not exist."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all, tables=[GeocodingCacheEntry.__table__])
        except _STORAGE_ERRORS as e:
            return self._failed("ensure_storage_ready", e)
        logger.info("Ensured geocoding_cache table exists")
        return Ok(True)

    async def lookup(self, query: str) -> Ok[Any | None] | StorageError:
        """Return the cached payload for ``query``, refreshing its last-used time.

        Args:
            query: Normalized query string; matched exactly.

        Returns:
            ``Ok(payload)`` on a hit, ``Ok(None)`` on a miss or blank query.
        """
        if _is_blank(query):
            logger.warning("Skipping geocode cache lookup for blank query")
            return Ok(None)

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(GeocodingCacheEntry.result).where(GeocodingCacheEntry.query == query)
                )
                row = result.first()
                if row is None:
                    logger.debug(f"Cache miss for query: {query}")
                    return Ok(None)

                await session.execute(
                    update(GeocodingCacheEntry)
                    .where(GeocodingCacheEntry.query == query)
                    .values(last_used_at=self._clock())
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
        except _STORAGE_ERRORS as e:
            return self._failed("lookup", e)

        logger.debug(f"Cache hit for query: {query}")
        return Ok(row[0])

    async def store(self, query: str, result: Any) -> Ok[bool] | StorageError:
        """Insert or overwrite the payload cached for ``query``.

        A new entry gets ``created_at == last_used_at == now``. An existing
        entry keeps its ``created_at`` while ``result`` and ``last_used_at``
        are replaced; concurrent writers resolve as last commit wins.

        Returns:
            ``Ok(True)`` when written, ``Ok(False)`` for a blank query or empty payload.
        """
        if _is_blank(query):
            logger.warning("Skipping geocode cache store for blank query")
            return Ok(False)
        if result is None:
            logger.warning(f"Skipping geocode cache store for empty payload: {query}")
            return Ok(False)

        now = self._clock()
        stmt = self._insert(GeocodingCacheEntry).values(
            query=query,
            result=result,
            created_at=now,
            last_used_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["query"],
            set_={
                "result": stmt.excluded.result,
                "last_used_at": stmt.excluded.last_used_at,
            },
        )

        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except _STORAGE_ERRORS as e:
            return self._failed("store", e)

        logger.debug(f"Cached result for query: {query}")
        return Ok(True)

    async def statistics(self) -> Ok[CacheStatistics] | StorageError:
        """Summarize entry count, recent usage and the oldest entry."""
        cutoff = self._clock() - self._recent_window
        stmt = select(
            func.count(GeocodingCacheEntry.id),
            func.count(case((GeocodingCacheEntry.last_used_at > cutoff, 1))),
            func.min(GeocodingCacheEntry.created_at),
        )

        try:
            async with self._session_factory() as session:
                total, recent, oldest = (await session.execute(stmt)).one()
        except _STORAGE_ERRORS as e:
            return self._failed("statistics", e)

        return Ok(
            CacheStatistics(
                total=total,
                recently_used=recent,
                recent_usage_ratio=usage_percentage(recent, total),
                oldest_entry=as_utc(oldest),
            )
        )

    async def prune(self, max_age_days: float = DEFAULT_MAX_AGE_DAYS) -> Ok[int] | StorageError:
        """Delete entries whose last use is older than ``max_age_days``.

        Returns:
            ``Ok(count)`` with the number of entries removed.

        Raises:
            ValueError: If ``max_age_days`` is negative.
        """
        if max_age_days < 0:
            msg = f"max_age_days must be non-negative, got {max_age_days}"
            raise ValueError(msg)

        try:
            cutoff = self._clock() - timedelta(days=max_age_days)
        except OverflowError:
            # Age reaches past the earliest representable time; nothing is that old
            cutoff = datetime.min.replace(tzinfo=UTC)

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(GeocodingCacheEntry)
                    .where(GeocodingCacheEntry.last_used_at < cutoff)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
        except _STORAGE_ERRORS as e:
            return self._failed("prune", e)

        removed = result.rowcount or 0
        logger.info(f"Pruned {removed} old cache entries")
        return Ok(removed)
