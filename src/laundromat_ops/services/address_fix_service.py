"""Address repair: reverse geocode laundromats whose address is missing or a placeholder.

Walks the ``laundromats`` table in id order, resolves each row's coordinates
through the geocode cache (falling back to Google), and writes the resolved
street address back. Progress is checkpointed to a JSON file after every
batch so an interrupted run resumes where it stopped. Requests and batches are
paced with fixed delays to stay under provider rate limits.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from laundromat_ops.lib.geocode_cache import GeocodeCache, utcnow
from laundromat_ops.lib.geocoder import (
    PLACEHOLDER_MARKER,
    BaseGeocoder,
    GeocodingProviderError,
    ResolvedAddress,
)
from laundromat_ops.models.laundromat import Laundromat
from laundromat_ops.services.geocoding_service import cached_reverse_geocode

_NEEDS_ADDRESS = or_(
    Laundromat.address.is_(None),
    func.trim(Laundromat.address) == "",
    Laundromat.address.like(f"%{PLACEHOLDER_MARKER}%"),
)


class AddressFixProgress(BaseModel):
    """Resumable checkpoint for the address-fix workflow."""

    last_processed_id: int = 0
    total_processed: int = 0
    success_count: int = 0
    error_count: int = 0
    start_time: datetime = Field(default_factory=utcnow)
    last_update_time: datetime | None = None

    @classmethod
    def load(cls, path: Path) -> "AddressFixProgress":
        """Read a checkpoint, starting fresh when the file is missing or unreadable."""
        if not path.exists():
            return cls()
        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"Error loading progress from {path}, starting fresh: {e}")
            return cls()

    def save(self, path: Path) -> None:
        """Stamp ``last_update_time`` and write the checkpoint."""
        self.last_update_time = utcnow()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")


class RowOutcome(StrEnum):
    """Result of processing a single laundromat."""

    UPDATED = "updated"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class MissingAddressRow:
    """Identifying columns of a laundromat that needs an address."""

    id: int
    name: str
    latitude: float | None
    longitude: float | None


@dataclass
class BatchOutcome:
    """Counts from one batch; ``done`` when no rows remained."""

    done: bool
    last_processed_id: int = 0
    success_count: int = 0
    error_count: int = 0


async def count_missing_addresses(session: AsyncSession) -> int:
    """Count laundromats whose address is missing or a placeholder."""
    result = await session.execute(select(func.count(Laundromat.id)).where(_NEEDS_ADDRESS))
    return result.scalar_one()


async def fetch_missing_address_batch(session: AsyncSession, after_id: int, limit: int) -> list[MissingAddressRow]:
    """Fetch the next ``limit`` laundromats needing an address with id > ``after_id``."""
    result = await session.execute(
        select(Laundromat.id, Laundromat.name, Laundromat.latitude, Laundromat.longitude)
        .where(Laundromat.id > after_id, _NEEDS_ADDRESS)
        .order_by(Laundromat.id)
        .limit(limit)
    )
    return [MissingAddressRow(*row) for row in result.all()]


async def apply_resolved_address(
    session: AsyncSession,
    laundromat_id: int,
    resolved: ResolvedAddress,
    payload: dict[str, Any],
    now: datetime,
) -> None:
    """Write resolved address fields and the raw payload onto a laundromat row."""
    await session.execute(
        update(Laundromat)
        .where(Laundromat.id == laundromat_id)
        .values(
            address=resolved.full_address,
            city=resolved.city,
            state=resolved.state,
            zip=resolved.postal_code,
            geocoded_address=payload,
            geocoded_at=now,
        )
        .execution_options(synchronize_session=False)
    )


async def process_laundromat(
    session: AsyncSession,
    cache: GeocodeCache,
    geocoder: BaseGeocoder,
    laundromat: MissingAddressRow,
    *,
    clock: Callable[[], datetime] = utcnow,
) -> RowOutcome:
    """Resolve and persist the address of one laundromat."""
    lid, name = laundromat.id, laundromat.name
    if laundromat.latitude is None or laundromat.longitude is None:
        logger.info(f"Skipping laundromat {lid}: missing coordinates")
        return RowOutcome.SKIPPED

    logger.info(f"Geocoding laundromat {lid} ({name}) at ({laundromat.latitude}, {laundromat.longitude})")
    try:
        outcome = await cached_reverse_geocode(cache, geocoder, laundromat.latitude, laundromat.longitude)
    except GeocodingProviderError as e:
        logger.warning(f"Failed to geocode laundromat {lid} ({name}): {e}")
        return RowOutcome.FAILED

    resolved = ResolvedAddress.from_google_payload(outcome.payload) if outcome.payload else None
    if resolved is None or not resolved.full_address:
        logger.warning(f"No address found for laundromat {lid} ({name})")
        return RowOutcome.FAILED

    try:
        await apply_resolved_address(session, lid, resolved, outcome.payload, clock())
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error updating laundromat {lid} with geocoded address: {e}")
        return RowOutcome.FAILED

    source = "cache" if outcome.from_cache else "google"
    logger.info(f"Updated laundromat {lid} ({name}) with address: {resolved.full_address} [{source}]")
    return RowOutcome.UPDATED


async def process_batch(
    session_factory: async_sessionmaker[AsyncSession],
    cache: GeocodeCache,
    geocoder: BaseGeocoder,
    *,
    after_id: int,
    batch_size: int,
    request_delay: float,
    clock: Callable[[], datetime] = utcnow,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> BatchOutcome:
    """Process one batch of laundromats after ``after_id``.

    Raises:
        SQLAlchemyError: If the batch cannot be fetched.
    """
    async with session_factory() as session:
        laundromats = await fetch_missing_address_batch(session, after_id, batch_size)
        if not laundromats:
            return BatchOutcome(done=True, last_processed_id=after_id)

        logger.info(f"Processing batch of {len(laundromats)} laundromats with missing addresses")
        batch = BatchOutcome(done=False, last_processed_id=after_id)
        for laundromat in laundromats:
            row = await process_laundromat(session, cache, geocoder, laundromat, clock=clock)
            if row is RowOutcome.UPDATED:
                batch.success_count += 1
            elif row is RowOutcome.FAILED:
                batch.error_count += 1
            batch.last_processed_id = max(batch.last_processed_id, laundromat.id)
            await sleep(request_delay)

    return batch


async def run_address_fix(
    session_factory: async_sessionmaker[AsyncSession],
    cache: GeocodeCache,
    geocoder: BaseGeocoder,
    *,
    progress_path: Path,
    batch_size: int = 10,
    request_delay: float = 0.5,
    batch_delay: float = 2.0,
    retry_delay: float = 5.0,
    max_retries: int = 5,
    clock: Callable[[], datetime] = utcnow,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AddressFixProgress:
    """Repair every missing or placeholder address, resuming from ``progress_path``.

    A batch whose rows cannot be fetched does not advance the checkpoint; it
    is retried after ``retry_delay`` seconds until ``max_retries`` consecutive
    failures, after which the storage error is re-raised.

    Returns:
        The final checkpoint.
    """
    logger.info("Starting geocoding cache process for laundromats with missing addresses")

    total_missing = 0
    try:
        async with session_factory() as session:
            total_missing = await count_missing_addresses(session)
    except SQLAlchemyError as e:
        logger.error(f"Error getting total count of missing addresses: {e}")
    logger.info(f"Found {total_missing} laundromats with missing addresses")

    progress = AddressFixProgress.load(progress_path)
    logger.info(f"Resuming from last processed ID: {progress.last_processed_id}")

    consecutive_failures = 0
    while True:
        try:
            batch = await process_batch(
                session_factory,
                cache,
                geocoder,
                after_id=progress.last_processed_id,
                batch_size=batch_size,
                request_delay=request_delay,
                clock=clock,
                sleep=sleep,
            )
        except SQLAlchemyError as e:
            consecutive_failures += 1
            logger.error(f"Error processing batch: {e}")
            if consecutive_failures > max_retries:
                logger.error(f"Giving up after {consecutive_failures} consecutive failed batches")
                raise
            logger.info(f"Waiting {retry_delay}s before retry...")
            await sleep(retry_delay)
            continue

        consecutive_failures = 0
        if batch.done:
            logger.info("All laundromats with missing addresses processed")
            break

        progress.last_processed_id = batch.last_processed_id
        progress.total_processed += batch.success_count + batch.error_count
        progress.success_count += batch.success_count
        progress.error_count += batch.error_count
        progress.save(progress_path)

        if total_missing > 0:
            percent = progress.total_processed / total_missing * 100
            logger.info(f"Progress: {progress.total_processed}/{total_missing} ({percent:.2f}%)")
        logger.info(f"Successes: {progress.success_count}, Errors: {progress.error_count}")

        logger.info(f"Waiting {batch_delay}s before next batch...")
        await sleep(batch_delay)

    elapsed = int((clock() - progress.start_time).total_seconds())
    hours, remainder = divmod(elapsed, 3600)
    minutes, seconds = divmod(remainder, 60)
    logger.info(
        f"Geocoding cache process complete: {progress.total_processed} processed, "
        f"{progress.success_count} updated, {progress.error_count} errors, "
        f"runtime {hours}h {minutes}m {seconds}s"
    )
    return progress
