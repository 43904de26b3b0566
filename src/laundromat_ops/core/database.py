"""Async database engine construction and scoped lifecycle.

Engines are built explicitly and handed to the components that need them;
``engine_scope`` guarantees the connection pool is released on every exit
path, including errors.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


def build_engine(database_url: str, *, schema: str | None = None, **kwargs: object) -> AsyncEngine:
    """Create an async engine.

    Args:
        database_url: Async SQLAlchemy connection string.
        schema: Optional PostgreSQL schema placed first on the search path.
        **kwargs: Additional arguments passed to create_async_engine.

    Returns:
        The created async engine.
    """
    if schema is not None:
        connect_args = kwargs.pop("connect_args", {})
        if not isinstance(connect_args, dict):
            msg = "connect_args must be a dict"
            raise TypeError(msg)
        connect_args["server_settings"] = {"search_path": f"{schema},public"}
        kwargs["connect_args"] = connect_args
    # Only set pool defaults for connection-pooled engines (not SQLite/StaticPool)
    uses_static_pool = kwargs.get("poolclass") is StaticPool or "sqlite" in database_url
    if not uses_static_pool:
        kwargs.setdefault("pool_size", 5)
        kwargs.setdefault("max_overflow", 2)
    return create_async_engine(database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to ``engine``."""
    return async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def engine_scope(
    database_url: str, *, schema: str | None = None, **kwargs: object
) -> AsyncIterator[AsyncEngine]:
    """Yield an engine for the duration of a block and dispose it afterwards."""
    engine = build_engine(database_url, schema=schema, **kwargs)
    try:
        yield engine
    finally:
        await engine.dispose()
        logger.debug("Database engine disposed")
