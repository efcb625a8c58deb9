"""
Database Engine

One async engine per process, created at application startup. The data
store asks for the session factory and opens a short-lived session per
query, so concurrent dashboard sections never share a session.
"""

import time
from typing import Any, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from marketplace_analytics.config import get_settings

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _engine_options(url: str, echo: bool) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    # asyncpg keeps its own connection pool; SQLite files must not be shared across tasks
    if make_url(url).get_backend_name() in ("postgresql", "sqlite"):
        options["poolclass"] = NullPool
    return options


async def init_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and session factory, then check the connection.

    Args:
        url: Async database URL; defaults to the configured one
    """
    global _engine, _session_factory

    if _engine is not None:
        logger.warning("Database engine already created, reusing it")
        return _engine

    database = get_settings().database
    database_url = url or database.async_url

    _engine = create_async_engine(database_url, **_engine_options(database_url, database.echo))
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database connection check failed", url=make_url(database_url).render_as_string(), error=str(e))
        raise

    logger.info("Database engine ready", backend=make_url(database_url).get_backend_name())
    return _engine


async def close_database() -> None:
    global _engine, _session_factory

    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database engine disposed")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Session factory for the data store.

    Raises:
        RuntimeError: If ``init_database`` has not run
    """
    if _session_factory is None:
        raise RuntimeError("Database engine not created; call init_database() at startup")
    return _session_factory


async def check_database_health() -> Dict[str, Any]:
    """Round-trip a trivial query and report its latency."""
    started = time.perf_counter()
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "latency_ms": round((time.perf_counter() - started) * 1000, 2)}
