"""Database connection pool management.

Wraps an asyncpg pool so operations are retried when the underlying TCP
connection has been dropped (idle-connection reapers, PostgreSQL restarts).
Persistence is optional: with a blank ``DATABASE_URL`` callers check
:func:`persistence_enabled` and skip the database entirely.
"""

import asyncio
import logging
from typing import Any

import asyncpg

from conductor.config import settings

logger = logging.getLogger(__name__)

# Exceptions that mean "the connection died, retry with a fresh one"
_RETRY_EXCEPTIONS = (
    asyncpg.ConnectionDoesNotExistError,
    asyncpg.InterfaceError,
    ConnectionResetError,
    OSError,
)

_MAX_RETRIES = 3


def persistence_enabled() -> bool:
    """True when a database is configured."""
    return bool(settings.DATABASE_URL)


def _invalidate_pool() -> None:
    """Forget the current pool so the next get_pool() call recreates it."""
    global _pool, _wrapper
    _pool = None
    _wrapper = None


class _ResilientPool:
    """Thin wrapper around :class:`asyncpg.Pool` that retries on dead connections.

    Only the Pool shorthand methods used by the repositories are wrapped;
    everything else is proxied straight through.
    """

    __slots__ = ("_pool",)

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    async def fetch(self, query: str, *args: Any, **kw: Any) -> list:
        return await self._retry(self._pool.fetch, query, *args, **kw)

    async def fetchrow(self, query: str, *args: Any, **kw: Any):
        return await self._retry(self._pool.fetchrow, query, *args, **kw)

    async def execute(self, query: str, *args: Any, **kw: Any) -> str:
        return await self._retry(self._pool.execute, query, *args, **kw)

    @staticmethod
    async def _retry(func, *args: Any, **kw: Any):
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES + 1):
            try:
                return await func(*args, **kw)
            except _RETRY_EXCEPTIONS as exc:
                last_exc = exc
                if attempt < _MAX_RETRIES:
                    wait = min(0.5 * (2 ** attempt), 5.0)
                    logger.warning(
                        "DB connection lost (attempt %d/%d): %s, retrying in %.1fs",
                        attempt + 1, _MAX_RETRIES + 1, exc, wait,
                    )
                    await asyncio.sleep(wait)
                else:
                    _invalidate_pool()
                    raise
        raise last_exc  # type: ignore[misc]

    def __getattr__(self, name: str):
        return getattr(self._pool, name)


_pool: asyncpg.Pool | None = None
_wrapper: _ResilientPool | None = None


async def get_pool() -> _ResilientPool:
    """Get or create the database connection pool."""
    global _pool, _wrapper
    if _pool is None:
        _pool = await asyncio.wait_for(
            asyncpg.create_pool(
                dsn=settings.DATABASE_URL,
                min_size=1,
                max_size=5,
                command_timeout=30,
            ),
            timeout=20,
        )
        _wrapper = _ResilientPool(_pool)
    return _wrapper  # type: ignore[return-value]


async def close_pool() -> None:
    """Close the database connection pool."""
    global _pool, _wrapper
    if _pool is not None:
        await _pool.close()
        _pool = None
        _wrapper = None
