"""Database dependency injection for FastAPI.

Provides async sessions for tenant/user lookups and a sessionmaker for the
audit recorder, which opens its own short-lived sessions so that an audit
failure never touches the business transaction.

Engines are created lazily per role ("read", "write") and cached together
with their sessionmaker until ``close_database_connections`` disposes them.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import AsyncGenerator, Literal

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_read_engine, create_write_engine
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import DatabaseSettings, get_database_settings

EngineRole = Literal["read", "write"]

_probe = DefaultConnectionProbe()

_factories: dict[EngineRole, Callable[[DatabaseSettings], AsyncEngine]] = {
    "write": create_write_engine,
    "read": create_read_engine,
}
_engines: dict[EngineRole, AsyncEngine] = {}
_sessionmakers: dict[EngineRole, async_sessionmaker[AsyncSession]] = {}

_engine_lock = threading.Lock()


def _ensure_engine(role: EngineRole) -> AsyncEngine:
    # Double-checked so concurrent first requests build one engine per role
    engine = _engines.get(role)
    if engine is None:
        with _engine_lock:
            engine = _engines.get(role)
            if engine is None:
                settings = get_database_settings()
                engine = _factories[role](settings)
                _sessionmakers[role] = async_sessionmaker(
                    engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _engines[role] = engine
                _probe.engine_created(role=role, connection=settings.connection_string)
    return engine


def get_write_engine() -> AsyncEngine:
    """Get the write database engine (singleton)."""
    return _ensure_engine("write")


def get_read_engine() -> AsyncEngine:
    """Get the read database engine (singleton)."""
    return _ensure_engine("read")


async def get_read_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a read session for tenant and user lookups (FastAPI dependency).

    Yields:
        AsyncSession for read-only database operations
    """
    _ensure_engine("read")
    async with _sessionmakers["read"]() as session:
        yield session


def get_audit_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker used for audit inserts.

    Each audit write opens and commits its own session on the write engine.

    Returns:
        Sessionmaker bound to the write engine
    """
    _ensure_engine("write")
    return _sessionmakers["write"]


async def close_database_connections() -> None:
    """Dispose of all engines on application shutdown.

    Also drops the cached sessionmakers to allow reinitialization.
    """
    for role in list(_engines):
        engine = _engines.pop(role)
        _sessionmakers.pop(role, None)
        await engine.dispose()
        _probe.pool_closed(role=role)
