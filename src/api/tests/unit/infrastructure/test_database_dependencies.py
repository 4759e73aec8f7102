"""Unit tests for database dependency injection.

Tests the FastAPI dependency providers for async database sessions. No
connection is opened: sessions connect lazily on first statement.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from infrastructure.database.dependencies import (
    close_database_connections,
    get_audit_sessionmaker,
    get_read_engine,
    get_read_session,
    get_write_engine,
)


@pytest_asyncio.fixture(autouse=True)
async def reset_engines():
    """Dispose engines between tests so each starts from a clean state."""
    yield
    await close_database_connections()


@pytest.mark.asyncio
async def test_engines_are_singletons():
    """Engines are cached and reused; read and write are distinct."""
    assert get_write_engine() is get_write_engine()
    assert get_read_engine() is get_read_engine()
    assert get_write_engine() is not get_read_engine()


@pytest.mark.asyncio
async def test_get_read_session_yields_session_on_read_engine():
    """Read sessions are bound to the read engine."""
    read_engine = get_read_engine()
    session_count = 0

    async for session in get_read_session():
        session_count += 1
        assert isinstance(session, AsyncSession)
        assert session.bind.sync_engine is read_engine.sync_engine

    assert session_count == 1


@pytest.mark.asyncio
async def test_audit_sessionmaker_binds_to_write_engine():
    """Audit sessions are opened on the write engine."""
    write_engine = get_write_engine()
    sessionmaker = get_audit_sessionmaker()

    async with sessionmaker() as session:
        assert session.bind.sync_engine is write_engine.sync_engine


@pytest.mark.asyncio
async def test_close_database_connections_allows_reinitialization():
    """After closing, new engines are created on demand."""
    first = get_write_engine()
    await close_database_connections()

    second = get_write_engine()

    assert isinstance(second, AsyncEngine)
    assert second is not first
