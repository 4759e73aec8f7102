"""Unit tests for AuditLogRepository."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from tenancy.domain.aggregates import AuditEntry
from tenancy.domain.value_objects import AuditLogFilter
from tenancy.infrastructure.audit_log_repository import AuditLogRepository
from tenancy.infrastructure.models import AuditLogModel
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import IAuditLogRepository


@pytest.fixture
def mock_session():
    """Create mock async session; add() is synchronous on AsyncSession."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def repository(mock_session):
    return AuditLogRepository(session=mock_session, probe=MagicMock())


@pytest.fixture
def entry() -> AuditEntry:
    return AuditEntry.create(
        tenant_id="01ARZ3NDEKTSV4RRFFQ69G5FAV",
        action="stock.adjust",
        entity_type="product",
        entity_id="p-1",
        ip_address="198.51.100.1",
        user_agent="pos/2.0",
        user_id="user-1",
        changes={"stock": [3, 5]},
        metadata={"reason": "recount"},
    )


def _sql(mock_session: AsyncMock) -> str:
    stmt = mock_session.execute.call_args[0][0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestProtocolCompliance:
    def test_implements_protocol(self, repository):
        assert isinstance(repository, IAuditLogRepository)


class TestAdd:
    """Tests for add method."""

    @pytest.mark.asyncio
    async def test_inserts_and_commits(self, repository, mock_session, entry):
        await repository.add(entry)

        model = mock_session.add.call_args[0][0]
        assert isinstance(model, AuditLogModel)
        assert model.id == entry.id.value
        assert model.tenant_id == entry.tenant_id
        assert model.metadata_ == {"reason": "recount"}
        assert model.changes == {"stock": [3, 5]}
        assert model.created_at == entry.created_at
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back_and_raises(
        self, repository, mock_session, entry
    ):
        mock_session.commit.side_effect = IntegrityError("INSERT", {}, Exception())

        with pytest.raises(RepositoryUnavailableError):
            await repository.add(entry)

        mock_session.rollback.assert_awaited_once()


class TestListAndCount:
    """Tests for tenant-scoped reads."""

    @pytest.mark.asyncio
    async def test_list_is_tenant_scoped_newest_first(self, repository, mock_session):
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        mock_session.execute.return_value = result

        entries = await repository.list_by_tenant(
            "t1", AuditLogFilter(), offset=50, limit=50
        )

        assert entries == []
        sql = _sql(mock_session)
        assert "audit_logs.tenant_id =" in sql
        assert "ORDER BY audit_logs.created_at DESC" in sql
        assert "LIMIT" in sql and "OFFSET" in sql

    @pytest.mark.asyncio
    async def test_list_maps_models(self, repository, mock_session, entry):
        model = AuditLogModel(
            id=entry.id.value,
            tenant_id=entry.tenant_id,
            user_id=entry.user_id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            changes=entry.changes,
            metadata_=entry.metadata,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            created_at=entry.created_at,
        )
        result = MagicMock()
        result.scalars.return_value.all.return_value = [model]
        mock_session.execute.return_value = result

        entries = await repository.list_by_tenant(
            entry.tenant_id, AuditLogFilter(), offset=0, limit=10
        )

        assert entries == [entry]

    @pytest.mark.asyncio
    async def test_filters_are_applied(self, repository, mock_session):
        result = MagicMock()
        result.scalar_one.return_value = 7
        mock_session.execute.return_value = result
        filters = AuditLogFilter(
            action="delete",
            entity_type="product",
            user_id="user-1",
            created_from=datetime(2026, 1, 1, tzinfo=timezone.utc),
            created_to=datetime(2026, 2, 1, tzinfo=timezone.utc),
        )

        total = await repository.count_by_tenant("t1", filters)

        assert total == 7
        sql = _sql(mock_session)
        assert "count(*)" in sql
        for column in ("action", "entity_type", "user_id"):
            assert f"audit_logs.{column} =" in sql
        assert "audit_logs.created_at >=" in sql
        assert "audit_logs.created_at <=" in sql
