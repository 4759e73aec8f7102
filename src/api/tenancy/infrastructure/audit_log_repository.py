"""PostgreSQL implementation of IAuditLogRepository.

Append-only: entries are inserted and listed, never updated or deleted.
Every read is scoped to a single tenant.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from tenancy.domain.aggregates import AuditEntry
from tenancy.domain.value_objects import AuditEntryId, AuditLogFilter
from tenancy.infrastructure.models import AuditLogModel
from tenancy.infrastructure.observability import (
    AuditLogRepositoryProbe,
    DefaultAuditLogRepositoryProbe,
)
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import IAuditLogRepository


def apply_filters(stmt: Select, tenant_id: str, filters: AuditLogFilter) -> Select:
    """Scope a statement to a tenant and the optional filters."""
    stmt = stmt.where(AuditLogModel.tenant_id == tenant_id)
    if filters.action:
        stmt = stmt.where(AuditLogModel.action == filters.action)
    if filters.entity_type:
        stmt = stmt.where(AuditLogModel.entity_type == filters.entity_type)
    if filters.user_id:
        stmt = stmt.where(AuditLogModel.user_id == filters.user_id)
    if filters.created_from is not None:
        stmt = stmt.where(AuditLogModel.created_at >= filters.created_from)
    if filters.created_to is not None:
        stmt = stmt.where(AuditLogModel.created_at <= filters.created_to)
    return stmt


class AuditLogRepository(IAuditLogRepository):
    """Repository storing AuditEntry records in PostgreSQL.

    Writes commit on their own: the session handed in is dedicated to
    audit writes and is never shared with a request's business work.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: AuditLogRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession dedicated to audit statements
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultAuditLogRepositoryProbe()

    async def add(self, entry: AuditEntry) -> None:
        """Insert and commit an audit entry.

        Args:
            entry: The entry to insert

        Raises:
            RepositoryUnavailableError: If the insert or commit fails
        """
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
        try:
            self._session.add(model)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            self._probe.query_failed("add", e)
            raise RepositoryUnavailableError("Audit entry insert failed") from e

        self._probe.entry_inserted(entry.id.value, entry.tenant_id)

    async def list_by_tenant(
        self,
        tenant_id: str,
        filters: AuditLogFilter,
        offset: int,
        limit: int,
    ) -> list[AuditEntry]:
        """List a tenant's entries, newest first.

        Raises:
            RepositoryUnavailableError: If the query fails
        """
        stmt = (
            apply_filters(select(AuditLogModel), tenant_id, filters)
            .order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        except SQLAlchemyError as e:
            self._probe.query_failed("list_by_tenant", e)
            raise RepositoryUnavailableError("Audit log listing failed") from e

        entries = [self._to_domain(model) for model in models]
        self._probe.entries_listed(tenant_id, len(entries))
        return entries

    async def count_by_tenant(self, tenant_id: str, filters: AuditLogFilter) -> int:
        """Count a tenant's entries matching the filters.

        Raises:
            RepositoryUnavailableError: If the query fails
        """
        stmt = apply_filters(
            select(func.count()).select_from(AuditLogModel), tenant_id, filters
        )
        try:
            result = await self._session.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            self._probe.query_failed("count_by_tenant", e)
            raise RepositoryUnavailableError("Audit log count failed") from e

    @staticmethod
    def _to_domain(model: AuditLogModel) -> AuditEntry:
        return AuditEntry(
            id=AuditEntryId(value=model.id),
            tenant_id=model.tenant_id,
            action=model.action,
            entity_type=model.entity_type,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            created_at=model.created_at,
            user_id=model.user_id,
            entity_id=model.entity_id,
            changes=model.changes,
            metadata=model.metadata_,
        )
