"""Read access to a tenant's audit log."""

from __future__ import annotations

from tenancy.application.value_objects import AuditLogPage
from tenancy.domain.value_objects import AuditLogFilter
from tenancy.ports.repositories import IAuditLogRepository

MAX_PAGE_SIZE = 200


class AuditLogService:
    """Lists audit entries, always scoped to a single tenant."""

    def __init__(self, audit_repository: IAuditLogRepository):
        self._audit_repository = audit_repository

    async def list_entries(
        self,
        tenant_id: str,
        filters: AuditLogFilter | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> AuditLogPage:
        """List one page of a tenant's audit entries, newest first.

        Args:
            tenant_id: The tenant whose log to read
            filters: Optional action/entity/user/date filters
            page: 1-based page number
            limit: Page size, between 1 and 200

        Returns:
            The page together with the total count of matching entries

        Raises:
            ValueError: If page or limit is out of range
        """
        if page < 1:
            raise ValueError("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        filters = filters or AuditLogFilter()
        entries = await self._audit_repository.list_by_tenant(
            tenant_id, filters, offset=(page - 1) * limit, limit=limit
        )
        total = await self._audit_repository.count_by_tenant(tenant_id, filters)
        return AuditLogPage(entries=entries, total=total, page=page, limit=limit)
