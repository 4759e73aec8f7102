"""Repository protocols (ports) for the tenancy bounded context.

Tenant and user repositories are read-only from this context's point of
view; the audit log repository is append-only.

Implementations raise ``RepositoryUnavailableError`` when the underlying
store cannot be reached so that the application layer never depends on a
storage library's exception types.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tenancy.domain.aggregates import AuditEntry, Tenant, User
from tenancy.domain.value_objects import AuditLogFilter, TenantId, UserId


@runtime_checkable
class ITenantRepository(Protocol):
    """Read access to tenants taking part in request resolution.

    Every lookup only returns active tenants.
    """

    async def find_active_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve an active tenant by its ID.

        Args:
            tenant_id: The unique identifier of the tenant

        Returns:
            The Tenant aggregate, or None if not found or inactive
        """
        ...

    async def find_active_by_slug(self, slug: str) -> Tenant | None:
        """Retrieve an active tenant by its slug.

        Args:
            slug: The tenant slug

        Returns:
            The Tenant aggregate, or None if not found or inactive
        """
        ...

    async def find_active_by_host(self, host: str, subdomain: str) -> Tenant | None:
        """Retrieve the active tenant serving a host.

        Matches tenants whose subdomain equals ``subdomain`` or whose
        custom domain equals ``host``.

        Args:
            host: The request host without port
            subdomain: The first label of the host

        Returns:
            The Tenant aggregate, or None if no active tenant serves the host
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Read access to the live user state backing credentials."""

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by their ID.

        Args:
            user_id: The unique identifier of the user

        Returns:
            The User aggregate (active or not), or None if not found
        """
        ...


@runtime_checkable
class IAuditLogRepository(Protocol):
    """Append-only storage for audit entries."""

    async def add(self, entry: AuditEntry) -> None:
        """Persist a new audit entry.

        Args:
            entry: The entry to insert
        """
        ...

    async def list_by_tenant(
        self,
        tenant_id: str,
        filters: AuditLogFilter,
        offset: int,
        limit: int,
    ) -> list[AuditEntry]:
        """List a tenant's audit entries, newest first.

        Args:
            tenant_id: The tenant whose entries to list
            filters: Optional action/entity/user/date filters
            offset: Number of entries to skip
            limit: Maximum number of entries to return

        Returns:
            Matching entries ordered by creation time, descending
        """
        ...

    async def count_by_tenant(self, tenant_id: str, filters: AuditLogFilter) -> int:
        """Count a tenant's audit entries matching the filters.

        Args:
            tenant_id: The tenant whose entries to count
            filters: Optional action/entity/user/date filters

        Returns:
            Number of matching entries
        """
        ...
