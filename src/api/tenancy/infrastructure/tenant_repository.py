"""PostgreSQL implementation of ITenantRepository.

Read-only: tenants are created and deactivated elsewhere. Every lookup
filters on ``is_active`` so inactive tenants never take part in request
resolution.
"""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId, TenantSettings
from tenancy.infrastructure.models import TenantModel
from tenancy.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import ITenantRepository


class TenantRepository(ITenantRepository):
    """Repository reading active Tenant aggregates from PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def find_active_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch an active tenant by ID.

        Args:
            tenant_id: The unique identifier of the tenant

        Returns:
            The Tenant aggregate, or None if not found or inactive

        Raises:
            RepositoryUnavailableError: If the query fails
        """
        stmt = select(TenantModel).where(TenantModel.id == tenant_id.value)
        return await self._find_active(stmt, "id", tenant_id.value)

    async def find_active_by_slug(self, slug: str) -> Tenant | None:
        """Fetch an active tenant by slug.

        Args:
            slug: The tenant slug

        Returns:
            The Tenant aggregate, or None if not found or inactive

        Raises:
            RepositoryUnavailableError: If the query fails
        """
        stmt = select(TenantModel).where(TenantModel.slug == slug)
        return await self._find_active(stmt, "slug", slug)

    async def find_active_by_host(self, host: str, subdomain: str) -> Tenant | None:
        """Fetch the active tenant serving a host.

        Args:
            host: The request host without port
            subdomain: The first label of the host

        Returns:
            The Tenant aggregate, or None if no active tenant serves the host

        Raises:
            RepositoryUnavailableError: If the query fails
        """
        # Subdomain matches take precedence over custom domains
        stmt = (
            select(TenantModel)
            .where(
                or_(TenantModel.subdomain == subdomain, TenantModel.domain == host)
            )
            .order_by((TenantModel.subdomain == subdomain).desc())
            .limit(1)
        )
        return await self._find_active(stmt, "host", host)

    async def _find_active(
        self,
        stmt: Select[tuple[TenantModel]],
        lookup: str,
        value: str,
    ) -> Tenant | None:
        stmt = stmt.where(TenantModel.is_active.is_(True))
        try:
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self._probe.query_failed(f"find_active_by_{lookup}", e)
            raise RepositoryUnavailableError(
                f"Tenant lookup by {lookup} failed"
            ) from e

        if model is None:
            self._probe.tenant_not_found(lookup, value)
            return None

        tenant = self._to_domain(model)
        self._probe.tenant_retrieved(tenant.id.value, lookup)
        return tenant

    @staticmethod
    def _to_domain(model: TenantModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            slug=model.slug,
            name=model.name,
            domain=model.domain,
            subdomain=model.subdomain,
            is_active=model.is_active,
            settings=TenantSettings.from_dict(model.settings),
        )
