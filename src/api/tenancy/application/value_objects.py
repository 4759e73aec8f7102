"""Application-layer value objects for the tenancy bounded context.

These are request-scoped values: the signals a request carries, the
identity derived from its credential, and the tagged outcome of the
access guard. None of them is stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from shared_kernel.middleware.tenant_context import TenantContext, TenantSource
from tenancy.domain.aggregates import AuditEntry, Tenant


@dataclass(frozen=True)
class RequestSignals:
    """Unauthenticated tenant signals extracted from a request.

    Attributes:
        host: ``Host`` header value
        referer: ``Referer`` header value
        query_tenant: Value of the tenant query parameter
        header_slug: Value of the tenant slug header
        header_id: Value of the tenant id header (an id or a slug)
    """

    host: str | None = None
    referer: str | None = None
    query_tenant: str | None = None
    header_slug: str | None = None
    header_id: str | None = None


@dataclass(frozen=True)
class RequestMetadata:
    """Request facts recorded alongside audit entries."""

    path: str = "/"
    ip_address: str = "unknown"
    user_agent: str = "unknown"


@dataclass(frozen=True)
class Identity:
    """Verified claim set of an authenticated request.

    Derived from a credential and re-validated against the live user
    record on every request.
    """

    user_id: str
    tenant_id: str
    email: str
    role: str


@dataclass(frozen=True)
class TenantMatch:
    """A tenant found by one of the resolver's strategies."""

    tenant: Tenant
    source: TenantSource

    @property
    def tenant_id(self) -> str:
        """The matched tenant's id."""
        return self.tenant.id.value


@dataclass(frozen=True)
class TenantResolved:
    """Guard outcome: exactly one authoritative tenant for the request."""

    tenant_id: str
    source: TenantSource
    identity: Identity | None = None

    @property
    def context(self) -> TenantContext:
        """Shared-kernel view of the resolution for downstream handlers."""
        return TenantContext(tenant_id=self.tenant_id, source=self.source)


@dataclass(frozen=True)
class TenantAccessViolation:
    """Guard outcome: an authenticated request declared a foreign tenant.

    Carries only the declared tenant's slug, never the authoritative one.
    """

    declared_slug: str
    declared_source: TenantSource
    reason: str

    @property
    def redirect_path(self) -> str:
        """Storefront path the client should be sent to."""
        return f"/{self.declared_slug}/forbidden"


@dataclass(frozen=True)
class TenantUnresolved:
    """Guard outcome: no tenant could be determined at all."""

    reason: str


GuardOutcome = TenantResolved | TenantAccessViolation | TenantUnresolved


@dataclass(frozen=True)
class AuditDraft:
    """What a handler wants recorded; tenant and request facts are added later."""

    action: str
    entity_type: str
    entity_id: str | None = None
    changes: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class AuditLogPage:
    """One page of a tenant's audit log."""

    entries: list[AuditEntry] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 50

    @property
    def pages(self) -> int:
        """Total number of pages."""
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)
