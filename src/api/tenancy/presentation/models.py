"""Pydantic models for tenancy API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from tenancy.application.value_objects import AuditLogPage, Identity, TenantResolved
from tenancy.domain.aggregates import AuditEntry, Tenant


class IdentityResponse(BaseModel):
    """Response model for a verified identity."""

    user_id: str = Field(..., description="User ID")
    tenant_id: str = Field(..., description="Tenant the user belongs to")
    email: str = Field(..., description="User email")
    role: str = Field(..., description="Staff role")

    @classmethod
    def from_domain(cls, identity: Identity) -> IdentityResponse:
        """Convert an Identity to API response."""
        return cls(
            user_id=identity.user_id,
            tenant_id=identity.tenant_id,
            email=identity.email,
            role=identity.role,
        )


class TenantContextResponse(BaseModel):
    """Response model for the resolved tenant context of a request."""

    tenant_id: str = Field(..., description="Authoritative tenant ID (ULID format)")
    source: str = Field(..., description="Signal the tenant was resolved from")
    identity: IdentityResponse | None = Field(
        default=None, description="Verified identity, absent for anonymous requests"
    )

    @classmethod
    def from_resolution(cls, resolution: TenantResolved) -> TenantContextResponse:
        """Convert a guard resolution to API response."""
        return cls(
            tenant_id=resolution.tenant_id,
            source=resolution.source,
            identity=(
                IdentityResponse.from_domain(resolution.identity)
                if resolution.identity is not None
                else None
            ),
        )


class TenantSettingsResponse(BaseModel):
    """Response model for public tenant settings."""

    currency: str
    timezone: str
    language: str
    logo: str | None = None
    primary_color: str


class TenantResponse(BaseModel):
    """Response model for public tenant information."""

    id: str = Field(..., description="Tenant ID (ULID format)")
    slug: str = Field(..., description="URL-safe tenant slug")
    name: str = Field(..., description="Tenant name")
    settings: TenantSettingsResponse

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response.

        Args:
            tenant: Tenant domain aggregate

        Returns:
            TenantResponse
        """
        return cls(
            id=tenant.id.value,
            slug=tenant.slug,
            name=tenant.name,
            settings=TenantSettingsResponse(
                currency=tenant.settings.currency,
                timezone=tenant.settings.timezone,
                language=tenant.settings.language.value,
                logo=tenant.settings.logo,
                primary_color=tenant.settings.primary_color,
            ),
        )


class AuditEntryResponse(BaseModel):
    """Response model for an audit entry."""

    id: str
    tenant_id: str
    user_id: str | None = None
    action: str
    entity_type: str
    entity_id: str | None = None
    changes: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    ip_address: str
    user_agent: str
    created_at: datetime

    @classmethod
    def from_domain(cls, entry: AuditEntry) -> AuditEntryResponse:
        """Convert an AuditEntry to API response."""
        return cls(
            id=entry.id.value,
            tenant_id=entry.tenant_id,
            user_id=entry.user_id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            changes=entry.changes,
            metadata=entry.metadata,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            created_at=entry.created_at,
        )


class PaginationResponse(BaseModel):
    """Pagination block of list responses."""

    page: int
    limit: int
    total: int
    pages: int


class AuditLogListResponse(BaseModel):
    """Response model for a page of audit entries."""

    logs: list[AuditEntryResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page: AuditLogPage) -> AuditLogListResponse:
        """Convert an AuditLogPage to API response."""
        return cls(
            logs=[AuditEntryResponse.from_domain(entry) for entry in page.entries],
            pagination=PaginationResponse(
                page=page.page,
                limit=page.limit,
                total=page.total,
                pages=page.pages,
            ),
        )


class ErrorResponse(BaseModel):
    """Error body; ``redirect`` is only set for tenant access violations."""

    detail: str
    redirect: str | None = None
