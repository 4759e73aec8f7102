"""Tenant aggregate for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass, field

from tenancy.domain.value_objects import TenantId, TenantSettings, is_valid_slug


@dataclass(frozen=True)
class Tenant:
    """Tenant aggregate representing one store on the shared deployment.

    Tenants are the top-level isolation boundary. This core only reads
    them; they are created at signup and deactivated through ``is_active``
    rather than deleted.

    Business rules:
    - Slugs are globally unique, lowercase and URL-safe
    - Only active tenants take part in request resolution
    """

    id: TenantId
    slug: str
    name: str
    domain: str | None = None
    subdomain: str | None = None
    is_active: bool = True
    settings: TenantSettings = field(default_factory=TenantSettings)

    def __post_init__(self) -> None:
        if not is_valid_slug(self.slug):
            raise ValueError(f"Invalid tenant slug: {self.slug!r}")

    def __str__(self) -> str:
        """Return string representation."""
        return f"Tenant({self.slug})"

    @property
    def forbidden_path(self) -> str:
        """Storefront path shown when access to this tenant is denied."""
        return f"/{self.slug}/forbidden"
