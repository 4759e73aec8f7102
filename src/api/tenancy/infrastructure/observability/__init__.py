"""Domain-Oriented Observability for tenancy infrastructure."""

from tenancy.infrastructure.observability.repository_probe import (
    AuditLogRepositoryProbe,
    DefaultAuditLogRepositoryProbe,
    DefaultTenantRepositoryProbe,
    DefaultUserRepositoryProbe,
    TenantRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "AuditLogRepositoryProbe",
    "DefaultAuditLogRepositoryProbe",
    "DefaultTenantRepositoryProbe",
    "DefaultUserRepositoryProbe",
    "TenantRepositoryProbe",
    "UserRepositoryProbe",
]
