"""Domain probes for the tenancy application layer."""

from tenancy.application.observability.audit_recorder_probe import (
    AuditRecorderProbe,
    DefaultAuditRecorderProbe,
)
from tenancy.application.observability.identity_verifier_probe import (
    DefaultIdentityVerifierProbe,
    IdentityVerifierProbe,
)
from tenancy.application.observability.tenant_resolver_probe import (
    DefaultTenantResolverProbe,
    TenantResolverProbe,
)

__all__ = [
    "AuditRecorderProbe",
    "DefaultAuditRecorderProbe",
    "DefaultIdentityVerifierProbe",
    "DefaultTenantResolverProbe",
    "IdentityVerifierProbe",
    "TenantResolverProbe",
]
