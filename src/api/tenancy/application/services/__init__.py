"""Application services for the tenancy context."""

from tenancy.application.services.access_guard import AccessGuard
from tenancy.application.services.audit_log_service import AuditLogService
from tenancy.application.services.audit_recorder import AuditRecorder
from tenancy.application.services.identity_verifier import IdentityVerifier, has_role
from tenancy.application.services.tenant_resolver import TenantResolver

__all__ = [
    "AccessGuard",
    "AuditLogService",
    "AuditRecorder",
    "IdentityVerifier",
    "TenantResolver",
    "has_role",
]
