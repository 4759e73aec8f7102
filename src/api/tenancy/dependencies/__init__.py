"""FastAPI dependency providers for the tenancy context."""

from tenancy.dependencies.audit import (
    get_audit_log_service,
    get_audit_recorder,
    get_request_metadata,
)
from tenancy.dependencies.authentication import get_credential, get_jwt_validator
from tenancy.dependencies.tenant_context import (
    get_current_identity,
    get_guard_outcome,
    get_tenant_context,
    get_tenant_resolution,
    require_identity,
    require_role,
)

__all__ = [
    "get_audit_log_service",
    "get_audit_recorder",
    "get_credential",
    "get_current_identity",
    "get_guard_outcome",
    "get_jwt_validator",
    "get_request_metadata",
    "get_tenant_context",
    "get_tenant_resolution",
    "require_identity",
    "require_role",
]
