"""Infrastructure layer for the tenancy context.

SQLAlchemy repositories implementing the tenancy ports.
"""

from tenancy.infrastructure.audit_log_repository import AuditLogRepository
from tenancy.infrastructure.tenant_repository import TenantRepository
from tenancy.infrastructure.user_repository import UserRepository

__all__ = [
    "AuditLogRepository",
    "TenantRepository",
    "UserRepository",
]
