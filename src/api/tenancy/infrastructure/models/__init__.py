"""SQLAlchemy ORM models for the tenancy bounded context."""

from tenancy.infrastructure.models.audit_log import AuditLogModel
from tenancy.infrastructure.models.tenant import TenantModel
from tenancy.infrastructure.models.user import UserModel

__all__ = [
    "AuditLogModel",
    "TenantModel",
    "UserModel",
]
