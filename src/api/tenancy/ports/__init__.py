"""Ports for the tenancy bounded context."""

from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import (
    IAuditLogRepository,
    ITenantRepository,
    IUserRepository,
)

__all__ = [
    "IAuditLogRepository",
    "ITenantRepository",
    "IUserRepository",
    "RepositoryUnavailableError",
]
