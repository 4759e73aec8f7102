"""Domain probe for tenancy repository operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to tenant, user and audit log
repository operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_retrieved(self, tenant_id: str, lookup: str) -> None:
        """Record that an active tenant was retrieved."""
        ...

    def tenant_not_found(self, lookup: str, value: str) -> None:
        """Record that no active tenant matched a lookup."""
        ...

    def query_failed(self, operation: str, error: Exception) -> None:
        """Record that a tenant query failed at the storage layer."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class UserRepositoryProbe(Protocol):
    """Domain probe for user repository operations."""

    def user_retrieved(self, user_id: str) -> None:
        """Record that a user was retrieved."""
        ...

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found."""
        ...

    def query_failed(self, operation: str, error: Exception) -> None:
        """Record that a user query failed at the storage layer."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class AuditLogRepositoryProbe(Protocol):
    """Domain probe for audit log repository operations."""

    def entry_inserted(self, entry_id: str, tenant_id: str) -> None:
        """Record that an audit entry was inserted."""
        ...

    def entries_listed(self, tenant_id: str, count: int) -> None:
        """Record that a page of audit entries was listed."""
        ...

    def query_failed(self, operation: str, error: Exception) -> None:
        """Record that an audit log statement failed at the storage layer."""
        ...

    def with_context(self, context: ObservationContext) -> AuditLogRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class _StructlogRepositoryProbe:
    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext):
        """Create a new probe with observation context bound."""
        return type(self)(logger=self._logger, context=context)

    def query_failed(self, operation: str, error: Exception) -> None:
        self._logger.error(
            "repository_query_failed",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )


class DefaultTenantRepositoryProbe(_StructlogRepositoryProbe):
    """Default implementation of TenantRepositoryProbe using structlog."""

    def tenant_retrieved(self, tenant_id: str, lookup: str) -> None:
        self._logger.debug(
            "tenant_retrieved",
            tenant_id=tenant_id,
            lookup=lookup,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, lookup: str, value: str) -> None:
        self._logger.debug(
            "tenant_not_found",
            lookup=lookup,
            value=value,
            **self._get_context_kwargs(),
        )


class DefaultUserRepositoryProbe(_StructlogRepositoryProbe):
    """Default implementation of UserRepositoryProbe using structlog."""

    def user_retrieved(self, user_id: str) -> None:
        self._logger.debug(
            "user_retrieved",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: str) -> None:
        self._logger.debug(
            "user_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )


class DefaultAuditLogRepositoryProbe(_StructlogRepositoryProbe):
    """Default implementation of AuditLogRepositoryProbe using structlog."""

    def entry_inserted(self, entry_id: str, tenant_id: str) -> None:
        self._logger.debug(
            "audit_log_entry_inserted",
            entry_id=entry_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def entries_listed(self, tenant_id: str, count: int) -> None:
        self._logger.debug(
            "audit_log_entries_listed",
            tenant_id=tenant_id,
            count=count,
            **self._get_context_kwargs(),
        )
