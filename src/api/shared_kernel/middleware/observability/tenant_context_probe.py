"""Domain probe for tenant context resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of the access guard: identity binding,
cross-tenant violations and anonymous fallbacks.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context resolution operations."""

    def tenant_bound_to_identity(
        self,
        tenant_id: str,
        user_id: str,
        declared_source: str | None,
    ) -> None:
        """Record that the tenant was taken from a verified identity."""
        ...

    def tenant_access_violation(
        self,
        declared_slug: str,
        declared_source: str,
        user_id: str,
        reason: str,
    ) -> None:
        """Record that an authenticated request declared a foreign tenant."""
        ...

    def tenant_resolved_anonymously(
        self,
        tenant_id: str,
        source: str,
    ) -> None:
        """Record that an anonymous request resolved through request signals."""
        ...

    def tenant_resolved_from_default(
        self,
        tenant_id: str,
    ) -> None:
        """Record that an anonymous request fell back to the default tenant."""
        ...

    def tenant_unresolved(
        self,
        reason: str,
    ) -> None:
        """Record that no tenant could be determined for the request."""
        ...

    def role_check_failed(
        self,
        user_id: str,
        role: str,
        required_roles: list[str],
    ) -> None:
        """Record that an identity lacked the role a route requires."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_bound_to_identity(
        self,
        tenant_id: str,
        user_id: str,
        declared_source: str | None,
    ) -> None:
        """Record that the tenant was taken from a verified identity."""
        self._logger.debug(
            "tenant_context_bound_to_identity",
            tenant_id=tenant_id,
            user_id=user_id,
            declared_source=declared_source,
            **self._get_context_kwargs(),
        )

    def tenant_access_violation(
        self,
        declared_slug: str,
        declared_source: str,
        user_id: str,
        reason: str,
    ) -> None:
        """Record that an authenticated request declared a foreign tenant."""
        self._logger.warning(
            "tenant_context_access_violation",
            declared_slug=declared_slug,
            declared_source=declared_source,
            user_id=user_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def tenant_resolved_anonymously(
        self,
        tenant_id: str,
        source: str,
    ) -> None:
        """Record that an anonymous request resolved through request signals."""
        self._logger.debug(
            "tenant_context_resolved_anonymously",
            tenant_id=tenant_id,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_resolved_from_default(
        self,
        tenant_id: str,
    ) -> None:
        """Record that an anonymous request fell back to the default tenant."""
        self._logger.info(
            "tenant_context_resolved_from_default",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_unresolved(
        self,
        reason: str,
    ) -> None:
        """Record that no tenant could be determined for the request."""
        self._logger.error(
            "tenant_context_unresolved",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def role_check_failed(
        self,
        user_id: str,
        role: str,
        required_roles: list[str],
    ) -> None:
        """Record that an identity lacked the role a route requires."""
        self._logger.warning(
            "tenant_context_role_check_failed",
            user_id=user_id,
            role=role,
            required_roles=required_roles,
            **self._get_context_kwargs(),
        )
