"""Domain probe for tenant resolution from request signals.

Following Domain-Oriented Observability patterns, this probe captures
which strategy matched, which lookups failed, and the default fallback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantResolverProbe(Protocol):
    """Domain probe for TenantResolver operations."""

    def strategy_matched(self, source: str, tenant_id: str) -> None:
        """Record that a resolution strategy found a tenant."""
        ...

    def lookup_failed(self, source: str, error: Exception) -> None:
        """Record that a strategy's lookup could not reach the store."""
        ...

    def referer_unparsable(self, referer: str) -> None:
        """Record that a Referer header could not be parsed as a URL."""
        ...

    def default_tenant_not_found(self, slug: str) -> None:
        """Record that the default tenant record is missing or inactive."""
        ...

    def default_fallback_disabled(self) -> None:
        """Record that no strategy matched and fallback is disabled."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantResolverProbe:
    """Default implementation of TenantResolverProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantResolverProbe(logger=self._logger, context=context)

    def strategy_matched(self, source: str, tenant_id: str) -> None:
        """Record that a resolution strategy found a tenant."""
        self._logger.debug(
            "tenant_strategy_matched",
            source=source,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def lookup_failed(self, source: str, error: Exception) -> None:
        """Record that a strategy's lookup could not reach the store."""
        self._logger.error(
            "tenant_lookup_failed",
            source=source,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def referer_unparsable(self, referer: str) -> None:
        """Record that a Referer header could not be parsed as a URL."""
        self._logger.debug(
            "tenant_referer_unparsable",
            referer=referer,
            **self._get_context_kwargs(),
        )

    def default_tenant_not_found(self, slug: str) -> None:
        """Record that the default tenant record is missing or inactive."""
        self._logger.error(
            "tenant_default_not_found",
            slug=slug,
            message="Default tenant not found. Ensure it was seeded and is active.",
            **self._get_context_kwargs(),
        )

    def default_fallback_disabled(self) -> None:
        """Record that no strategy matched and fallback is disabled."""
        self._logger.info(
            "tenant_default_fallback_disabled",
            **self._get_context_kwargs(),
        )
