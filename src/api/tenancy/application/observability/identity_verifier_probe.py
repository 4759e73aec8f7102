"""Domain probe for credential verification.

Each rejection path gets its own event so that an operator can tell an
expired token from a deactivated user without reading stack traces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class IdentityVerifierProbe(Protocol):
    """Domain probe for IdentityVerifier operations."""

    def credential_rejected(self, reason: str) -> None:
        """Record that a credential failed signature or claim validation."""
        ...

    def user_not_found(self, user_id: str) -> None:
        """Record that a credential referenced an unknown user."""
        ...

    def user_inactive(self, user_id: str) -> None:
        """Record that a credential belonged to a deactivated user."""
        ...

    def tenant_binding_stale(
        self,
        user_id: str,
        claimed_tenant_id: str,
        current_tenant_id: str,
    ) -> None:
        """Record that a user moved tenants after the credential was issued."""
        ...

    def user_lookup_failed(self, user_id: str, error: Exception) -> None:
        """Record that the live user record could not be read."""
        ...

    def identity_verified(self, user_id: str, tenant_id: str, role: str) -> None:
        """Record a successful verification."""
        ...

    def with_context(self, context: ObservationContext) -> IdentityVerifierProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIdentityVerifierProbe:
    """Default implementation of IdentityVerifierProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultIdentityVerifierProbe:
        """Create a new probe with observation context bound."""
        return DefaultIdentityVerifierProbe(logger=self._logger, context=context)

    def credential_rejected(self, reason: str) -> None:
        self._logger.info(
            "identity_credential_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: str) -> None:
        self._logger.warning(
            "identity_user_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_inactive(self, user_id: str) -> None:
        self._logger.warning(
            "identity_user_inactive",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def tenant_binding_stale(
        self,
        user_id: str,
        claimed_tenant_id: str,
        current_tenant_id: str,
    ) -> None:
        self._logger.warning(
            "identity_tenant_binding_stale",
            user_id=user_id,
            claimed_tenant_id=claimed_tenant_id,
            current_tenant_id=current_tenant_id,
            **self._get_context_kwargs(),
        )

    def user_lookup_failed(self, user_id: str, error: Exception) -> None:
        self._logger.error(
            "identity_user_lookup_failed",
            user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def identity_verified(self, user_id: str, tenant_id: str, role: str) -> None:
        self._logger.debug(
            "identity_verified",
            user_id=user_id,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )
