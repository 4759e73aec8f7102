"""Per-request decision on which tenant a request acts on."""

from __future__ import annotations

from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from tenancy.application.services.identity_verifier import IdentityVerifier
from tenancy.application.services.tenant_resolver import TenantResolver
from tenancy.application.value_objects import (
    GuardOutcome,
    Identity,
    RequestSignals,
    TenantAccessViolation,
    TenantMatch,
    TenantResolved,
    TenantUnresolved,
)


class AccessGuard:
    """Binds every request to exactly one authoritative tenant.

    Decision table:

    ============  ==========================  ============================
    identity      declared tenant             outcome
    ============  ==========================  ============================
    verified      none                        resolved to identity tenant
    verified      same as identity tenant     resolved to identity tenant
    verified      different tenant            access violation
    none          anything                    resolved by signals/default
    ============  ==========================  ============================

    An authenticated request never has its tenant taken from a request
    signal, and a foreign declaration is rejected rather than ignored.
    """

    def __init__(
        self,
        identity_verifier: IdentityVerifier,
        tenant_resolver: TenantResolver,
        probe: TenantContextProbe | None = None,
    ):
        """Initialize AccessGuard with dependencies.

        Args:
            identity_verifier: Verifies the request credential
            tenant_resolver: Resolves tenants from request signals
            probe: Optional domain probe for observability
        """
        self._identity_verifier = identity_verifier
        self._tenant_resolver = tenant_resolver
        self._probe = probe or DefaultTenantContextProbe()

    async def resolve_request_tenant(
        self,
        signals: RequestSignals,
        credential: str | None,
    ) -> GuardOutcome:
        """Decide the authoritative tenant for a request.

        Args:
            signals: Unauthenticated tenant signals of the request
            credential: Raw credential, or None

        Returns:
            TenantResolved, TenantAccessViolation or TenantUnresolved
        """
        identity = await self._identity_verifier.verify(credential)
        declared = await self._tenant_resolver.resolve_declared(signals)

        if identity is not None:
            return self._bind_to_identity(identity, declared)

        match = await self._tenant_resolver.resolve(signals)
        if match is None:
            reason = (
                "default_tenant_unavailable"
                if self._tenant_resolver.default_fallback_enabled
                else "no_tenant_signal"
            )
            self._probe.tenant_unresolved(reason)
            return TenantUnresolved(reason=reason)

        if match.source == "default":
            self._probe.tenant_resolved_from_default(match.tenant_id)
        else:
            self._probe.tenant_resolved_anonymously(match.tenant_id, match.source)
        return TenantResolved(tenant_id=match.tenant_id, source=match.source)

    def _bind_to_identity(
        self,
        identity: Identity,
        declared: TenantMatch | None,
    ) -> GuardOutcome:
        if declared is not None and declared.tenant_id != identity.tenant_id:
            reason = "declared_tenant_mismatch"
            self._probe.tenant_access_violation(
                declared_slug=declared.tenant.slug,
                declared_source=declared.source,
                user_id=identity.user_id,
                reason=reason,
            )
            return TenantAccessViolation(
                declared_slug=declared.tenant.slug,
                declared_source=declared.source,
                reason=reason,
            )

        self._probe.tenant_bound_to_identity(
            tenant_id=identity.tenant_id,
            user_id=identity.user_id,
            declared_source=declared.source if declared is not None else None,
        )
        return TenantResolved(
            tenant_id=identity.tenant_id,
            source="identity",
            identity=identity,
        )
