"""Tenant context FastAPI dependencies.

Wires the access guard per request and converts its tagged outcome into
either a ``TenantResolved`` value or a boundary exception. FastAPI caches
dependency results per request, so the guard runs once no matter how
many downstream dependencies ask for the tenant.

Usage in FastAPI routes:
    @router.get("/example")
    async def example(
        tenant: Annotated[TenantContext, Depends(get_tenant_context)],
    ):
        # tenant.tenant_id is the authoritative tenant
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import get_read_session
from infrastructure.settings import TenancySettings, get_tenancy_settings
from shared_kernel.auth import JWTValidator
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext
from shared_kernel.observability_context import ObservationContext
from tenancy.application.observability import (
    DefaultIdentityVerifierProbe,
    DefaultTenantResolverProbe,
)
from tenancy.application.services import (
    AccessGuard,
    IdentityVerifier,
    TenantResolver,
    has_role,
)
from tenancy.application.value_objects import (
    GuardOutcome,
    Identity,
    RequestSignals,
    TenantAccessViolation,
    TenantResolved,
)
from tenancy.dependencies.authentication import get_credential, get_jwt_validator
from tenancy.infrastructure import TenantRepository, UserRepository
from tenancy.presentation.exceptions import (
    InsufficientRoleError,
    TenantAccessViolationError,
    TenantResolutionError,
)


# ---------------------------------------------------------------------------
# Request facts
# ---------------------------------------------------------------------------


def get_observation_context(request: Request) -> ObservationContext:
    """Request metadata attached to every probe event of this request."""
    return ObservationContext(
        request_id=request.headers.get("X-Request-ID"),
        path=request.url.path,
    )


def get_request_signals(
    request: Request,
    settings: Annotated[TenancySettings, Depends(get_tenancy_settings)],
) -> RequestSignals:
    """Collect the unauthenticated tenant signals of a request."""
    return RequestSignals(
        host=request.headers.get("host"),
        referer=request.headers.get("referer"),
        query_tenant=request.query_params.get(settings.query_param),
        header_slug=request.headers.get(settings.slug_header),
        header_id=request.headers.get(settings.id_header),
    )


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def get_tenant_repository(
    session: Annotated[AsyncSession, Depends(get_read_session)],
) -> TenantRepository:
    """Get TenantRepository bound to the request's read session."""
    return TenantRepository(session=session)


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_read_session)],
) -> UserRepository:
    """Get UserRepository bound to the request's read session."""
    return UserRepository(session=session)


def get_tenant_context_probe(
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> TenantContextProbe:
    """Get TenantContextProbe bound to the request's observation context."""
    return DefaultTenantContextProbe().with_context(context)


def get_tenant_resolver(
    tenant_repository: Annotated[TenantRepository, Depends(get_tenant_repository)],
    settings: Annotated[TenancySettings, Depends(get_tenancy_settings)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> TenantResolver:
    """Get TenantResolver configured from tenancy settings."""
    return TenantResolver(
        tenant_repository=tenant_repository,
        default_tenant_slug=settings.default_tenant_slug,
        default_fallback_enabled=settings.default_fallback_enabled,
        reserved_path_segments=settings.reserved_path_segments,
        reserved_path_prefix=settings.reserved_path_prefix,
        ignored_host_labels=settings.ignored_host_labels,
        probe=DefaultTenantResolverProbe().with_context(context),
    )


def get_identity_verifier(
    validator: Annotated[JWTValidator, Depends(get_jwt_validator)],
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> IdentityVerifier:
    """Get IdentityVerifier for the current request."""
    return IdentityVerifier(
        jwt_validator=validator,
        user_repository=user_repository,
        probe=DefaultIdentityVerifierProbe().with_context(context),
    )


def get_access_guard(
    identity_verifier: Annotated[IdentityVerifier, Depends(get_identity_verifier)],
    tenant_resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
    probe: Annotated[TenantContextProbe, Depends(get_tenant_context_probe)],
) -> AccessGuard:
    """Get AccessGuard for the current request."""
    return AccessGuard(
        identity_verifier=identity_verifier,
        tenant_resolver=tenant_resolver,
        probe=probe,
    )


# ---------------------------------------------------------------------------
# Guard outcome (single source of truth)
# ---------------------------------------------------------------------------


async def get_guard_outcome(
    guard: Annotated[AccessGuard, Depends(get_access_guard)],
    signals: Annotated[RequestSignals, Depends(get_request_signals)],
    credential: Annotated[str | None, Depends(get_credential)],
) -> GuardOutcome:
    """Run the access guard once for the request."""
    return await guard.resolve_request_tenant(signals, credential)


async def get_tenant_resolution(
    outcome: Annotated[GuardOutcome, Depends(get_guard_outcome)],
) -> TenantResolved:
    """Unwrap the guard outcome, raising for anything but a resolved tenant.

    Raises:
        TenantAccessViolationError: If the request declared a foreign tenant
        TenantResolutionError: If no tenant could be determined
    """
    if isinstance(outcome, TenantResolved):
        return outcome
    if isinstance(outcome, TenantAccessViolation):
        raise TenantAccessViolationError(
            declared_slug=outcome.declared_slug, reason=outcome.reason
        )
    raise TenantResolutionError(reason=outcome.reason)


# ---------------------------------------------------------------------------
# Derived dependencies
# ---------------------------------------------------------------------------


async def get_tenant_context(
    resolution: Annotated[TenantResolved, Depends(get_tenant_resolution)],
) -> TenantContext:
    """The authoritative tenant of the request."""
    return resolution.context


async def get_current_identity(
    resolution: Annotated[TenantResolved, Depends(get_tenant_resolution)],
) -> Identity | None:
    """The verified identity of the request, or None if anonymous."""
    return resolution.identity


async def require_identity(
    identity: Annotated[Identity | None, Depends(get_current_identity)],
) -> Identity:
    """The verified identity of the request.

    Raises:
        HTTPException 401: If the request is anonymous
    """
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require_role(*required_roles: str):
    """Build a dependency admitting identities holding any of ``required_roles``.

    Usage:
        @router.get("/admin-only")
        async def handler(
            identity: Annotated[Identity, Depends(require_role("admin"))],
        ): ...
    """
    roles = list(required_roles)

    async def _require_role(
        identity: Annotated[Identity, Depends(require_identity)],
        probe: Annotated[TenantContextProbe, Depends(get_tenant_context_probe)],
    ) -> Identity:
        if not has_role(identity.role, roles):
            probe.role_check_failed(
                user_id=identity.user_id,
                role=identity.role,
                required_roles=roles,
            )
            raise InsufficientRoleError(role=identity.role, required_roles=roles)
        return identity

    return _require_role
