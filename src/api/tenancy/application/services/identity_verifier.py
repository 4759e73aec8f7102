"""Credential verification and role checks."""

from __future__ import annotations

from collections.abc import Iterable

from shared_kernel.auth.jwt_validator import InvalidTokenError, JWTValidator
from tenancy.application.observability import (
    DefaultIdentityVerifierProbe,
    IdentityVerifierProbe,
)
from tenancy.application.value_objects import Identity
from tenancy.domain.value_objects import Role, UserId, role_level
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import IUserRepository


def has_role(user_role: str, required_roles: Iterable[str]) -> bool:
    """Whether ``user_role`` satisfies at least one of ``required_roles``.

    A role satisfies a requirement when its level is at least the lowest
    level among the required roles. Unknown required roles are ignored;
    an unknown user role has level 0 and satisfies nothing.

    Args:
        user_role: The role carried by the identity
        required_roles: Roles any of which grants access

    Returns:
        False when no known role is required
    """
    levels = [
        role_level(role) for role in required_roles if Role.parse(role) is not None
    ]
    if not levels:
        return False
    return role_level(user_role) >= min(levels)


class IdentityVerifier:
    """Turns a presented credential into a verified Identity.

    A valid signature is not enough: the user named by the credential must
    still exist, still be active and still belong to the tenant the
    credential was issued for. Every failure yields None; the reason is
    only visible through the probe.
    """

    def __init__(
        self,
        jwt_validator: JWTValidator,
        user_repository: IUserRepository,
        probe: IdentityVerifierProbe | None = None,
    ):
        """Initialize IdentityVerifier with dependencies.

        Args:
            jwt_validator: Codec that checks credential signature and expiry
            user_repository: Read access to live user records
            probe: Optional domain probe for observability
        """
        self._jwt_validator = jwt_validator
        self._user_repository = user_repository
        self._probe = probe or DefaultIdentityVerifierProbe()

    async def verify(self, credential: str | None) -> Identity | None:
        """Verify a credential against its signature and the live user record.

        Args:
            credential: The raw credential, or None if the request had none

        Returns:
            The verified Identity, or None if absent or invalid in any way
        """
        if not credential:
            return None

        try:
            claims = self._jwt_validator.validate_token(credential)
        except InvalidTokenError as e:
            self._probe.credential_rejected(str(e))
            return None

        try:
            user_id = UserId(claims.user_id)
        except ValueError as e:
            self._probe.credential_rejected(str(e))
            return None

        try:
            user = await self._user_repository.get_by_id(user_id)
        except RepositoryUnavailableError as e:
            self._probe.user_lookup_failed(claims.user_id, e)
            return None

        if user is None:
            self._probe.user_not_found(claims.user_id)
            return None
        if not user.is_active:
            self._probe.user_inactive(claims.user_id)
            return None
        if not user.can_act_for(claims.tenant_id):
            self._probe.tenant_binding_stale(
                user_id=claims.user_id,
                claimed_tenant_id=claims.tenant_id,
                current_tenant_id=user.tenant_id,
            )
            return None

        self._probe.identity_verified(claims.user_id, claims.tenant_id, claims.role)
        return Identity(
            user_id=claims.user_id,
            tenant_id=claims.tenant_id,
            email=claims.email,
            role=claims.role,
        )

    @staticmethod
    def has_role(identity: Identity, required_roles: Iterable[str]) -> bool:
        """Whether an identity satisfies at least one of ``required_roles``."""
        return has_role(identity.role, required_roles)
