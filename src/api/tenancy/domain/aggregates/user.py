"""User aggregate for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass

from tenancy.domain.value_objects import UserId


@dataclass(frozen=True)
class User:
    """Staff user as far as tenant binding is concerned.

    Only the fields needed to re-validate a credential are modelled: the
    owning tenant, the role and the active flag. Account management lives
    elsewhere.
    """

    id: UserId
    tenant_id: str
    email: str
    role: str
    is_active: bool = True

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.email})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)

    def can_act_for(self, tenant_id: str) -> bool:
        """Whether this user may currently act on behalf of ``tenant_id``.

        False once the user is deactivated or moved to another tenant.
        """
        return self.is_active and self.tenant_id == tenant_id
