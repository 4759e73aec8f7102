"""Boundary exceptions for the tenancy context.

Raised by FastAPI dependencies when a guard outcome or role check must
stop the request; translated into HTTP responses by the handlers
registered in ``main``.
"""


class TenantAccessViolationError(Exception):
    """Raised when an authenticated request declares a foreign tenant.

    Only the declared tenant's slug is carried, so the response can
    redirect without revealing the caller's own tenant.
    """

    def __init__(self, declared_slug: str, reason: str = "declared_tenant_mismatch"):
        self.declared_slug = declared_slug
        self.reason = reason
        super().__init__(f"Access to tenant '{declared_slug}' is forbidden")

    @property
    def redirect_path(self) -> str:
        """Storefront path the client should be sent to."""
        return f"/{self.declared_slug}/forbidden"


class TenantResolutionError(Exception):
    """Raised when no tenant can be determined for a request."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Tenant could not be resolved: {reason}")


class InsufficientRoleError(Exception):
    """Raised when an identity lacks the role a route requires."""

    def __init__(self, role: str, required_roles: list[str]):
        self.role = role
        self.required_roles = required_roles
        super().__init__("Insufficient permissions")
