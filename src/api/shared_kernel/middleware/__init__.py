"""Shared middleware for cross-cutting concerns.

Holds the TenantContext value object that every bounded context receives
once the access guard has settled a request's tenant, together with the
probe describing that resolution.
"""

from shared_kernel.middleware.tenant_context import TenantContext, TenantSource

__all__ = [
    "TenantContext",
    "TenantSource",
]
