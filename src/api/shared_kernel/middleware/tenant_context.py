"""Tenant context value object for resolved tenant identification.

This module contains the pure value object handed to every downstream
handler once a request's tenant is settled. It is framework-agnostic and
contains no business logic, making it safe for the shared kernel.

The resolution logic (credential binding, request signals, violation
detection) lives in the tenancy bounded context.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TenantSource = Literal["identity", "host", "referer", "query", "header", "default"]


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant context for the current request.

    Attributes:
        tenant_id: The authoritative tenant identifier. All data access for
            the request must be scoped to this id.
        source: Which signal settled the tenant - 'identity' when bound to an
            authenticated credential, otherwise the request signal that
            matched ('host', 'referer', 'query', 'header') or 'default'.
    """

    tenant_id: str
    source: TenantSource

    @property
    def is_authenticated(self) -> bool:
        """Whether the tenant came from a verified identity."""
        return self.source == "identity"
