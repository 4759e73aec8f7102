"""Best-effort, tenant-scoped audit recording."""

from __future__ import annotations

from collections.abc import Sequence

from tenancy.application.observability import (
    AuditRecorderProbe,
    DefaultAuditRecorderProbe,
)
from tenancy.application.services.tenant_resolver import (
    TenantResolver,
    first_path_segment,
)
from tenancy.application.value_objects import AuditDraft, Identity, RequestMetadata
from tenancy.domain.aggregates import AuditEntry
from tenancy.ports.repositories import IAuditLogRepository


class AuditRecorder:
    """Writes audit entries without ever failing the calling request.

    The tenant of an entry is taken from, in order: the explicit tenant
    id, the acting identity, the first segment of a non-API request path,
    and finally the default tenant. If none of these yields a tenant the
    entry is dropped. Any failure is reported through the probe and
    swallowed.
    """

    def __init__(
        self,
        audit_repository: IAuditLogRepository,
        tenant_resolver: TenantResolver,
        api_path_prefix: str = "/api/",
        reserved_path_segments: Sequence[str] = ("api", "admin", "login", "signup"),
        reserved_path_prefix: str = "_",
        probe: AuditRecorderProbe | None = None,
    ):
        """Initialize AuditRecorder with dependencies.

        Args:
            audit_repository: Append-only store, on its own write session
            tenant_resolver: Used for slug and default tenant lookups
            api_path_prefix: Paths under this prefix never name a tenant
            reserved_path_segments: Path segments that never name a tenant
            reserved_path_prefix: Prefix marking framework-internal segments
            probe: Optional domain probe for observability
        """
        self._audit_repository = audit_repository
        self._tenant_resolver = tenant_resolver
        self._api_path_prefix = api_path_prefix
        self._reserved_path_segments = tuple(reserved_path_segments)
        self._reserved_path_prefix = reserved_path_prefix
        self._probe = probe or DefaultAuditRecorderProbe()

    async def record(
        self,
        draft: AuditDraft,
        request: RequestMetadata,
        identity: Identity | None = None,
        tenant_id: str | None = None,
    ) -> None:
        """Record an audit entry. Never raises.

        Args:
            draft: What happened
            request: Path, client address and user agent of the request
            identity: The acting identity, if authenticated
            tenant_id: Explicit tenant, overriding every other source
        """
        try:
            resolved_tenant_id = await self._determine_tenant_id(
                request, identity, tenant_id
            )
            if resolved_tenant_id is None:
                self._probe.entry_dropped(
                    draft.action, draft.entity_type, reason="tenant_unresolved"
                )
                return

            entry = AuditEntry.create(
                tenant_id=resolved_tenant_id,
                action=draft.action,
                entity_type=draft.entity_type,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
                user_id=identity.user_id if identity is not None else None,
                entity_id=draft.entity_id,
                changes=draft.changes,
                metadata=draft.metadata,
            )
            await self._audit_repository.add(entry)
        except Exception as e:
            self._probe.entry_write_failed(draft.action, draft.entity_type, e)
            return

        self._probe.entry_recorded(
            entry_id=entry.id.value,
            tenant_id=entry.tenant_id,
            action=entry.action,
            entity_type=entry.entity_type,
        )

    async def _determine_tenant_id(
        self,
        request: RequestMetadata,
        identity: Identity | None,
        tenant_id: str | None,
    ) -> str | None:
        if tenant_id:
            return tenant_id
        if identity is not None:
            return identity.tenant_id

        if not request.path.startswith(self._api_path_prefix):
            slug = first_path_segment(
                request.path,
                self._reserved_path_segments,
                self._reserved_path_prefix,
            )
            if slug is not None:
                tenant = await self._tenant_resolver.find_by_slug(slug, "path")
                if tenant is not None:
                    return tenant.id.value

        default = await self._tenant_resolver.default_tenant()
        return default.id.value if default is not None else None
