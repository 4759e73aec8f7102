"""Tenant resolution from unauthenticated request signals.

Resolution is an ordered list of strategies; the first one that yields
an active tenant wins. The list is data, so adding or reordering a
signal means editing ``_full_chain`` rather than nested conditionals.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from urllib.parse import urlsplit

from shared_kernel.middleware.tenant_context import TenantSource
from tenancy.application.observability import (
    DefaultTenantResolverProbe,
    TenantResolverProbe,
)
from tenancy.application.value_objects import RequestSignals, TenantMatch
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId, is_ulid, is_valid_slug
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.ports.repositories import ITenantRepository

Strategy = Callable[[RequestSignals], Awaitable[Tenant | None]]


def split_host(host: str | None) -> tuple[str, str] | None:
    """Split a Host header into ``(hostname, first_label)``.

    The port is dropped. Returns None for an empty host.
    """
    if not host:
        return None
    hostname = host.strip().lower()
    if hostname.startswith("["):
        # IPv6 literal, never a tenant host
        return None
    hostname = hostname.split(":", 1)[0]
    if not hostname:
        return None
    return hostname, hostname.split(".", 1)[0]


def first_path_segment(
    path: str,
    reserved_segments: Sequence[str],
    reserved_prefix: str,
) -> str | None:
    """First segment of a URL path if it can name a tenant.

    Reserved segments, segments starting with ``reserved_prefix`` and
    segments that are not valid slugs are rejected.
    """
    segment = next((part for part in path.split("/") if part), None)
    if segment is None:
        return None
    if segment in reserved_segments:
        return None
    if reserved_prefix and segment.startswith(reserved_prefix):
        return None
    if not is_valid_slug(segment):
        return None
    return segment


class TenantResolver:
    """Determines which tenant a request targets from its signals.

    Full chain, first match wins: host, referer, query, header, then the
    configured default tenant. The declared chain (query, header, referer)
    answers which tenant the client asked for and never falls back.

    Only active tenants ever match. A lookup that fails because the store
    is unreachable is logged and treated as no match for that strategy.
    """

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        default_tenant_slug: str = "default",
        default_fallback_enabled: bool = True,
        reserved_path_segments: Sequence[str] = ("api", "admin", "login", "signup"),
        reserved_path_prefix: str = "_",
        ignored_host_labels: Sequence[str] = ("www", "localhost", "127.0.0.1"),
        probe: TenantResolverProbe | None = None,
    ):
        """Initialize TenantResolver with dependencies.

        Args:
            tenant_repository: Read access to active tenants
            default_tenant_slug: Slug of the tenant used when nothing matches
            default_fallback_enabled: Whether to fall back to the default tenant
            reserved_path_segments: Referer path segments that never name a tenant
            reserved_path_prefix: Prefix marking framework-internal path segments
            ignored_host_labels: First host labels that never name a tenant
            probe: Optional domain probe for observability
        """
        self._tenant_repository = tenant_repository
        self._default_tenant_slug = default_tenant_slug
        self._default_fallback_enabled = default_fallback_enabled
        self._reserved_path_segments = tuple(reserved_path_segments)
        self._reserved_path_prefix = reserved_path_prefix
        self._ignored_host_labels = frozenset(
            label.lower() for label in ignored_host_labels
        )
        self._probe = probe or DefaultTenantResolverProbe()

        self._full_chain: list[tuple[TenantSource, Strategy]] = [
            ("host", self._from_host),
            ("referer", self._from_referer),
            ("query", self._from_query),
            ("header", self._from_header),
        ]
        self._declared_chain: list[tuple[TenantSource, Strategy]] = [
            ("query", self._from_query),
            ("header", self._from_header),
            ("referer", self._from_referer),
        ]

    @property
    def default_fallback_enabled(self) -> bool:
        """Whether ``resolve`` falls back to the default tenant."""
        return self._default_fallback_enabled

    @property
    def default_tenant_slug(self) -> str:
        """Slug of the fallback tenant."""
        return self._default_tenant_slug

    async def resolve(self, signals: RequestSignals) -> TenantMatch | None:
        """Resolve the tenant for an unauthenticated request.

        Args:
            signals: The request's tenant signals

        Returns:
            The first matching tenant, the default tenant, or None if
            fallback is disabled or the default tenant is unavailable
        """
        match = await self._first_match(self._full_chain, signals)
        if match is not None:
            return match

        if not self._default_fallback_enabled:
            self._probe.default_fallback_disabled()
            return None

        default = await self.default_tenant()
        if default is None:
            return None
        return TenantMatch(tenant=default, source="default")

    async def resolve_declared(self, signals: RequestSignals) -> TenantMatch | None:
        """Resolve the tenant a request explicitly declares.

        Only query, header and referer signals count; host and default
        are never a declaration.

        Args:
            signals: The request's tenant signals

        Returns:
            The declared active tenant, or None if nothing was declared
        """
        return await self._first_match(self._declared_chain, signals)

    async def default_tenant(self) -> Tenant | None:
        """Load the configured default tenant, or None if unavailable."""
        tenant = await self._lookup(
            "default",
            self._tenant_repository.find_active_by_slug(self._default_tenant_slug),
        )
        if tenant is None:
            self._probe.default_tenant_not_found(self._default_tenant_slug)
        return tenant

    async def find_by_slug(self, slug: str, source: str) -> Tenant | None:
        """Look up an active tenant by slug, treating outages as no match."""
        if not is_valid_slug(slug):
            return None
        return await self._lookup(
            source, self._tenant_repository.find_active_by_slug(slug)
        )

    # -------------------------------------------------------------------------
    # Strategies
    # -------------------------------------------------------------------------

    async def _first_match(
        self,
        chain: list[tuple[TenantSource, Strategy]],
        signals: RequestSignals,
    ) -> TenantMatch | None:
        for source, strategy in chain:
            tenant = await strategy(signals)
            if tenant is not None:
                self._probe.strategy_matched(source, tenant.id.value)
                return TenantMatch(tenant=tenant, source=source)
        return None

    async def _from_host(self, signals: RequestSignals) -> Tenant | None:
        parts = split_host(signals.host)
        if parts is None:
            return None
        hostname, label = parts
        if label in self._ignored_host_labels or hostname in self._ignored_host_labels:
            return None
        return await self._lookup(
            "host", self._tenant_repository.find_active_by_host(hostname, label)
        )

    async def _from_referer(self, signals: RequestSignals) -> Tenant | None:
        if not signals.referer:
            return None
        try:
            path = urlsplit(signals.referer).path
        except ValueError:
            self._probe.referer_unparsable(signals.referer)
            return None
        slug = first_path_segment(
            path, self._reserved_path_segments, self._reserved_path_prefix
        )
        if slug is None:
            return None
        return await self.find_by_slug(slug, "referer")

    async def _from_query(self, signals: RequestSignals) -> Tenant | None:
        if not signals.query_tenant:
            return None
        return await self.find_by_slug(signals.query_tenant.strip(), "query")

    async def _from_header(self, signals: RequestSignals) -> Tenant | None:
        """Tenant named by the slug header, else by the id header.

        When the slug header is present the id header is not consulted,
        even if the slug matches no tenant. A ULID-shaped value is looked
        up by id first, then as a slug.
        """
        value = signals.header_slug or signals.header_id
        if not value:
            return None
        value = value.strip()
        if is_ulid(value):
            tenant = await self._lookup(
                "header",
                self._tenant_repository.find_active_by_id(TenantId.from_string(value)),
            )
            if tenant is not None:
                return tenant
        return await self.find_by_slug(value, "header")

    async def _lookup(
        self,
        source: str,
        pending: Awaitable[Tenant | None],
    ) -> Tenant | None:
        try:
            return await pending
        except RepositoryUnavailableError as e:
            self._probe.lookup_failed(source, e)
            return None
