"""Unit tests for AccessGuard.

Exercises the full decision table with a real resolver and verifier over
mock repositories, plus the scenarios the storefront relies on.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from shared_kernel.middleware.observability import TenantContextProbe
from tenancy.application.services import AccessGuard, IdentityVerifier, TenantResolver
from tenancy.application.value_objects import (
    RequestSignals,
    TenantAccessViolation,
    TenantResolved,
    TenantUnresolved,
)


@pytest.fixture
def mock_probe() -> MagicMock:
    """Create a mock tenant context probe."""
    return MagicMock(spec=TenantContextProbe)


@pytest.fixture
def resolver(mock_tenant_repo: AsyncMock) -> TenantResolver:
    return TenantResolver(tenant_repository=mock_tenant_repo, probe=MagicMock())


@pytest.fixture
def guard(jwt_validator, mock_user_repo, resolver, mock_probe) -> AccessGuard:
    verifier = IdentityVerifier(
        jwt_validator=jwt_validator,
        user_repository=mock_user_repo,
        probe=MagicMock(),
    )
    return AccessGuard(
        identity_verifier=verifier,
        tenant_resolver=resolver,
        probe=mock_probe,
    )


@pytest.fixture
def tenants(make_tenant, serve_tenants):
    default = make_tenant("default")
    acme = make_tenant("acme-store")
    globex = make_tenant("globex")
    serve_tenants(default, acme, globex)
    return {"default": default, "acme": acme, "globex": globex}


@pytest.fixture
def acme_cashier(tenants, make_user, mock_user_repo):
    """An active cashier of acme-store, known to the user repository."""
    user = make_user(tenants["acme"], role="cashier")
    mock_user_repo.get_by_id.return_value = user
    return user


class TestAuthenticatedRequests:
    """Identity present: its tenant is authoritative."""

    @pytest.mark.asyncio
    async def test_no_declaration_binds_to_identity_tenant(
        self, guard, tenants, acme_cashier, issue_credential
    ) -> None:
        outcome = await guard.resolve_request_tenant(
            RequestSignals(), issue_credential(acme_cashier)
        )

        assert isinstance(outcome, TenantResolved)
        assert outcome.tenant_id == tenants["acme"].id.value
        assert outcome.source == "identity"
        assert outcome.identity is not None
        assert outcome.identity.user_id == acme_cashier.id.value

    @pytest.mark.asyncio
    async def test_matching_declaration_is_accepted(
        self, guard, tenants, acme_cashier, issue_credential, mock_probe
    ) -> None:
        outcome = await guard.resolve_request_tenant(
            RequestSignals(query_tenant="acme-store"), issue_credential(acme_cashier)
        )

        assert isinstance(outcome, TenantResolved)
        assert outcome.tenant_id == tenants["acme"].id.value
        mock_probe.tenant_bound_to_identity.assert_called_once_with(
            tenant_id=tenants["acme"].id.value,
            user_id=acme_cashier.id.value,
            declared_source="query",
        )

    @pytest.mark.asyncio
    async def test_foreign_query_declaration_is_a_violation(
        self, guard, tenants, acme_cashier, issue_credential, mock_probe
    ) -> None:
        """Scenario: identity of tenant A with ?tenant=B."""
        outcome = await guard.resolve_request_tenant(
            RequestSignals(query_tenant="globex"), issue_credential(acme_cashier)
        )

        assert isinstance(outcome, TenantAccessViolation)
        assert outcome.declared_slug == "globex"
        assert outcome.declared_source == "query"
        assert outcome.redirect_path == "/globex/forbidden"
        mock_probe.tenant_access_violation.assert_called_once()

    @pytest.mark.asyncio
    async def test_violation_never_reveals_identity_tenant(
        self, guard, tenants, acme_cashier, issue_credential
    ) -> None:
        outcome = await guard.resolve_request_tenant(
            RequestSignals(header_slug="globex"), issue_credential(acme_cashier)
        )

        assert isinstance(outcome, TenantAccessViolation)
        assert "acme" not in repr(outcome)

    @pytest.mark.asyncio
    async def test_foreign_id_header_reports_declared_slug(
        self, guard, tenants, acme_cashier, issue_credential
    ) -> None:
        """A declaration by id is reported by the declared tenant's slug."""
        outcome = await guard.resolve_request_tenant(
            RequestSignals(header_id=tenants["globex"].id.value),
            issue_credential(acme_cashier),
        )

        assert isinstance(outcome, TenantAccessViolation)
        assert outcome.declared_slug == "globex"

    @pytest.mark.asyncio
    async def test_foreign_referer_is_a_violation(
        self, guard, tenants, acme_cashier, issue_credential
    ) -> None:
        outcome = await guard.resolve_request_tenant(
            RequestSignals(referer="https://app.example.com/globex/pos"),
            issue_credential(acme_cashier),
        )

        assert isinstance(outcome, TenantAccessViolation)
        assert outcome.declared_source == "referer"

    @pytest.mark.asyncio
    async def test_host_never_overrides_identity(
        self, guard, tenants, acme_cashier, issue_credential, mock_tenant_repo
    ) -> None:
        """Host is not a declaration; the identity tenant still wins."""
        mock_tenant_repo.find_active_by_host.return_value = tenants["globex"]

        outcome = await guard.resolve_request_tenant(
            RequestSignals(host="globex.example.com"), issue_credential(acme_cashier)
        )

        assert isinstance(outcome, TenantResolved)
        assert outcome.tenant_id == tenants["acme"].id.value

    @pytest.mark.asyncio
    async def test_unknown_declaration_is_ignored(
        self, guard, tenants, acme_cashier, issue_credential
    ) -> None:
        outcome = await guard.resolve_request_tenant(
            RequestSignals(query_tenant="nobody"), issue_credential(acme_cashier)
        )

        assert isinstance(outcome, TenantResolved)
        assert outcome.source == "identity"


class TestAnonymousRequests:
    """No identity: the full resolver chain decides."""

    @pytest.mark.asyncio
    async def test_declaration_resolves_anonymously(
        self, guard, tenants, mock_probe
    ) -> None:
        outcome = await guard.resolve_request_tenant(
            RequestSignals(query_tenant="globex"), None
        )

        assert isinstance(outcome, TenantResolved)
        assert outcome.tenant_id == tenants["globex"].id.value
        assert outcome.source == "query"
        assert outcome.identity is None
        mock_probe.tenant_resolved_anonymously.assert_called_once_with(
            tenants["globex"].id.value, "query"
        )

    @pytest.mark.asyncio
    async def test_referer_scenario(self, guard, tenants) -> None:
        outcome = await guard.resolve_request_tenant(
            RequestSignals(referer="https://app.example.com/acme-store/products"),
            None,
        )

        assert isinstance(outcome, TenantResolved)
        assert outcome.tenant_id == tenants["acme"].id.value
        assert outcome.source == "referer"

    @pytest.mark.asyncio
    async def test_default_resolution_is_reported(
        self, guard, tenants, mock_probe
    ) -> None:
        outcome = await guard.resolve_request_tenant(RequestSignals(), None)

        assert isinstance(outcome, TenantResolved)
        assert outcome.source == "default"
        mock_probe.tenant_resolved_from_default.assert_called_once_with(
            tenants["default"].id.value
        )

    @pytest.mark.asyncio
    async def test_inactive_user_falls_back_to_full_chain(
        self, guard, tenants, make_user, issue_credential, mock_user_repo
    ) -> None:
        """Scenario: valid credential whose user is now inactive."""
        user = make_user(tenants["acme"])
        credential = issue_credential(user)
        mock_user_repo.get_by_id.return_value = make_user(
            tenants["acme"], is_active=False
        )

        outcome = await guard.resolve_request_tenant(
            RequestSignals(query_tenant="globex"), credential
        )

        assert isinstance(outcome, TenantResolved)
        assert outcome.identity is None
        assert outcome.tenant_id == tenants["globex"].id.value

    @pytest.mark.asyncio
    async def test_unresolved_when_default_missing(
        self, guard, mock_probe
    ) -> None:
        outcome = await guard.resolve_request_tenant(RequestSignals(), None)

        assert outcome == TenantUnresolved(reason="default_tenant_unavailable")
        mock_probe.tenant_unresolved.assert_called_once_with(
            "default_tenant_unavailable"
        )

    @pytest.mark.asyncio
    async def test_unresolved_when_fallback_disabled(
        self, jwt_validator, mock_user_repo, mock_tenant_repo, tenants
    ) -> None:
        guard = AccessGuard(
            identity_verifier=IdentityVerifier(
                jwt_validator=jwt_validator, user_repository=mock_user_repo
            ),
            tenant_resolver=TenantResolver(
                tenant_repository=mock_tenant_repo,
                default_fallback_enabled=False,
            ),
            probe=MagicMock(),
        )

        outcome = await guard.resolve_request_tenant(RequestSignals(), None)

        assert outcome == TenantUnresolved(reason="no_tenant_signal")
