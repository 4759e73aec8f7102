"""Unit tests for tenancy FastAPI dependencies.

Dependencies are called directly with their resolved arguments, the
same way FastAPI would after resolving sub-dependencies.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from infrastructure.settings import AuthSettings, TenancySettings
from shared_kernel.middleware.observability.tenant_context_probe import (
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.value_objects import (
    Identity,
    RequestSignals,
    TenantAccessViolation,
    TenantResolved,
    TenantUnresolved,
)
from tenancy.dependencies.audit import client_ip, get_request_metadata
from tenancy.dependencies.authentication import get_credential
from tenancy.dependencies.tenant_context import (
    get_current_identity,
    get_guard_outcome,
    get_request_signals,
    get_tenant_context,
    get_tenant_resolution,
    require_identity,
    require_role,
)
from tenancy.presentation.exceptions import (
    InsufficientRoleError,
    TenantAccessViolationError,
    TenantResolutionError,
)

TENANT_ID = "01ARZ3NDEKTSV4RRFFQ69G5FAV"


@pytest.fixture
def identity() -> Identity:
    return Identity(
        user_id="user-1",
        tenant_id=TENANT_ID,
        email="staff@acme.example.com",
        role="cashier",
    )


@pytest.fixture
def mock_probe() -> MagicMock:
    """Create a mock tenant context probe."""
    return MagicMock(spec=TenantContextProbe)


def _request(
    headers: dict[str, str] | None = None,
    cookies: dict[str, str] | None = None,
    query: dict[str, str] | None = None,
    path: str = "/",
) -> MagicMock:
    request = MagicMock()
    request.headers = headers or {}
    request.cookies = cookies or {}
    request.query_params = query or {}
    request.url.path = path
    return request


class TestClientIp:
    """Tests for client address extraction."""

    def test_first_forwarded_entry_wins(self):
        headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1", "x-real-ip": "10.0.0.9"}
        assert client_ip(headers) == "203.0.113.7"

    def test_real_ip_when_not_forwarded(self):
        assert client_ip({"x-real-ip": " 198.51.100.4 "}) == "198.51.100.4"

    def test_unknown_without_proxy_headers(self):
        assert client_ip({}) == "unknown"

    def test_blank_forwarded_falls_through(self):
        assert client_ip({"x-forwarded-for": " , 10.0.0.1"}) == "unknown"


class TestRequestFacts:
    """Tests for signal and metadata extraction."""

    def test_signals_follow_configured_names(self):
        settings = TenancySettings(query_param="store", slug_header="X-Store")
        request = _request(
            headers={
                "host": "acme.shop.example.com",
                "referer": "https://shop.example.com/acme/cart",
                "X-Store": "acme",
            },
            query={"store": "acme"},
        )

        signals = get_request_signals(request, settings)

        assert signals == RequestSignals(
            host="acme.shop.example.com",
            referer="https://shop.example.com/acme/cart",
            query_tenant="acme",
            header_slug="acme",
            header_id=None,
        )

    def test_metadata_defaults_to_unknown(self):
        metadata = get_request_metadata(_request(path="/acme/pos"))

        assert metadata.path == "/acme/pos"
        assert metadata.ip_address == "unknown"
        assert metadata.user_agent == "unknown"


class TestGetCredential:
    """Tests for credential extraction."""

    def test_cookie_takes_precedence_over_bearer(self):
        settings = AuthSettings()
        request = _request(cookies={settings.cookie_name: "cookie-token"})
        bearer = HTTPAuthorizationCredentials(scheme="Bearer", credentials="bearer-token")

        assert get_credential(request, settings, bearer) == "cookie-token"

    def test_bearer_used_without_cookie(self):
        bearer = HTTPAuthorizationCredentials(scheme="Bearer", credentials="bearer-token")

        assert get_credential(_request(), AuthSettings(), bearer) == "bearer-token"

    def test_none_without_either(self):
        assert get_credential(_request(), AuthSettings(), None) is None


class TestGuardOutcome:
    """Tests for running and unwrapping the guard."""

    @pytest.mark.asyncio
    async def test_guard_receives_signals_and_credential(self):
        guard = AsyncMock()
        outcome = TenantResolved(tenant_id=TENANT_ID, source="host")
        guard.resolve_request_tenant.return_value = outcome
        signals = RequestSignals(host="acme.example.com")

        result = await get_guard_outcome(guard, signals, "token")

        assert result is outcome
        guard.resolve_request_tenant.assert_awaited_once_with(signals, "token")

    @pytest.mark.asyncio
    async def test_resolved_outcome_is_returned(self, identity):
        outcome = TenantResolved(tenant_id=TENANT_ID, source="identity", identity=identity)

        resolution = await get_tenant_resolution(outcome)

        assert resolution is outcome
        assert await get_tenant_context(resolution) == TenantContext(
            tenant_id=TENANT_ID, source="identity"
        )
        assert await get_current_identity(resolution) is identity

    @pytest.mark.asyncio
    async def test_violation_raises_with_declared_slug(self):
        outcome = TenantAccessViolation(
            declared_slug="rival-store",
            declared_source="query",
            reason="declared_tenant_mismatch",
        )

        with pytest.raises(TenantAccessViolationError) as exc_info:
            await get_tenant_resolution(outcome)

        assert exc_info.value.declared_slug == "rival-store"
        assert exc_info.value.redirect_path == "/rival-store/forbidden"

    @pytest.mark.asyncio
    async def test_unresolved_raises_resolution_error(self):
        with pytest.raises(TenantResolutionError) as exc_info:
            await get_tenant_resolution(TenantUnresolved(reason="no_tenant_signal"))

        assert exc_info.value.reason == "no_tenant_signal"


class TestRequireIdentity:
    """Tests for identity and role requirements."""

    @pytest.mark.asyncio
    async def test_anonymous_gets_401(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_identity(None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    @pytest.mark.asyncio
    async def test_identity_passes(self, identity):
        assert await require_identity(identity) is identity

    @pytest.mark.asyncio
    async def test_role_at_or_above_required_passes(self, identity, mock_probe):
        check = require_role("cashier")

        assert await check(identity, mock_probe) is identity
        mock_probe.role_check_failed.assert_not_called()

    @pytest.mark.asyncio
    async def test_role_below_required_is_rejected(self, identity, mock_probe):
        check = require_role("admin")

        with pytest.raises(InsufficientRoleError) as exc_info:
            await check(identity, mock_probe)

        assert exc_info.value.required_roles == ["admin"]
        mock_probe.role_check_failed.assert_called_once_with(
            user_id="user-1", role="cashier", required_roles=["admin"]
        )
