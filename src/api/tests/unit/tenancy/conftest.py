"""Shared fixtures for tenancy unit tests."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from shared_kernel.auth import JWTValidator
from shared_kernel.auth.jwt_validator import TokenClaims
from tenancy.domain.aggregates import Tenant, User
from tenancy.domain.value_objects import TenantId, UserId

TEST_SECRET = "tenancy-test-secret"


@pytest.fixture
def make_tenant() -> Callable[..., Tenant]:
    """Factory for active tenants with fresh ids."""

    def _make(slug: str, **kwargs) -> Tenant:
        return Tenant(
            id=kwargs.pop("id", None) or TenantId.generate(),
            slug=slug,
            name=kwargs.pop("name", slug.replace("-", " ").title()),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_user() -> Callable[..., User]:
    """Factory for staff users."""

    def _make(tenant: Tenant, role: str = "cashier", **kwargs) -> User:
        return User(
            id=UserId(kwargs.pop("user_id", "user-1")),
            tenant_id=tenant.id.value,
            email=kwargs.pop("email", f"staff@{tenant.slug}.example.com"),
            role=role,
            **kwargs,
        )

    return _make


@pytest.fixture
def jwt_validator() -> JWTValidator:
    """Validator with a test secret and a silent probe."""
    return JWTValidator(secret=TEST_SECRET, probe=MagicMock())


@pytest.fixture
def issue_credential(jwt_validator: JWTValidator) -> Callable[[User], str]:
    """Sign a credential for a user's current tenant binding."""

    def _issue(user: User) -> str:
        return jwt_validator.issue_token(
            TokenClaims(
                user_id=user.id.value,
                tenant_id=user.tenant_id,
                email=user.email,
                role=user.role,
            )
        )

    return _issue


@pytest.fixture
def mock_tenant_repo() -> AsyncMock:
    """Tenant repository where nothing matches unless configured."""
    repo = AsyncMock()
    repo.find_active_by_id.return_value = None
    repo.find_active_by_slug.return_value = None
    repo.find_active_by_host.return_value = None
    return repo


@pytest.fixture
def mock_user_repo() -> AsyncMock:
    """User repository where no user exists unless configured."""
    repo = AsyncMock()
    repo.get_by_id.return_value = None
    return repo


@pytest.fixture
def serve_tenants(mock_tenant_repo: AsyncMock) -> Callable[..., None]:
    """Make the mock tenant repository serve the given active tenants by id and slug."""

    def _serve(*tenants: Tenant) -> None:
        by_slug = {tenant.slug: tenant for tenant in tenants}
        by_id = {tenant.id.value: tenant for tenant in tenants}

        async def _by_slug(slug: str) -> Tenant | None:
            return by_slug.get(slug)

        async def _by_id(tenant_id: TenantId) -> Tenant | None:
            return by_id.get(tenant_id.value)

        mock_tenant_repo.find_active_by_slug.side_effect = _by_slug
        mock_tenant_repo.find_active_by_id.side_effect = _by_id

    return _serve
