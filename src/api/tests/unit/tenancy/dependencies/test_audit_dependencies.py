"""Unit tests for the audit dependency wiring.

The recorder writes through its own session from the audit sessionmaker;
the request's read session only serves tenant lookups. These tests build
the recorder through the FastAPI providers and check which session sees
the insert, and that a failed audit commit leaves the handler's response
untouched.
"""

from __future__ import annotations

from typing import Annotated
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import Depends, FastAPI, status
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from infrastructure.settings import TenancySettings
from shared_kernel.observability_context import ObservationContext
from tenancy.application.services import AuditRecorder, TenantResolver
from tenancy.application.value_objects import AuditDraft, RequestMetadata
from tenancy.dependencies.audit import (
    get_audit_recorder,
    get_audit_session,
    get_request_metadata,
)
from tenancy.dependencies.tenant_context import get_tenant_resolver
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure import TenantRepository
from tenancy.infrastructure.models import AuditLogModel, TenantModel

TENANT_ID = TenantId.generate().value


@pytest.fixture
def audit_session() -> AsyncMock:
    """Dedicated audit write session; add() is synchronous on AsyncSession."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def read_session() -> AsyncMock:
    """Request read session serving tenant lookups."""
    session = AsyncMock()
    session.add = MagicMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = TenantModel(
        id=TENANT_ID,
        slug="acme-store",
        name="Acme Store",
        is_active=True,
        settings={},
    )
    session.execute.return_value = result
    return session


@pytest.fixture
def tenant_resolver(read_session: AsyncMock) -> TenantResolver:
    return TenantResolver(
        tenant_repository=TenantRepository(session=read_session, probe=MagicMock()),
        probe=MagicMock(),
    )


@pytest.fixture
def audit_sessionmaker(monkeypatch, audit_session: AsyncMock) -> MagicMock:
    """Replace the write-engine sessionmaker with one yielding ``audit_session``."""
    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=audit_session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    sessionmaker = MagicMock(return_value=session_cm)
    monkeypatch.setattr(
        "tenancy.dependencies.audit.get_audit_sessionmaker", lambda: sessionmaker
    )
    return sessionmaker


class TestGetAuditSession:
    """Tests for the dedicated audit session provider."""

    @pytest.mark.asyncio
    async def test_yields_session_from_audit_sessionmaker(
        self, audit_sessionmaker, audit_session
    ):
        sessions = [session async for session in get_audit_session()]

        assert sessions == [audit_session]
        audit_sessionmaker.assert_called_once_with()


class TestGetAuditRecorder:
    """Tests for recorder wiring."""

    @pytest.mark.asyncio
    async def test_entry_is_written_on_audit_session_only(
        self, audit_session, read_session, tenant_resolver
    ):
        recorder = get_audit_recorder(
            session=audit_session,
            tenant_resolver=tenant_resolver,
            settings=TenancySettings(),
            context=ObservationContext(request_id="req-1"),
        )

        await recorder.record(
            AuditDraft(action="stock.adjust", entity_type="product", entity_id="p-1"),
            RequestMetadata(path="/acme-store/inventory", ip_address="198.51.100.2"),
        )

        model = audit_session.add.call_args[0][0]
        assert isinstance(model, AuditLogModel)
        assert model.tenant_id == TENANT_ID
        assert model.ip_address == "198.51.100.2"
        audit_session.commit.assert_awaited_once()
        # The read session resolved the tenant from the path but never wrote
        read_session.execute.assert_awaited()
        read_session.add.assert_not_called()
        read_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back_audit_session_only(
        self, audit_session, read_session, tenant_resolver
    ):
        audit_session.commit.side_effect = OperationalError("INSERT", {}, Exception())
        recorder = get_audit_recorder(
            session=audit_session,
            tenant_resolver=tenant_resolver,
            settings=TenancySettings(),
            context=ObservationContext(),
        )

        await recorder.record(
            AuditDraft(action="delete", entity_type="product"),
            RequestMetadata(path="/api/products"),
            tenant_id=TENANT_ID,
        )

        audit_session.rollback.assert_awaited_once()
        read_session.rollback.assert_not_called()


class TestRecorderInHandler:
    """Tests for a handler recording through the FastAPI providers."""

    @pytest.fixture
    def client(self, audit_sessionmaker, tenant_resolver) -> TestClient:
        app = FastAPI()

        @app.post("/api/products")
        async def create_product(
            recorder: Annotated[AuditRecorder, Depends(get_audit_recorder)],
            metadata: Annotated[RequestMetadata, Depends(get_request_metadata)],
        ):
            await recorder.record(
                AuditDraft(action="create", entity_type="product", entity_id="p-1"),
                metadata,
                tenant_id=TENANT_ID,
            )
            return {"id": "p-1"}

        app.dependency_overrides[get_tenant_resolver] = lambda: tenant_resolver
        return TestClient(app)

    def test_handler_records_on_audit_session(self, client, audit_session):
        response = client.post(
            "/api/products",
            headers={"X-Forwarded-For": "203.0.113.9", "User-Agent": "pos/3.1"},
        )

        assert response.status_code == status.HTTP_200_OK
        model = audit_session.add.call_args[0][0]
        assert model.ip_address == "203.0.113.9"
        assert model.user_agent == "pos/3.1"
        audit_session.commit.assert_awaited_once()

    def test_audit_commit_failure_leaves_response_unchanged(
        self, client, audit_session
    ):
        audit_session.commit.side_effect = OperationalError("INSERT", {}, Exception())

        response = client.post("/api/products")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"id": "p-1"}
        audit_session.rollback.assert_awaited_once()
