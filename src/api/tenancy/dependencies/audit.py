"""Audit FastAPI dependencies.

The recorder gets its own session on the write engine; it commits each
entry independently of whatever the request handler does with its
session.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import (
    get_audit_sessionmaker,
    get_read_session,
)
from infrastructure.settings import TenancySettings, get_tenancy_settings
from shared_kernel.observability_context import ObservationContext
from tenancy.application.observability import DefaultAuditRecorderProbe
from tenancy.application.services import (
    AuditLogService,
    AuditRecorder,
    TenantResolver,
)
from tenancy.application.value_objects import RequestMetadata
from tenancy.dependencies.tenant_context import (
    get_observation_context,
    get_tenant_resolver,
)
from tenancy.infrastructure import AuditLogRepository

UNKNOWN = "unknown"


def client_ip(headers: Mapping[str, str]) -> str:
    """Client address from proxy headers.

    First entry of ``X-Forwarded-For``, else ``X-Real-IP``, else "unknown".
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return UNKNOWN


def get_request_metadata(request: Request) -> RequestMetadata:
    """Path, client address and user agent of the request."""
    return RequestMetadata(
        path=request.url.path,
        ip_address=client_ip(request.headers),
        user_agent=request.headers.get("user-agent") or UNKNOWN,
    )


async def get_audit_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a dedicated write session for audit inserts."""
    sessionmaker = get_audit_sessionmaker()
    async with sessionmaker() as session:
        yield session


def get_audit_recorder(
    session: Annotated[AsyncSession, Depends(get_audit_session)],
    tenant_resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
    settings: Annotated[TenancySettings, Depends(get_tenancy_settings)],
    context: Annotated[ObservationContext, Depends(get_observation_context)],
) -> AuditRecorder:
    """Get AuditRecorder writing through its own session."""
    return AuditRecorder(
        audit_repository=AuditLogRepository(session=session),
        tenant_resolver=tenant_resolver,
        api_path_prefix=settings.api_path_prefix,
        reserved_path_segments=settings.reserved_path_segments,
        reserved_path_prefix=settings.reserved_path_prefix,
        probe=DefaultAuditRecorderProbe().with_context(context),
    )


def get_audit_log_service(
    session: Annotated[AsyncSession, Depends(get_read_session)],
) -> AuditLogService:
    """Get AuditLogService reading through the request's read session."""
    return AuditLogService(audit_repository=AuditLogRepository(session=session))
