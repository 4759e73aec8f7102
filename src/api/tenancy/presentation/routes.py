"""HTTP routes for the tenancy bounded context.

Exposes the resolved tenant context of a request, public information
about the resolved tenant, and the admin-only audit log.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.services import AuditLogService
from tenancy.application.services.audit_log_service import MAX_PAGE_SIZE
from tenancy.application.value_objects import TenantResolved
from tenancy.dependencies.audit import get_audit_log_service
from tenancy.dependencies.tenant_context import (
    get_tenant_context,
    get_tenant_repository,
    get_tenant_resolution,
    require_role,
)
from tenancy.domain.value_objects import AuditLogFilter, Role, TenantId
from tenancy.infrastructure import TenantRepository
from tenancy.ports.exceptions import RepositoryUnavailableError
from tenancy.presentation.models import (
    AuditLogListResponse,
    ErrorResponse,
    TenantContextResponse,
    TenantResponse,
)

router = APIRouter(prefix="/tenancy", tags=["tenancy"])

audit_router = APIRouter(prefix="/audit-logs", tags=["audit"])

_GUARD_RESPONSES: dict[int | str, dict] = {
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


@router.get(
    "/context",
    response_model=TenantContextResponse,
    responses=_GUARD_RESPONSES,
)
async def get_context(
    resolution: Annotated[TenantResolved, Depends(get_tenant_resolution)],
) -> TenantContextResponse:
    """Get the tenant and identity the current request is bound to.

    Args:
        resolution: Guard resolution for the request

    Returns:
        TenantContextResponse with tenant id, source and identity
    """
    return TenantContextResponse.from_resolution(resolution)


@router.get(
    "/tenant",
    response_model=TenantResponse,
    responses=_GUARD_RESPONSES,
)
async def get_current_tenant(
    tenant: Annotated[TenantContext, Depends(get_tenant_context)],
    tenant_repository: Annotated[TenantRepository, Depends(get_tenant_repository)],
) -> TenantResponse:
    """Get public information about the resolved tenant.

    Args:
        tenant: The request's authoritative tenant
        tenant_repository: Read access to tenants

    Returns:
        TenantResponse with slug, name and settings

    Raises:
        HTTPException: 404 if the tenant is no longer active
        HTTPException: 503 if the tenant store is unavailable
    """
    try:
        tenant_id = TenantId.from_string(tenant.tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tenant not found",
        ) from e

    try:
        found = await tenant_repository.find_active_by_id(tenant_id)
    except RepositoryUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Tenant store unavailable",
        ) from e

    if found is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tenant not found",
        )
    return TenantResponse.from_domain(found)


@audit_router.get(
    "",
    response_model=AuditLogListResponse,
    responses={
        **_GUARD_RESPONSES,
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    },
    dependencies=[Depends(require_role(Role.ADMIN))],
)
async def list_audit_logs(
    tenant: Annotated[TenantContext, Depends(get_tenant_context)],
    service: Annotated[AuditLogService, Depends(get_audit_log_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 50,
    action: Annotated[str | None, Query()] = None,
    entity_type: Annotated[str | None, Query(alias="entityType")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
) -> AuditLogListResponse:
    """List the resolved tenant's audit entries, newest first.

    Requires an identity with the admin role. Entries are always scoped to
    the request's authoritative tenant.

    Returns:
        AuditLogListResponse with entries and pagination

    Raises:
        HTTPException: 503 if the audit store is unavailable
    """
    filters = AuditLogFilter(
        action=action,
        entity_type=entity_type,
        user_id=user_id,
        created_from=start_date,
        created_to=end_date,
    )
    try:
        result = await service.list_entries(
            tenant.tenant_id, filters=filters, page=page, limit=limit
        )
    except RepositoryUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Audit log unavailable",
        ) from e

    return AuditLogListResponse.from_page(result)
