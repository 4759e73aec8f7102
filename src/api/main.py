"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from tenancy.presentation.exceptions import (
    InsufficientRoleError,
    TenantAccessViolationError,
    TenantResolutionError,
)
from tenancy.presentation.routes import audit_router
from tenancy.presentation.routes import router as tenancy_router


@asynccontextmanager
async def storefront_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    configure_logging(debug=get_settings().debug)

    yield

    await close_database_connections()


app = FastAPI(
    title="Storefront API",
    description="Multi-tenant storefront core: tenant resolution, access guard and audit log",
    version=__version__,
    lifespan=storefront_lifespan,
)


@app.exception_handler(TenantAccessViolationError)
async def tenant_access_violation_handler(
    request: Request, exc: TenantAccessViolationError
) -> JSONResponse:
    """Reject a cross-tenant request, pointing the client at the forbidden page."""
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={
            "detail": "Access denied: you do not have access to this store",
            "redirect": exc.redirect_path,
        },
    )


@app.exception_handler(InsufficientRoleError)
async def insufficient_role_handler(
    request: Request, exc: InsufficientRoleError
) -> JSONResponse:
    """Reject an identity lacking the required role."""
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "Insufficient permissions"},
    )


@app.exception_handler(TenantResolutionError)
async def tenant_resolution_handler(
    request: Request, exc: TenantResolutionError
) -> JSONResponse:
    """Fail closed when no tenant can be determined."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Tenant could not be resolved"},
    )


app.include_router(tenancy_router)
app.include_router(audit_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
