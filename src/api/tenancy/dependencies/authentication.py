"""Credential extraction and validator wiring."""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.settings import AuthSettings, get_auth_settings
from shared_kernel.auth import JWTValidator
from shared_kernel.auth.observability import DefaultJWTValidatorProbe

# Bearer scheme for Swagger UI; the cookie takes precedence when present
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_jwt_validator() -> JWTValidator:
    """Get cached JWT validator.

    Returns:
        JWTValidator instance configured from auth settings.
    """
    settings = get_auth_settings()
    return JWTValidator(
        secret=settings.jwt_secret.get_secret_value(),
        probe=DefaultJWTValidatorProbe(),
        algorithm=settings.jwt_algorithm,
        expires_in=timedelta(seconds=settings.token_expiry_seconds),
    )


def get_credential(
    request: Request,
    settings: Annotated[AuthSettings, Depends(get_auth_settings)],
    bearer: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> str | None:
    """Read the raw credential from the auth cookie, else the Bearer header.

    Returns:
        The credential string, or None if the request carries none
    """
    cookie = request.cookies.get(settings.cookie_name)
    if cookie:
        return cookie
    if bearer is not None and bearer.credentials:
        return bearer.credentials
    return None
