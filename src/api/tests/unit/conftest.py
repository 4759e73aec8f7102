"""Unit test fixtures shared across bounded contexts."""

import pytest

from infrastructure.settings import (
    get_auth_settings,
    get_database_settings,
    get_settings,
    get_tenancy_settings,
)
from tenancy.dependencies.authentication import get_jwt_validator


@pytest.fixture(autouse=True)
def clear_settings_caches():
    """Reset cached settings so environment changes in one test never leak."""
    caches = (
        get_settings,
        get_database_settings,
        get_auth_settings,
        get_tenancy_settings,
        get_jwt_validator,
    )
    for cached in caches:
        cached.cache_clear()
    yield
    for cached in caches:
        cached.cache_clear()
