"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly,
in particular STOREFRONT_AUTH_JWT_SECRET.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        STOREFRONT_DB_HOST: Database host (default: localhost)
        STOREFRONT_DB_PORT: Database port (default: 5432)
        STOREFRONT_DB_DATABASE: Database name (default: storefront)
        STOREFRONT_DB_USERNAME: Database user (default: storefront)
        STOREFRONT_DB_PASSWORD: Database password (required in production)
        STOREFRONT_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        STOREFRONT_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="storefront", description="Database name")
    username: str = Field(default="storefront", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AuthSettings(BaseSettings):
    """Signed credential settings.

    Environment variables:
        STOREFRONT_AUTH_JWT_SECRET: HMAC signing secret for credentials
        STOREFRONT_AUTH_JWT_ALGORITHM: Signing algorithm (default: HS256)
        STOREFRONT_AUTH_TOKEN_EXPIRY_SECONDS: Credential lifetime (default: 7 days)
        STOREFRONT_AUTH_COOKIE_NAME: Cookie carrying the credential (default: auth-token)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    jwt_secret: SecretStr = Field(
        default=SecretStr("change-me-in-production"),
        description="Secret used to sign and verify credentials",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    token_expiry_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        description="Credential lifetime in seconds",
        gt=0,
    )
    cookie_name: str = Field(
        default="auth-token",
        description="Name of the cookie carrying the credential",
    )

    @model_validator(mode="after")
    def validate_secret(self) -> "AuthSettings":
        """Reject an empty signing secret."""
        if not self.jwt_secret.get_secret_value():
            raise ValueError("jwt_secret must not be empty")
        return self


class TenancySettings(BaseSettings):
    """Tenant resolution settings.

    Environment variables:
        STOREFRONT_TENANCY_DEFAULT_TENANT_SLUG: Slug of the fallback tenant (default: default)
        STOREFRONT_TENANCY_DEFAULT_FALLBACK_ENABLED: Resolve anonymous requests without
            any tenant signal to the default tenant (default: true)
        STOREFRONT_TENANCY_QUERY_PARAM: Query parameter naming a tenant slug (default: tenant)
        STOREFRONT_TENANCY_SLUG_HEADER: Header carrying a tenant slug (default: X-Tenant-Slug)
        STOREFRONT_TENANCY_ID_HEADER: Header carrying a tenant id or slug (default: X-Tenant-ID)
        STOREFRONT_TENANCY_RESERVED_PATH_SEGMENTS: Referer path segments that are never
            tenant slugs (JSON list)
        STOREFRONT_TENANCY_IGNORED_HOST_LABELS: Host labels that are never subdomains (JSON list)
        STOREFRONT_TENANCY_API_PATH_PREFIX: Path prefix of API routes (default: /api/)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_tenant_slug: str = Field(
        default="default",
        description="Slug of the well-known fallback tenant",
    )
    default_fallback_enabled: bool = Field(
        default=True,
        description="Whether anonymous requests fall back to the default tenant",
    )
    query_param: str = Field(default="tenant", description="Tenant query parameter")
    slug_header: str = Field(default="X-Tenant-Slug", description="Tenant slug header")
    id_header: str = Field(default="X-Tenant-ID", description="Tenant id header")
    reserved_path_segments: list[str] = Field(
        default_factory=lambda: ["api", "admin", "login", "signup"],
        description="First path segments that never name a tenant",
    )
    reserved_path_prefix: str = Field(
        default="_",
        description="Prefix marking internal path segments",
    )
    ignored_host_labels: list[str] = Field(
        default_factory=lambda: ["www", "localhost", "127.0.0.1"],
        description="Leading host labels that are never tenant subdomains",
    )
    api_path_prefix: str = Field(
        default="/api/",
        description="Path prefix identifying API requests",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Storefront API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def auth(self) -> AuthSettings:
        """Get credential settings."""
        return get_auth_settings()

    @property
    def tenancy(self) -> TenancySettings:
        """Get tenant resolution settings."""
        return get_tenancy_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Get cached credential settings."""
    return AuthSettings()


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenant resolution settings."""
    return TenancySettings()
