"""Value objects for the tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from ulid import ULID

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def is_valid_slug(value: str) -> bool:
    """Whether a value is a well-formed, URL-safe tenant slug."""
    return bool(SLUG_PATTERN.match(value))


def is_ulid(value: str) -> bool:
    """Whether a value parses as a ULID (case-insensitive)."""
    try:
        ULID.from_str(value.upper())
    except (ValueError, TypeError):
        return False
    return True


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from a string value.

        Accepts case-insensitive input (per Crockford's Base32 spec) and
        keeps the canonical uppercase form.

        Args:
            value: ULID string

        Returns:
            TenantId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            parsed = ULID.from_str(value.upper())
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid TenantId: {value}") from e

        return cls(value=str(parsed))


@dataclass(frozen=True)
class UserId:
    """Identifier for a User.

    User ids are opaque strings issued by the account service.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("UserId must not be empty")

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


@dataclass(frozen=True)
class AuditEntryId:
    """Identifier for an AuditEntry."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> AuditEntryId:
        """Generate a new AuditEntryId using ULID."""
        return cls(value=str(ULID()))


class Role(StrEnum):
    """Staff roles, ordered by strictly increasing privilege."""

    VIEWER = "viewer"
    CASHIER = "cashier"
    MANAGER = "manager"
    ADMIN = "admin"

    @property
    def level(self) -> int:
        """Position in the hierarchy (viewer=1 ... admin=4)."""
        return _ROLE_LEVELS[self]

    @classmethod
    def parse(cls, value: str | Role) -> Role | None:
        """Parse a role name, returning None for unknown roles."""
        try:
            return cls(value)
        except ValueError:
            return None


_ROLE_LEVELS: dict[Role, int] = {
    Role.VIEWER: 1,
    Role.CASHIER: 2,
    Role.MANAGER: 3,
    Role.ADMIN: 4,
}


def role_level(role: str | Role) -> int:
    """Hierarchy level of a role name; 0 for unknown roles."""
    parsed = Role.parse(role)
    return parsed.level if parsed is not None else 0


class Language(StrEnum):
    """Storefront languages."""

    EN = "en"
    ES = "es"


@dataclass(frozen=True)
class TenantSettings:
    """Per-tenant presentation and locale settings."""

    currency: str = "USD"
    timezone: str = "UTC"
    language: Language = Language.EN
    logo: str | None = None
    primary_color: str = "#2563eb"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TenantSettings:
        """Build settings from their stored JSON form, applying defaults."""
        data = data or {}
        defaults = cls()
        try:
            language = Language(data.get("language") or defaults.language)
        except ValueError:
            language = defaults.language
        return cls(
            currency=data.get("currency") or defaults.currency,
            timezone=data.get("timezone") or defaults.timezone,
            language=language,
            logo=data.get("logo"),
            primary_color=data.get("primaryColor") or defaults.primary_color,
        )

    def as_dict(self) -> dict[str, Any]:
        """Stored JSON form of the settings."""
        result: dict[str, Any] = {
            "currency": self.currency,
            "timezone": self.timezone,
            "language": self.language.value,
            "primaryColor": self.primary_color,
        }
        if self.logo is not None:
            result["logo"] = self.logo
        return result


class AuditAction(StrEnum):
    """Common audit actions.

    Audit entries accept any action string; these are the ones the
    platform's own handlers record.
    """

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    LOGIN = "login"
    LOGOUT = "logout"
    TRANSACTION_CREATE = "transaction.create"
    TRANSACTION_CANCEL = "transaction.cancel"
    TRANSACTION_REFUND = "transaction.refund"
    STOCK_ADJUST = "stock.adjust"
    STOCK_PURCHASE = "stock.purchase"


@dataclass(frozen=True)
class AuditLogFilter:
    """Filters accepted by the audit log listing."""

    action: str | None = None
    entity_type: str | None = None
    user_id: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
