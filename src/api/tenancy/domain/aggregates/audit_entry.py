"""AuditEntry aggregate for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from tenancy.domain.value_objects import AuditEntryId


@dataclass(frozen=True)
class AuditEntry:
    """Immutable, tenant-scoped record of an attempted or completed action.

    Business rules:
    - An entry always carries a resolved tenant id
    - Entries are append-only; they are never updated or deleted
    """

    id: AuditEntryId
    tenant_id: str
    action: str
    entity_type: str
    ip_address: str
    user_agent: str
    created_at: datetime
    user_id: str | None = None
    entity_id: str | None = None
    changes: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = field(default=None)

    @classmethod
    def create(
        cls,
        tenant_id: str,
        action: str,
        entity_type: str,
        ip_address: str = "unknown",
        user_agent: str = "unknown",
        user_id: str | None = None,
        entity_id: str | None = None,
        changes: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditEntry:
        """Factory method for a new audit entry.

        Args:
            tenant_id: The resolved tenant the action was performed against
            action: Action name (see AuditAction for common values)
            entity_type: Kind of entity acted upon
            ip_address: Client address
            user_agent: Client user agent
            user_id: Acting user, if authenticated
            entity_id: Identifier of the entity acted upon
            changes: Field-level changes
            metadata: Free-form context

        Returns:
            A new AuditEntry stamped with a fresh id and the current time

        Raises:
            ValueError: If tenant_id, action or entity_type is empty
        """
        if not tenant_id:
            raise ValueError("AuditEntry requires a resolved tenant_id")
        if not action:
            raise ValueError("AuditEntry requires an action")
        if not entity_type:
            raise ValueError("AuditEntry requires an entity_type")

        return cls(
            id=AuditEntryId.generate(),
            tenant_id=tenant_id,
            action=action,
            entity_type=entity_type,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=datetime.now(UTC),
            user_id=user_id,
            entity_id=entity_id,
            changes=changes,
            metadata=metadata,
        )
