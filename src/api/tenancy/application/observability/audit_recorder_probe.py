"""Domain probe for audit recording.

Audit writes never fail the request that triggered them, so this probe is
the only place a lost or dropped entry becomes visible.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuditRecorderProbe(Protocol):
    """Domain probe for AuditRecorder operations."""

    def entry_recorded(
        self,
        entry_id: str,
        tenant_id: str,
        action: str,
        entity_type: str,
    ) -> None:
        """Record that an audit entry was persisted."""
        ...

    def entry_dropped(self, action: str, entity_type: str, reason: str) -> None:
        """Record that an entry was skipped because no tenant could be determined."""
        ...

    def entry_write_failed(
        self,
        action: str,
        entity_type: str,
        error: Exception,
    ) -> None:
        """Record that an entry could not be persisted."""
        ...

    def with_context(self, context: ObservationContext) -> AuditRecorderProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuditRecorderProbe:
    """Default implementation of AuditRecorderProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuditRecorderProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuditRecorderProbe(logger=self._logger, context=context)

    def entry_recorded(
        self,
        entry_id: str,
        tenant_id: str,
        action: str,
        entity_type: str,
    ) -> None:
        self._logger.info(
            "audit_entry_recorded",
            entry_id=entry_id,
            tenant_id=tenant_id,
            action=action,
            entity_type=entity_type,
            **self._get_context_kwargs(),
        )

    def entry_dropped(self, action: str, entity_type: str, reason: str) -> None:
        self._logger.warning(
            "audit_entry_dropped",
            action=action,
            entity_type=entity_type,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def entry_write_failed(
        self,
        action: str,
        entity_type: str,
        error: Exception,
    ) -> None:
        self._logger.error(
            "audit_entry_write_failed",
            action=action,
            entity_type=entity_type,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
