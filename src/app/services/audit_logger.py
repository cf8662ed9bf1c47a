"""
Audit Logger

Fire-and-forget writes to the append-only audit log. A failed write is
logged and never propagates into the flow that emitted it.
"""

import logging
from typing import Any, Callable, Dict, Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent

logger = logging.getLogger(__name__)


class AuditActions:
    # Auth
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    USER_CREATED = "user_created"

    # Session lifecycle
    SESSION_IDLE_WARNING_SHOWN = "auth.session_idle_warning_shown"
    SESSION_SIGNED_OUT_IDLE = "auth.session_signed_out_idle"
    SESSION_SIGNED_OUT_MAX_DURATION = "auth.session_signed_out_max_duration"
    SESSION_SIGNED_OUT_MANUAL = "auth.session_signed_out_manual"

    # Tenant
    TENANT_SWITCHED = "tenant_switched"

    # Notifications and escalation
    NOTIFICATION_RESOLVED = "notification_resolved"
    NOTIFICATIONS_ARCHIVED = "notifications_archived"
    ESCALATION_RULE_SAVED = "escalation_rule_saved"
    ESCALATION_TRIGGERED = "escalation_triggered"
    ESCALATION_RESOLVED = "escalation_resolved"


class ResourceTypes:
    USER = "user"
    TENANT = "tenant"
    TENANT_MEMBERSHIP = "tenant_membership"
    SESSION = "session"
    NOTIFICATION = "notification"
    ESCALATION_RULE = "escalation_rule"
    ESCALATION_EVENT = "escalation_event"


def build_audit_event(
    action: str,
    resource_type: str,
    actor_id: Optional[UUID] = None,
    resource_id: Optional[Any] = None,
    tenant_id: Optional[UUID] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditEvent:
    return AuditEvent(
        tenant_id=tenant_id,
        actor_id=actor_id,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        event_metadata=details or {},
        ip_address=ip_address,
        user_agent=user_agent,
    )


class AuditLogger:
    """Writes each event through its own unit of work."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]):
        self.uow_factory = uow_factory

    async def emit(
        self,
        action: str,
        resource_type: str,
        actor_id: Optional[UUID] = None,
        resource_id: Optional[Any] = None,
        tenant_id: Optional[UUID] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> bool:
        event = build_audit_event(
            action,
            resource_type,
            actor_id=actor_id,
            resource_id=resource_id,
            tenant_id=tenant_id,
            details=details,
        )
        try:
            async with self.uow_factory() as uow:
                await uow.audit_events.create(event)
                await uow.commit()
        except Exception:
            logger.warning("Audit write failed for %s", action, exc_info=True)
            return False
        return True
