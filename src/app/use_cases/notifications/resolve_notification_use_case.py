"""
Resolve Notification Use Case

Records the outcome of the event behind a notification.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.audit_logger import AuditActions, ResourceTypes, build_audit_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EscalationStatus, ResolutionType
from src.domain.policies import principal_for
from src.domain.policies.notifications import resolve
from .dtos import NotificationInfo


class ResolveNotificationUseCase:
    """
    Business Rules:
    - Resolution is independent of acknowledgment (neither requires the other)
    - A notification resolves once; a second attempt is ALREADY_RESOLVED
    - The recipient or a platform administrator may resolve
    - Open escalations for the notification resolve with it
    - Creates audit event
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        actor_id: UUID,
        notification_id: UUID,
        resolution_type: ResolutionType,
        notes: Optional[str] = None,
    ) -> Result[NotificationInfo]:
        async with self.uow:
            notification = await self.uow.notifications.get_by_id(notification_id)
            actor = await self.uow.profiles.get_by_id(actor_id)
            is_platform_admin = principal_for(actor).is_platform_admin
            if notification is None or (
                notification.recipient_id != actor_id and not is_platform_admin
            ):
                return Return.err(
                    Error("NOTIFICATION_NOT_FOUND", "Notification not found")
                )

            now = utcnow()
            if not resolve(notification, resolution_type, actor_id, now):
                return Return.err(
                    Error("ALREADY_RESOLVED", "Notification is already resolved")
                )
            notification = await self.uow.notifications.update(notification)

            events = await self.uow.escalation_events.get_by_notification_ids([notification.id])
            for event in events:
                if event.status == EscalationStatus.escalated:
                    event.status = EscalationStatus.resolved
                    event.resolved_at = now
                    event.resolved_by = actor_id
                    event.notes = notes
                    await self.uow.escalation_events.update(event)

            await self.uow.audit_events.create(
                build_audit_event(
                    AuditActions.NOTIFICATION_RESOLVED,
                    ResourceTypes.NOTIFICATION,
                    actor_id=actor_id,
                    resource_id=notification.id,
                    tenant_id=notification.tenant_id,
                    details={
                        "resolution_type": ResolutionType(resolution_type).value,
                        "notification_type": notification.notification_type.value,
                    },
                )
            )
            await self.uow.commit()

        return Return.ok(NotificationInfo.from_entity(notification))
