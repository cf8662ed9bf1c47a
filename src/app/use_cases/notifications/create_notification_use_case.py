"""
Create Notification Use Case
"""

from typing import Any, Dict, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Notification, NotificationPriority, NotificationType
from src.domain.policies.notifications import classify
from .dtos import NotificationInfo


class CreateNotificationUseCase:
    """
    Use case for recording a notification.

    Business Rules:
    - requires_resolution and retention_category derive from the type only;
      callers cannot override them
    - Recipient must have a profile
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        recipient_id: UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.normal,
        tenant_id: Optional[UUID] = None,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Result[NotificationInfo]:
        async with self.uow:
            recipient = await self.uow.profiles.get_by_id(recipient_id)
            if recipient is None:
                return Return.err(Error("RECIPIENT_NOT_FOUND", "Recipient not found"))

            notification = classify(
                Notification(
                    recipient_id=recipient_id,
                    tenant_id=tenant_id,
                    notification_type=NotificationType(notification_type),
                    priority=NotificationPriority(priority),
                    title=title,
                    message=message,
                    record_type=record_type,
                    record_id=record_id,
                    event_metadata=metadata or {},
                )
            )
            notification = await self.uow.notifications.create(notification)
            await self.uow.commit()

        return Return.ok(NotificationInfo.from_entity(notification))
